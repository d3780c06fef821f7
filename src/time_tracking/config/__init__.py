import os


def get_settings_module() -> str:
    # APP_ENV selects the settings module, default is development
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "time_tracking.config.production"

    if env in {"test", "testing"}:
        return "time_tracking.config.testing"

    return "time_tracking.config.development"
