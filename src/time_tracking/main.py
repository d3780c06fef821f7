from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .common.web import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .core.constants import API_BASE_PATH
from .database.bootstrap import apply_schema, list_tables
from .reports.controller import register as register_reports
from .sessions.controller import register as register_sessions
from .settings.controller import register as register_settings
from .summaries.controller import register as register_summaries

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        backend = getattr(settings, "STORAGE_BACKEND", "mysql")
        logger.info(
            "settings=%s backend=%s db=%s@%s:%s/%s",
            settings_module,
            backend,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            storage_backend=backend,
            default_timezone=getattr(settings, "DEFAULT_TIMEZONE", "UTC"),
            default_max_report_days=getattr(settings, "DEFAULT_MAX_REPORT_DAYS", 93),
            notifications_enabled=bool(getattr(settings, "NOTIFICATIONS_ENABLED", True)),
        )

    app.extensions["time_tracking"] = container

    register_error_handlers(app)
    register_settings(app, container)
    register_sessions(app, container)
    register_summaries(app, container)
    register_reports(app, container)

    @app.route(f"{API_BASE_PATH}/health", methods=["GET"], endpoint="tt_health")
    def health():
        return jsonify({"status": "ok", "time": container.clock.now().isoformat()})

    return app


def run() -> None:
    app = create_app()
    app.run(debug=app.config["DEBUG"])
