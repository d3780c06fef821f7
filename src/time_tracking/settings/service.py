from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..common.datetime_utils import load_zone
from ..common.validators import require_int
from ..core.constants import GLOBAL_SETTINGS_SCOPE, MAX_REPORT_DAYS_LIMIT, MAX_ROUNDING_MINUTES
from ..core.exceptions import ValidationError
from .model import SETTINGS_FIELDS, SettingsOverride, TrackingSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


class SettingsService:
    """Deployment-wide settings with optional per-user overrides."""

    def __init__(self, settings: SettingsRepository, *, defaults: Optional[TrackingSettings] = None):
        self._settings = settings
        self._defaults = defaults or TrackingSettings()

    def get_global(self) -> TrackingSettings:
        row = self._settings.get(GLOBAL_SETTINGS_SCOPE)
        return self._defaults.merged(row) if row else self._defaults

    def get_effective(self, user_id: Optional[str] = None) -> TrackingSettings:
        effective = self.get_global()
        if user_id is None:
            return effective
        row = self._settings.get(str(user_id))
        return effective.merged(row) if row else effective

    def get_override(self, user_id: str) -> SettingsOverride:
        return self._settings.get(str(user_id)) or SettingsOverride()

    def update(self, values: Mapping[str, Any], *, user_id: Optional[str] = None) -> TrackingSettings:
        """Partially update the global row, or the override row of ``user_id``.

        A ``None`` value clears the field so it falls back to the wider scope.
        """
        unknown = set(values) - set(SETTINGS_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        if not values:
            raise ValidationError("No settings to update")

        cleaned = {name: _validate(name, value) for name, value in values.items()}

        scope = GLOBAL_SETTINGS_SCOPE if user_id is None else str(user_id)
        current = self._settings.get(scope) or SettingsOverride()
        self._settings.save(scope, current.updated(cleaned))
        logger.info("Tracking settings updated (scope=%s, fields=%s)", scope, ",".join(sorted(cleaned)))

        return self.get_effective(user_id)


def _validate(name: str, value: Any) -> Any:
    if value is None:
        return None

    if name == "rounding_minutes":
        return require_int(value, "roundingMinutes", minimum=0, maximum=MAX_ROUNDING_MINUTES)
    if name == "max_break_minutes":
        return require_int(value, "maxBreakMinutes", minimum=0)
    if name == "max_report_days":
        return require_int(value, "maxReportDays", minimum=1, maximum=MAX_REPORT_DAYS_LIMIT)
    if name == "enforce_max_break":
        if not isinstance(value, bool):
            raise ValidationError("enforceMaxBreak must be true or false")
        return value
    if name == "timezone":
        if not isinstance(value, str) or not value.strip():
            raise ValidationError("timezone must be a non-empty string")
        load_zone(value.strip())
        return value.strip()

    raise ValidationError(f"Unknown setting: {name}")
