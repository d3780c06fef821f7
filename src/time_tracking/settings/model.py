from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_MAX_REPORT_DAYS, DEFAULT_TIMEZONE


@dataclass(frozen=True)
class TrackingSettings:
    """Effective tracking configuration for a deployment or a single user."""

    rounding_minutes: int = 0
    max_break_minutes: int = 0
    enforce_max_break: bool = False
    timezone: str = DEFAULT_TIMEZONE
    max_report_days: int = DEFAULT_MAX_REPORT_DAYS

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def round_seconds(self, seconds: int) -> int:
        """Round to the configured granularity (nearest, half up)."""
        if self.rounding_minutes <= 0:
            return int(seconds)
        step = self.rounding_minutes * 60
        return ((int(seconds) + step // 2) // step) * step

    def merged(self, override: "SettingsOverride") -> "TrackingSettings":
        values = {k: v for k, v in override.as_dict().items() if v is not None}
        return replace(self, **values)


@dataclass(frozen=True)
class SettingsOverride:
    """One stored settings row; ``None`` fields fall back to the wider scope."""

    rounding_minutes: Optional[int] = None
    max_break_minutes: Optional[int] = None
    enforce_max_break: Optional[bool] = None
    timezone: Optional[str] = None
    max_report_days: Optional[int] = None

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def updated(self, values: Mapping[str, Any]) -> "SettingsOverride":
        return replace(self, **values)


SETTINGS_FIELDS = tuple(f.name for f in fields(SettingsOverride))
