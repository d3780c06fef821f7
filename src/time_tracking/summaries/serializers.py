from __future__ import annotations

from ..common.datetime_utils import format_hhmm
from ..settings.model import TrackingSettings
from .model import DailySummary


def summary_to_dict(summary: DailySummary, settings: TrackingSettings) -> dict:
    """Presentation view; rounding is applied here and nowhere earlier."""
    worked = settings.round_seconds(summary.worked_seconds)
    on_break = settings.round_seconds(summary.break_seconds)
    return {
        "userId": summary.user_id,
        "date": summary.day.isoformat(),
        "workedSeconds": worked,
        "breakSeconds": on_break,
        "workedHours": format_hhmm(worked),
        "sessionCount": summary.session_count,
        "anomalous": summary.anomalous,
    }
