from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class DailySummary:
    """Worked/break totals of one user on one local calendar day (exact seconds)."""

    user_id: str
    day: date
    worked_seconds: int = 0
    break_seconds: int = 0
    session_count: int = 0
    anomalous: bool = False

    @classmethod
    def empty(cls, user_id: str, day: date) -> "DailySummary":
        return cls(user_id=user_id, day=day)
