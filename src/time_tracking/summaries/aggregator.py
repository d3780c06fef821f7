from __future__ import annotations

import calendar
import logging
from datetime import date, datetime
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.clock import Clock, SystemClock
from ..common.datetime_utils import day_window, iter_days
from ..common.validators import require_int
from ..core.exceptions import ValidationError
from ..sessions.model import WorkSession
from ..sessions.store import SessionStore
from ..settings.service import SettingsService
from .intervals import overlap_seconds, split_by_day
from .model import DailySummary

logger = logging.getLogger(__name__)


class Aggregator:
    """Derives per-user, per-day totals from raw sessions and breaks.

    Days are calendar days of the user's effective time zone. Open sessions
    and open breaks are measured up to the current clock time.
    """

    def __init__(self, store: SessionStore, settings: SettingsService, *, clock: Optional[Clock] = None):
        self._store = store
        self._settings = settings
        self._clock = clock or SystemClock()

    def summarize_day(self, user_id: str, day: date) -> DailySummary:
        return self.summarize_range(user_id, day, day)[0]

    def summarize_range(self, user_id: str, from_day: date, to_day: date) -> list[DailySummary]:
        if from_day > to_day:
            raise ValidationError("Start date must not be after end date")

        tz = self._settings.get_effective(user_id).zone
        now = self._clock.now()
        range_start, _ = day_window(from_day, tz)
        _, range_end = day_window(to_day, tz)

        sessions = self._store.list_overlapping(str(user_id), start=range_start, end=range_end)
        return [summarize_sessions(str(user_id), day, sessions, tz=tz, now=now) for day in iter_days(from_day, to_day)]

    def summarize_month(self, user_id: str, year: object, month: object) -> list[DailySummary]:
        y = require_int(year, "year", minimum=1970, maximum=9999)
        m = require_int(month, "month", minimum=1, maximum=12)
        last = calendar.monthrange(y, m)[1]
        return self.summarize_range(user_id, date(y, m, 1), date(y, m, last))


def summarize_sessions(
    user_id: str,
    day: date,
    sessions: Sequence[WorkSession],
    *,
    tz: ZoneInfo,
    now: datetime,
) -> DailySummary:
    """Totals for ``day`` from the fragments of ``sessions`` that fall inside it."""
    window_start, window_end = day_window(day, tz)

    worked = 0
    on_break = 0
    count = 0
    anomalous = False

    for s in sessions:
        session_end = s.ended_at or max(now, s.started_at)
        fragments = [f for f in split_by_day(s.started_at, session_end, tz) if f.day == day]

        if not fragments:
            if window_start <= s.started_at < window_end:
                count += 1
            continue

        count += 1
        fragment = sum(f.seconds for f in fragments)
        fragment_break = sum(
            overlap_seconds(b.started_at, b.ended_at or session_end, f.start, f.end)
            for f in fragments
            for b in s.breaks
        )

        fragment_worked = fragment - fragment_break
        if fragment_worked < 0:
            anomalous = True
            logger.warning(
                "Break time exceeds session time (user=%s, session=%s, day=%s, session_s=%s, break_s=%s); clamped to 0",
                user_id,
                s.session_id,
                day.isoformat(),
                fragment,
                fragment_break,
            )
            fragment_worked = 0

        worked += fragment_worked
        on_break += fragment_break

    return DailySummary(
        user_id=user_id,
        day=day,
        worked_seconds=worked,
        break_seconds=on_break,
        session_count=count,
        anomalous=anomalous,
    )
