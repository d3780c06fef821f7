"""Pure interval arithmetic used by the aggregator (no storage access)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from ..common.datetime_utils import local_midnight


@dataclass(frozen=True)
class DayFragment:
    day: date
    start: datetime
    end: datetime

    @property
    def seconds(self) -> int:
        return int((self.end - self.start).total_seconds())


def split_by_day(start: datetime, end: datetime, tz: ZoneInfo) -> list[DayFragment]:
    """Cut ``[start, end)`` at every local midnight of ``tz``.

    A 23:00-01:00 interval yields two one-hour fragments, each attributed to
    its own calendar day. Empty or inverted intervals yield nothing.
    """
    if end <= start:
        return []

    fragments: list[DayFragment] = []
    day = start.astimezone(tz).date()
    cursor = start
    while cursor < end:
        boundary = local_midnight(day + timedelta(days=1), tz)
        fragment_end = min(end, boundary)
        if fragment_end > cursor:
            fragments.append(DayFragment(day=day, start=cursor, end=fragment_end))
        cursor = max(cursor, fragment_end)
        day += timedelta(days=1)
    return fragments


def overlap_seconds(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> int:
    start = max(a_start, b_start)
    end = min(a_end, b_end)
    if end <= start:
        return 0
    return int((end - start).total_seconds())
