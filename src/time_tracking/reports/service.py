from __future__ import annotations

import csv
import io
import logging
from datetime import date
from typing import Mapping, Optional, Sequence

from ..common.datetime_utils import format_hhmm
from ..core.exceptions import NotFoundError, ValidationError
from ..settings.service import SettingsService
from ..summaries.aggregator import Aggregator
from ..summaries.model import DailySummary
from ..users.directory import UserDirectory
from ..users.model import UserSummary

logger = logging.getLogger(__name__)

REPORT_CSV_FIELDS = [
    "user_id",
    "full_name",
    "username",
    "date",
    "worked_hours",
    "worked_seconds",
    "break_seconds",
    "session_count",
    "anomalous",
]


class ReportGenerator:
    """Builds rectangular (user x day) reports from daily summaries."""

    def __init__(self, aggregator: Aggregator, users: UserDirectory, settings: SettingsService):
        self._aggregator = aggregator
        self._users = users
        self._settings = settings

    def generate(self, user_ids: Sequence[str], start: date, end: date) -> dict[str, list[DailySummary]]:
        ids = _unique_ids(user_ids)
        if not ids:
            raise ValidationError("userIds must contain at least one user")
        if start > end:
            raise ValidationError("startDate must not be after endDate")

        max_days = self._settings.get_global().max_report_days
        span = (end - start).days + 1
        if span > max_days:
            raise ValidationError(f"Report range is {span} days; the maximum is {max_days}")

        known = self._users.get_many(ids)
        missing = [uid for uid in ids if uid not in known]
        if missing:
            raise NotFoundError(f"Unknown user(s): {', '.join(missing)}")

        logger.info("Generating report for %s user(s), %s..%s", len(ids), start.isoformat(), end.isoformat())
        return {uid: self._aggregator.summarize_range(uid, start, end) for uid in ids}

    def users_for(self, report: Mapping[str, Sequence[DailySummary]]) -> Mapping[str, UserSummary]:
        return self._users.get_many(report.keys())

    def export_csv(
        self,
        report: Mapping[str, Sequence[DailySummary]],
        users: Optional[Mapping[str, UserSummary]] = None,
    ) -> bytes:
        """One CSV row per user and day. UTF-8 with BOM so spreadsheets detect the encoding."""
        users = users if users is not None else self.users_for(report)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_CSV_FIELDS, extrasaction="ignore")
        writer.writeheader()

        for uid, rows in report.items():
            user = users.get(uid)
            rounding = self._settings.get_effective(uid)
            for r in rows:
                worked = rounding.round_seconds(r.worked_seconds)
                writer.writerow(
                    {
                        "user_id": uid,
                        "full_name": user.full_name if user else "",
                        "username": user.username if user else "",
                        "date": r.day.isoformat(),
                        "worked_hours": format_hhmm(worked),
                        "worked_seconds": worked,
                        "break_seconds": rounding.round_seconds(r.break_seconds),
                        "session_count": r.session_count,
                        "anomalous": "yes" if r.anomalous else "",
                    }
                )

        return out.getvalue().encode("utf-8-sig")


def _unique_ids(user_ids: Sequence[str]) -> list[str]:
    seen: dict[str, None] = {}
    for uid in user_ids or ():
        key = str(uid).strip()
        if key:
            seen.setdefault(key, None)
    return list(seen)
