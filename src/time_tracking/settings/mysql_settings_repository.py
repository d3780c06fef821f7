from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import SettingsOverride


class MySQLSettingsRepository:
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, scope: str) -> Optional[SettingsOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT rounding_minutes, max_break_minutes, enforce_max_break, timezone, max_report_days
                FROM tracking_settings
                WHERE scope=%s
                """,
                (scope,),
            )
            r = fetchone(cur)
            if not r:
                return None
            enforce = r.get("enforce_max_break")
            return SettingsOverride(
                rounding_minutes=r.get("rounding_minutes"),
                max_break_minutes=r.get("max_break_minutes"),
                enforce_max_break=None if enforce is None else bool(enforce),
                timezone=r.get("timezone"),
                max_report_days=r.get("max_report_days"),
            )

    def save(self, scope: str, settings: SettingsOverride) -> None:
        enforce = settings.enforce_max_break
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tracking_settings(scope, rounding_minutes, max_break_minutes, enforce_max_break, timezone, max_report_days)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    rounding_minutes=VALUES(rounding_minutes),
                    max_break_minutes=VALUES(max_break_minutes),
                    enforce_max_break=VALUES(enforce_max_break),
                    timezone=VALUES(timezone),
                    max_report_days=VALUES(max_report_days)
                """,
                (
                    scope,
                    settings.rounding_minutes,
                    settings.max_break_minutes,
                    None if enforce is None else int(enforce),
                    settings.timezone,
                    settings.max_report_days,
                ),
            )
