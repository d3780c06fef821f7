from __future__ import annotations

from typing import Iterable, Mapping, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import UserSummary


class MySQLUserDirectory:
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, user_id: str) -> Optional[UserSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, username, email
                FROM users
                WHERE user_id=%s
                """,
                (str(user_id),),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_many(self, user_ids: Iterable[str]) -> Mapping[str, UserSummary]:
        ids = sorted({str(u) for u in user_ids})
        if not ids:
            return {}

        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id, full_name, username, email
                FROM users
                WHERE user_id IN ({placeholders})
                """,
                tuple(ids),
            )
            return {str(r["user_id"]): _to_user(r) for r in fetchall(cur)}


def _to_user(row: dict) -> UserSummary:
    return UserSummary(
        user_id=str(row["user_id"]),
        full_name=row["full_name"],
        username=row["username"],
        email=row.get("email"),
    )
