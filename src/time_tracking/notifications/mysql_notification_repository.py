from __future__ import annotations

from typing import Optional

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor


class MySQLNotificationRepository:
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: str,
        content: str,
        link: Optional[str] = None,
        type: NotificationType = NotificationType.SYSTEM,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(user_id, content, link, type)
                VALUES(%s,%s,%s,%s)
                """,
                (str(user_id), content, link, type.value),
            )
            return int(cur.lastrowid)
