from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, Sequence

import mysql.connector

from ..core.enums import SessionStatus
from ..core.exceptions import ConflictError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, is_duplicate_key, to_db_datetime
from .model import BreakInterval, SessionFilter, WorkSession

_SESSION_COLUMNS = "s.session_id, s.user_id, s.started_at, s.ended_at, s.notes, s.source"


class MySQLSessionStore:
    """SessionStore backed by InnoDB.

    ``for_user`` runs one transaction that starts by locking the user's row in
    ``tracking_user_locks``; units of different users never wait on each other.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def for_user(self, user_id: str) -> Iterator["_MySQLUserUnit"]:
        user_id = str(user_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT IGNORE INTO tracking_user_locks(user_id) VALUES(%s)", (user_id,))
            cur.execute("SELECT user_id FROM tracking_user_locks WHERE user_id=%s FOR UPDATE", (user_id,))
            fetchone(cur)
            yield _MySQLUserUnit(cur, user_id)

    def get_session(self, session_id: int) -> Optional[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            items = _load_sessions(cur, "s.session_id=%s", (int(session_id),))
            return items[0] if items else None

    def get_open_session(self, user_id: str) -> Optional[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            items = _load_sessions(cur, "s.user_id=%s AND s.ended_at IS NULL", (str(user_id),))
            return items[0] if items else None

    def list_open_sessions(self) -> Sequence[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            return _load_sessions(cur, "s.ended_at IS NULL", (), order="s.started_at DESC")

    def list_user_sessions(
        self,
        user_id: str,
        *,
        session_filter: SessionFilter,
        offset: int,
        limit: int,
    ) -> tuple[Sequence[WorkSession], int]:
        clauses = ["s.user_id=%s"]
        params: list[object] = [str(user_id)]

        if session_filter.started_from is not None:
            clauses.append("s.started_at >= %s")
            params.append(to_db_datetime(session_filter.started_from))
        if session_filter.started_to is not None:
            clauses.append("s.started_at < %s")
            params.append(to_db_datetime(session_filter.started_to))
        if session_filter.status == SessionStatus.OPEN:
            clauses.append("s.ended_at IS NULL")
        elif session_filter.status == SessionStatus.CLOSED:
            clauses.append("s.ended_at IS NOT NULL")

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM work_sessions s WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            items = _load_sessions(
                cur,
                where,
                tuple(params),
                order="s.started_at DESC, s.session_id DESC",
                limit=(int(limit), int(offset)),
            )
            return items, total

    def list_overlapping(self, user_id: str, *, start: datetime, end: datetime) -> Sequence[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            return _load_sessions(
                cur,
                "s.user_id=%s AND s.started_at < %s AND (s.ended_at IS NULL OR s.ended_at > %s)",
                (str(user_id), to_db_datetime(end), to_db_datetime(start)),
            )


class _MySQLUserUnit:
    def __init__(self, cur, user_id: str):
        self._cur = cur
        self._user_id = user_id

    def get_open_session(self) -> Optional[WorkSession]:
        items = _load_sessions(self._cur, "s.user_id=%s AND s.ended_at IS NULL", (self._user_id,))
        return items[0] if items else None

    def get_session(self, session_id: int) -> Optional[WorkSession]:
        items = _load_sessions(self._cur, "s.session_id=%s AND s.user_id=%s", (int(session_id), self._user_id))
        return items[0] if items else None

    def _require_session(self, session_id: int) -> WorkSession:
        session = self.get_session(session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    def create_session(self, *, started_at: datetime, source: Optional[str] = None) -> WorkSession:
        try:
            self._cur.execute(
                """
                INSERT INTO work_sessions(user_id, started_at, notes, source)
                VALUES(%s,%s,%s,%s)
                """,
                (self._user_id, to_db_datetime(started_at), "", source),
            )
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                raise ConflictError("User already has an open session") from exc
            raise
        return WorkSession(
            session_id=int(self._cur.lastrowid),
            user_id=self._user_id,
            started_at=started_at,
            notes="",
            source=source,
        )

    def close_session(self, *, session_id: int, ended_at: datetime, notes: Optional[str] = None) -> WorkSession:
        session = self._require_session(session_id)
        if not session.is_open:
            raise NotFoundError(f"Session {session_id} is not open")
        if session.open_break is not None:
            raise ConflictError("Session still has an open break")

        self._cur.execute(
            """
            UPDATE work_sessions
            SET ended_at=%s, notes=COALESCE(%s, notes)
            WHERE session_id=%s AND ended_at IS NULL
            """,
            (to_db_datetime(ended_at), notes, int(session_id)),
        )
        return self._require_session(session_id)

    def create_break(self, *, session_id: int, started_at: datetime) -> BreakInterval:
        session = self._require_session(session_id)
        if not session.is_open:
            raise ConflictError("Breaks can only start inside an open session")
        if session.open_break is not None:
            raise ConflictError("A break is already in progress")

        try:
            self._cur.execute(
                "INSERT INTO break_intervals(session_id, started_at) VALUES(%s,%s)",
                (int(session_id), to_db_datetime(started_at)),
            )
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                raise ConflictError("A break is already in progress") from exc
            raise
        return BreakInterval(break_id=int(self._cur.lastrowid), session_id=int(session_id), started_at=started_at)

    def close_break(self, *, break_id: int, ended_at: datetime) -> BreakInterval:
        self._cur.execute(
            """
            UPDATE break_intervals b
            JOIN work_sessions s ON s.session_id = b.session_id
            SET b.ended_at=%s
            WHERE b.break_id=%s AND b.ended_at IS NULL AND s.user_id=%s
            """,
            (to_db_datetime(ended_at), int(break_id), self._user_id),
        )
        if self._cur.rowcount <= 0:
            raise NotFoundError(f"Break {break_id} is not open")

        self._cur.execute(
            "SELECT break_id, session_id, started_at, ended_at FROM break_intervals WHERE break_id=%s",
            (int(break_id),),
        )
        return _to_break(fetchone(self._cur))

    def update_notes(self, *, session_id: int, notes: str) -> WorkSession:
        self._require_session(session_id)
        self._cur.execute(
            "UPDATE work_sessions SET notes=%s WHERE session_id=%s",
            (notes, int(session_id)),
        )
        return self._require_session(session_id)


def _load_sessions(
    cur,
    where: str,
    params: tuple,
    *,
    order: str = "s.started_at ASC",
    limit: Optional[tuple[int, int]] = None,
) -> list[WorkSession]:
    sql = f"SELECT {_SESSION_COLUMNS} FROM work_sessions s WHERE {where} ORDER BY {order}"
    if limit is not None:
        sql += " LIMIT %s OFFSET %s"
        params = params + limit
    cur.execute(sql, params)
    rows = fetchall(cur)
    if not rows:
        return []

    ids = [int(r["session_id"]) for r in rows]
    placeholders = ",".join(["%s"] * len(ids))
    cur.execute(
        f"""
        SELECT break_id, session_id, started_at, ended_at
        FROM break_intervals
        WHERE session_id IN ({placeholders})
        ORDER BY started_at ASC, break_id ASC
        """,
        tuple(ids),
    )
    breaks: dict[int, list[BreakInterval]] = {}
    for r in fetchall(cur):
        brk = _to_break(r)
        breaks.setdefault(brk.session_id, []).append(brk)

    return [
        WorkSession(
            session_id=int(r["session_id"]),
            user_id=str(r["user_id"]),
            started_at=from_db_datetime(r["started_at"]),
            ended_at=from_db_datetime(r.get("ended_at")),
            notes=r.get("notes") or "",
            source=r.get("source"),
            breaks=tuple(breaks.get(int(r["session_id"]), ())),
        )
        for r in rows
    ]


def _to_break(row: dict) -> BreakInterval:
    return BreakInterval(
        break_id=int(row["break_id"]),
        session_id=int(row["session_id"]),
        started_at=from_db_datetime(row["started_at"]),
        ended_at=from_db_datetime(row.get("ended_at")),
    )
