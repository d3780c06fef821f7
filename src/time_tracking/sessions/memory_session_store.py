from __future__ import annotations

import itertools
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Iterator, Optional, Sequence

from ..core.enums import SessionStatus
from ..core.exceptions import ConflictError, NotFoundError
from .model import BreakInterval, SessionFilter, WorkSession


class InMemorySessionStore:
    """Process-local SessionStore.

    Writers for one user are serialized by that user's lock; staged changes
    become visible to readers in a single step when the unit commits.
    """

    def __init__(self) -> None:
        self._sessions: dict[int, WorkSession] = {}
        self._data_lock = threading.Lock()
        self._registry_lock = threading.Lock()
        self._user_locks: dict[str, threading.Lock] = {}
        self._session_ids = itertools.count(1)
        self._break_ids = itertools.count(1)

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._user_locks.get(user_id)
            if lock is None:
                lock = self._user_locks[user_id] = threading.Lock()
            return lock

    def _next_session_id(self) -> int:
        with self._data_lock:
            return next(self._session_ids)

    def _next_break_id(self) -> int:
        with self._data_lock:
            return next(self._break_ids)

    def _snapshot(self) -> list[WorkSession]:
        with self._data_lock:
            return list(self._sessions.values())

    def _publish(self, staged: dict[int, WorkSession]) -> None:
        with self._data_lock:
            self._sessions.update(staged)

    @contextmanager
    def for_user(self, user_id: str) -> Iterator["_MemoryUserUnit"]:
        user_id = str(user_id)
        with self._lock_for(user_id):
            owned = {s.session_id: s for s in self._snapshot() if s.user_id == user_id}
            unit = _MemoryUserUnit(self, user_id, owned)
            yield unit
            self._publish(unit.changed)

    def get_session(self, session_id: int) -> Optional[WorkSession]:
        with self._data_lock:
            return self._sessions.get(int(session_id))

    def get_open_session(self, user_id: str) -> Optional[WorkSession]:
        for s in self._snapshot():
            if s.user_id == str(user_id) and s.is_open:
                return s
        return None

    def list_open_sessions(self) -> Sequence[WorkSession]:
        items = [s for s in self._snapshot() if s.is_open]
        items.sort(key=lambda s: s.started_at, reverse=True)
        return items

    def list_user_sessions(
        self,
        user_id: str,
        *,
        session_filter: SessionFilter,
        offset: int,
        limit: int,
    ) -> tuple[Sequence[WorkSession], int]:
        items = [
            s
            for s in self._snapshot()
            if s.user_id == str(user_id)
            and session_filter.accepts_start(s.started_at)
            and (session_filter.status is None or s.status == session_filter.status)
        ]
        items.sort(key=lambda s: (s.started_at, s.session_id), reverse=True)
        return items[offset : offset + limit], len(items)

    def list_overlapping(self, user_id: str, *, start: datetime, end: datetime) -> Sequence[WorkSession]:
        items = [
            s
            for s in self._snapshot()
            if s.user_id == str(user_id)
            and s.started_at < end
            and (s.ended_at is None or s.ended_at > start)
        ]
        items.sort(key=lambda s: s.started_at)
        return items


class _MemoryUserUnit:
    def __init__(self, store: InMemorySessionStore, user_id: str, owned: dict[int, WorkSession]):
        self._store = store
        self._user_id = user_id
        self._sessions = owned
        self.changed: dict[int, WorkSession] = {}

    def _put(self, session: WorkSession) -> WorkSession:
        self._sessions[session.session_id] = session
        self.changed[session.session_id] = session
        return session

    def _require_session(self, session_id: int) -> WorkSession:
        session = self._sessions.get(int(session_id))
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    def get_open_session(self) -> Optional[WorkSession]:
        for s in self._sessions.values():
            if s.status == SessionStatus.OPEN:
                return s
        return None

    def get_session(self, session_id: int) -> Optional[WorkSession]:
        return self._sessions.get(int(session_id))

    def create_session(self, *, started_at: datetime, source: Optional[str] = None) -> WorkSession:
        if self.get_open_session() is not None:
            raise ConflictError("User already has an open session")
        session = WorkSession(
            session_id=self._store._next_session_id(),
            user_id=self._user_id,
            started_at=started_at,
            source=source,
        )
        return self._put(session)

    def close_session(self, *, session_id: int, ended_at: datetime, notes: Optional[str] = None) -> WorkSession:
        session = self._require_session(session_id)
        if not session.is_open:
            raise NotFoundError(f"Session {session_id} is not open")
        if session.open_break is not None:
            raise ConflictError("Session still has an open break")

        closed = replace(session, ended_at=ended_at, notes=session.notes if notes is None else notes)
        return self._put(closed)

    def create_break(self, *, session_id: int, started_at: datetime) -> BreakInterval:
        session = self._require_session(session_id)
        if not session.is_open:
            raise ConflictError("Breaks can only start inside an open session")
        if session.open_break is not None:
            raise ConflictError("A break is already in progress")

        brk = BreakInterval(break_id=self._store._next_break_id(), session_id=session.session_id, started_at=started_at)
        self._put(replace(session, breaks=session.breaks + (brk,)))
        return brk

    def close_break(self, *, break_id: int, ended_at: datetime) -> BreakInterval:
        for session in self._sessions.values():
            for idx, brk in enumerate(session.breaks):
                if brk.break_id != int(break_id):
                    continue
                if not brk.is_open:
                    raise NotFoundError(f"Break {break_id} is not open")
                closed = replace(brk, ended_at=ended_at)
                breaks = session.breaks[:idx] + (closed,) + session.breaks[idx + 1 :]
                self._put(replace(session, breaks=breaks))
                return closed
        raise NotFoundError(f"Break {break_id} not found")

    def update_notes(self, *, session_id: int, notes: str) -> WorkSession:
        session = self._require_session(session_id)
        return self._put(replace(session, notes=notes))
