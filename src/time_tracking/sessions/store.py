from __future__ import annotations

from datetime import datetime
from typing import ContextManager, Optional, Protocol, Sequence

from .model import BreakInterval, SessionFilter, WorkSession


class UserSessionUnit(Protocol):
    """Read-modify-write access to one user's sessions.

    Obtained from ``SessionStore.for_user``; every call made through it is
    part of one atomic unit that is serialized against other units of the
    same user.
    """

    def get_open_session(self) -> Optional[WorkSession]:
        raise NotImplementedError

    def get_session(self, session_id: int) -> Optional[WorkSession]:
        raise NotImplementedError

    def create_session(self, *, started_at: datetime, source: Optional[str] = None) -> WorkSession:
        raise NotImplementedError

    def close_session(self, *, session_id: int, ended_at: datetime, notes: Optional[str] = None) -> WorkSession:
        raise NotImplementedError

    def create_break(self, *, session_id: int, started_at: datetime) -> BreakInterval:
        raise NotImplementedError

    def close_break(self, *, break_id: int, ended_at: datetime) -> BreakInterval:
        raise NotImplementedError

    def update_notes(self, *, session_id: int, notes: str) -> WorkSession:
        raise NotImplementedError


class SessionStore(Protocol):
    """Durable record of work sessions and their breaks."""

    def for_user(self, user_id: str) -> ContextManager[UserSessionUnit]:
        """Open the per-user atomic unit (commit on normal exit, rollback on error)."""

        raise NotImplementedError

    def get_session(self, session_id: int) -> Optional[WorkSession]:
        raise NotImplementedError

    def get_open_session(self, user_id: str) -> Optional[WorkSession]:
        raise NotImplementedError

    def list_open_sessions(self) -> Sequence[WorkSession]:
        raise NotImplementedError

    def list_user_sessions(
        self,
        user_id: str,
        *,
        session_filter: SessionFilter,
        offset: int,
        limit: int,
    ) -> tuple[Sequence[WorkSession], int]:
        """Sessions of one user, newest first, plus the unpaged total."""

        raise NotImplementedError

    def list_overlapping(self, user_id: str, *, start: datetime, end: datetime) -> Sequence[WorkSession]:
        """Sessions (with breaks) intersecting ``[start, end)``; open sessions count as unbounded."""

        raise NotImplementedError
