from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..common.validators import optional_int
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..users.directory import UserDirectory
from .model import Page, SessionFilter, WorkSession
from .store import SessionStore


class ActiveSessionRegistry:
    """Read projections over the session store: who is working now, and history."""

    def __init__(self, store: SessionStore, users: UserDirectory):
        self._store = store
        self._users = users

    def list_active(self, session_filter: Optional[SessionFilter] = None) -> list[WorkSession]:
        session_filter = session_filter or SessionFilter()

        sessions = [s for s in self._store.list_open_sessions() if session_filter.accepts_start(s.started_at)]
        sessions = self._with_users(sessions)

        term = (session_filter.search_term or "").strip()
        if term:
            needle = term.lower()
            sessions = [
                s
                for s in sessions
                if (s.user.matches(term) if s.user else needle in s.user_id.lower())
            ]

        sessions.sort(key=lambda s: s.started_at, reverse=True)
        return sessions

    def list_user_sessions(
        self,
        user_id: str,
        page: object = 1,
        page_size: object = DEFAULT_PAGE_SIZE,
        session_filter: Optional[SessionFilter] = None,
    ) -> Page:
        page_no = optional_int(page, "page", 1, minimum=1)
        limit = optional_int(page_size, "limit", DEFAULT_PAGE_SIZE, minimum=1, maximum=MAX_PAGE_SIZE)

        items, total = self._store.list_user_sessions(
            str(user_id),
            session_filter=session_filter or SessionFilter(),
            offset=(page_no - 1) * limit,
            limit=limit,
        )
        return Page(items=list(items), total=int(total), page=page_no, limit=limit)

    def _with_users(self, sessions: Sequence[WorkSession]) -> list[WorkSession]:
        users = self._users.get_many({s.user_id for s in sessions})
        return [replace(s, user=users.get(s.user_id)) for s in sessions]
