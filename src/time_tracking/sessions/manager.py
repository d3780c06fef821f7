from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from ..common.clock import Clock, SystemClock
from ..common.validators import require_max_length
from ..core.constants import MAX_NOTES_LENGTH, MAX_SOURCE_LENGTH
from ..core.enums import Permission, TrackingState
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..notifications.events import NullEventSink, SessionEventSink, publish
from ..settings.model import TrackingSettings
from ..settings.service import SettingsService
from ..users.model import Identity
from ..users.permissions import AccessPolicy, RoleAccessPolicy
from .model import BreakInterval, WorkSession
from .store import SessionStore

logger = logging.getLogger(__name__)


class SessionManager:
    """Per-user session/break state machine.

    IDLE --start_session--> WORKING --start_break--> ON_BREAK
    ON_BREAK --end_break--> WORKING; WORKING/ON_BREAK --end_session--> IDLE

    Every transition runs inside ``SessionStore.for_user`` and reads the clock
    there, so checks and writes for one user are atomic and time-ordered.
    """

    def __init__(
        self,
        store: SessionStore,
        settings: SettingsService,
        *,
        clock: Optional[Clock] = None,
        access: Optional[AccessPolicy] = None,
        events: Optional[SessionEventSink] = None,
    ):
        self._store = store
        self._settings = settings
        self._clock = clock or SystemClock()
        self._access = access or RoleAccessPolicy()
        self._events = events or NullEventSink()

    def start_session(self, user_id: str, client_context: Optional[Mapping[str, Any]] = None) -> WorkSession:
        source = _source_from_context(client_context)

        with self._store.for_user(user_id) as unit:
            if unit.get_open_session() is not None:
                raise ConflictError("A work session is already in progress")
            session = unit.create_session(started_at=self._clock.now(), source=source)

        logger.info("Session %s started for user %s", session.session_id, user_id)
        publish(self._events, "on_session_started", session)
        return session

    def end_session(self, user_id: str, *, notes: Optional[str] = None) -> WorkSession:
        if notes is not None:
            if not isinstance(notes, str):
                raise ValidationError("notes must be a string")
            require_max_length(notes, "notes", MAX_NOTES_LENGTH)
        settings = self._settings.get_effective(user_id)

        with self._store.for_user(user_id) as unit:
            current = unit.get_open_session()
            if current is None:
                raise NotFoundError("No work session in progress")

            now = self._clock.now()
            open_break = current.open_break
            if open_break is not None:
                unit.close_break(break_id=open_break.break_id, ended_at=_break_end(open_break, now, settings, user_id))
            session = unit.close_session(session_id=current.session_id, ended_at=now, notes=notes)

        logger.info(
            "Session %s ended for user %s (closed_break=%s)",
            session.session_id,
            user_id,
            open_break.break_id if open_break else None,
        )
        publish(self._events, "on_session_ended", session)
        return session

    def start_break(self, user_id: str) -> BreakInterval:
        with self._store.for_user(user_id) as unit:
            current = unit.get_open_session()
            if current is None:
                raise ConflictError("Cannot start a break without a work session in progress")
            if current.open_break is not None:
                raise ConflictError("A break is already in progress")
            brk = unit.create_break(session_id=current.session_id, started_at=self._clock.now())

        logger.info("Break %s started in session %s", brk.break_id, brk.session_id)
        return brk

    def end_break(self, user_id: str) -> BreakInterval:
        settings = self._settings.get_effective(user_id)

        with self._store.for_user(user_id) as unit:
            current = unit.get_open_session()
            open_break = current.open_break if current else None
            if open_break is None:
                raise NotFoundError("No break in progress")

            ended_at = _break_end(open_break, self._clock.now(), settings, user_id)
            brk = unit.close_break(break_id=open_break.break_id, ended_at=ended_at)

        logger.info("Break %s ended in session %s", brk.break_id, brk.session_id)
        return brk

    def update_notes(self, session_id: int, notes: Optional[str], requester: Identity) -> WorkSession:
        if notes is None:
            raise ValidationError("notes is required")
        if not isinstance(notes, str):
            raise ValidationError("notes must be a string")
        require_max_length(notes, "notes", MAX_NOTES_LENGTH)

        # Callers without EDIT_ANY_NOTES get the same answer for foreign and unknown ids.
        existing = self._store.get_session(session_id)
        if existing is None or existing.user_id != requester.user_id:
            if not self._access.is_allowed(requester, Permission.EDIT_ANY_NOTES):
                raise AuthorizationError("You can only edit notes of your own sessions")
            if existing is None:
                raise NotFoundError(f"Session {session_id} not found")

        with self._store.for_user(existing.user_id) as unit:
            session = unit.update_notes(session_id=existing.session_id, notes=notes)

        logger.info("Notes updated on session %s by user %s", session_id, requester.user_id)
        return session

    def get_current_session(self, user_id: str) -> Optional[WorkSession]:
        return self._store.get_open_session(user_id)

    def get_state(self, user_id: str) -> TrackingState:
        current = self.get_current_session(user_id)
        return current.state if current else TrackingState.IDLE


def _source_from_context(client_context: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not client_context:
        return None
    source = client_context.get("source")
    if source is None:
        return None
    source = str(source).strip()
    return require_max_length(source, "source", MAX_SOURCE_LENGTH) or None


def _break_end(open_break: BreakInterval, now: datetime, settings: TrackingSettings, user_id: str) -> datetime:
    """End instant for ``open_break`` closed at ``now`` under the max-break rule."""
    if settings.max_break_minutes <= 0:
        return now
    limit = open_break.started_at + timedelta(minutes=settings.max_break_minutes)
    if now <= limit:
        return now

    logger.warning(
        "Break %s of user %s exceeded %s minutes%s",
        open_break.break_id,
        user_id,
        settings.max_break_minutes,
        " (capped)" if settings.enforce_max_break else "",
    )
    return limit if settings.enforce_max_break else now
