from __future__ import annotations

import logging
from typing import Protocol

from ..common.datetime_utils import format_hhmm
from ..core.enums import NotificationType
from ..sessions.model import WorkSession
from .repository import NotificationRepository

logger = logging.getLogger(__name__)

SESSION_LINK = "/time-tracking"


class SessionEventSink(Protocol):
    """Receives session lifecycle events after they are committed."""

    def on_session_started(self, session: WorkSession) -> None:
        raise NotImplementedError

    def on_session_ended(self, session: WorkSession) -> None:
        raise NotImplementedError


class NullEventSink:
    def on_session_started(self, session: WorkSession) -> None:
        return None

    def on_session_ended(self, session: WorkSession) -> None:
        return None


class NotificationEventSink:
    """Stores a SYSTEM notification for the session owner on start/end."""

    def __init__(self, notifications: NotificationRepository, *, link: str = SESSION_LINK):
        self._notifications = notifications
        self._link = link

    def on_session_started(self, session: WorkSession) -> None:
        content = f"Work session started at {session.started_at:%Y-%m-%d %H:%M} UTC"
        self._notifications.create(user_id=session.user_id, content=content, link=self._link, type=NotificationType.SYSTEM)

    def on_session_ended(self, session: WorkSession) -> None:
        if session.ended_at is None:
            return
        worked = session.duration_seconds(session.ended_at) - session.break_seconds(session.ended_at)
        content = f"Work session ended, {format_hhmm(max(worked, 0))} worked"
        self._notifications.create(user_id=session.user_id, content=content, link=self._link, type=NotificationType.SYSTEM)


def publish(sink: SessionEventSink, event: str, session: WorkSession) -> None:
    """Deliver one event; delivery failures are logged, never raised."""
    try:
        getattr(sink, event)(session)
    except Exception:
        logger.exception("Event sink failed for %s (session=%s)", event, session.session_id)
