from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..users.model import UserSummary
from .model import BreakInterval, Page, WorkSession


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def user_to_dict(user: Optional[UserSummary]) -> Optional[dict]:
    if user is None:
        return None
    return {
        "id": user.user_id,
        "fullName": user.full_name,
        "username": user.username,
        "email": user.email,
    }


def break_to_dict(brk: BreakInterval, now: datetime) -> dict:
    return {
        "id": brk.break_id,
        "sessionId": brk.session_id,
        "startTime": _iso(brk.started_at),
        "endTime": _iso(brk.ended_at),
        "durationSeconds": brk.duration_seconds(now),
    }


def session_to_dict(session: WorkSession, now: datetime) -> dict:
    duration = session.duration_seconds(now)
    on_break = session.break_seconds(now)
    data = {
        "id": session.session_id,
        "userId": session.user_id,
        "startTime": _iso(session.started_at),
        "endTime": _iso(session.ended_at),
        "status": session.status.value,
        "state": session.state.value,
        "notes": session.notes,
        "source": session.source,
        "durationSeconds": duration,
        "totalBreakSeconds": on_break,
        "workedSeconds": max(duration - on_break, 0),
        "breaks": [break_to_dict(b, now) for b in session.breaks],
    }
    if session.user is not None:
        data["user"] = user_to_dict(session.user)
    return data


def page_to_dict(page: Page, now: datetime) -> dict:
    return {
        "items": [session_to_dict(s, now) for s in page.items],
        "total": page.total,
        "page": page.page,
        "limit": page.limit,
        "pages": page.pages,
    }
