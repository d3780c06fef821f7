from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import SessionStatus, TrackingState
from ..users.model import UserSummary


@dataclass(frozen=True)
class BreakInterval:
    """A rest break inside a work session."""

    break_id: int
    session_id: int
    started_at: datetime
    ended_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    def duration_seconds(self, now: datetime) -> int:
        end = self.ended_at or now
        return max(0, int((end - self.started_at).total_seconds()))


@dataclass(frozen=True)
class WorkSession:
    """A clock-in/clock-out interval of one user.

    ``breaks`` are ordered by start time; ``user`` is only filled by read
    projections that join the user directory.
    """

    session_id: int
    user_id: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    notes: str = ""
    source: Optional[str] = None
    breaks: tuple[BreakInterval, ...] = ()
    user: Optional[UserSummary] = field(default=None, compare=False)

    @property
    def status(self) -> SessionStatus:
        return SessionStatus.OPEN if self.ended_at is None else SessionStatus.CLOSED

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    @property
    def open_break(self) -> Optional[BreakInterval]:
        for b in self.breaks:
            if b.is_open:
                return b
        return None

    @property
    def state(self) -> TrackingState:
        if not self.is_open:
            return TrackingState.IDLE
        return TrackingState.ON_BREAK if self.open_break else TrackingState.WORKING

    def duration_seconds(self, now: datetime) -> int:
        end = self.ended_at or now
        return max(0, int((end - self.started_at).total_seconds()))

    def break_seconds(self, now: datetime) -> int:
        end = self.ended_at or now
        return sum(b.duration_seconds(end) for b in self.breaks)


@dataclass(frozen=True)
class SessionFilter:
    started_from: Optional[datetime] = None
    started_to: Optional[datetime] = None
    status: Optional[SessionStatus] = None
    search_term: Optional[str] = None

    def accepts_start(self, started_at: datetime) -> bool:
        if self.started_from is not None and started_at < self.started_from:
            return False
        if self.started_to is not None and started_at >= self.started_to:
            return False
        return True


@dataclass(frozen=True)
class Page:
    items: list[WorkSession]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit
