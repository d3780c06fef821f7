from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles issued by the external authentication system."""

    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"


class Permission(str, Enum):
    """Elevated capabilities on other users' time-tracking data."""

    VIEW_ALL_SESSIONS = "VIEW_ALL_SESSIONS"
    EDIT_ANY_NOTES = "EDIT_ANY_NOTES"
    MANAGE_SETTINGS = "MANAGE_SETTINGS"
    VIEW_REPORTS = "VIEW_REPORTS"


class SessionStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class TrackingState(str, Enum):
    """Per-user state machine: IDLE -> WORKING <-> ON_BREAK -> IDLE."""

    IDLE = "IDLE"
    WORKING = "WORKING"
    ON_BREAK = "ON_BREAK"


class NotificationType(str, Enum):
    SYSTEM = "SYSTEM"
