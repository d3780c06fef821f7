from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class UserSummary:
    """Identity fields of a user, read from the user subsystem."""

    user_id: str
    full_name: str
    username: str
    email: Optional[str] = None

    def matches(self, term: str) -> bool:
        needle = term.strip().lower()
        if not needle:
            return True
        haystack = (self.user_id, self.full_name, self.username, self.email or "")
        return any(needle in field.lower() for field in haystack)


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, as stored in the Flask session by the login flow."""

    user_id: str
    role: Role = Role.STAFF
