from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol

from .model import UserSummary


class UserDirectory(Protocol):
    """Read-only view of the user subsystem.

    Note (DIP): services depend on this interface, never on the users table.
    """

    def get(self, user_id: str) -> Optional[UserSummary]:
        raise NotImplementedError

    def get_many(self, user_ids: Iterable[str]) -> Mapping[str, UserSummary]:
        raise NotImplementedError


class InMemoryUserDirectory:
    def __init__(self, users: Iterable[UserSummary] = ()):
        self._users = {u.user_id: u for u in users}

    def add(self, user: UserSummary) -> None:
        self._users[user.user_id] = user

    def get(self, user_id: str) -> Optional[UserSummary]:
        return self._users.get(str(user_id))

    def get_many(self, user_ids: Iterable[str]) -> Mapping[str, UserSummary]:
        return {uid: self._users[uid] for uid in user_ids if uid in self._users}
