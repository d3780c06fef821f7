from __future__ import annotations

import threading
from typing import Optional, Protocol

from .model import SettingsOverride


class SettingsRepository(Protocol):
    def get(self, scope: str) -> Optional[SettingsOverride]:
        raise NotImplementedError

    def save(self, scope: str, settings: SettingsOverride) -> None:
        raise NotImplementedError


class InMemorySettingsRepository:
    def __init__(self) -> None:
        self._rows: dict[str, SettingsOverride] = {}
        self._lock = threading.Lock()

    def get(self, scope: str) -> Optional[SettingsOverride]:
        with self._lock:
            return self._rows.get(scope)

    def save(self, scope: str, settings: SettingsOverride) -> None:
        with self._lock:
            self._rows[scope] = settings
