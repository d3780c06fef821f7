from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import NotificationType


class NotificationRepository(Protocol):
    def create(
        self,
        *,
        user_id: str,
        content: str,
        link: Optional[str] = None,
        type: NotificationType = NotificationType.SYSTEM,
    ) -> int:
        raise NotImplementedError
