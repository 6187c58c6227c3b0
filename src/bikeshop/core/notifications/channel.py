"""Outbound notification channel contract."""

from typing import Protocol, runtime_checkable

from src.bikeshop.schemas.notification import NotificationRequest


@runtime_checkable
class NotificationChannel(Protocol):
    async def send(self, request: NotificationRequest) -> None:
        """Raises NotificationDispatchError when delivery fails."""
        ...
