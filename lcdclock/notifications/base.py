"""Notification backend interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PermissionStatus(str, Enum):
    """Result of a notification permission request."""
    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


@dataclass
class NotificationRequest:
    """A notification for the platform to deliver ``seconds`` from now."""
    title: str
    body: str
    seconds: int
    repeats: bool = False
    sound: bool = True
    data: dict[str, Any] = field(default_factory=dict)


class NotificationBackend(ABC):
    """Platform notification service. Delivery itself happens outside lcdclock."""

    @abstractmethod
    async def request_permissions(self) -> PermissionStatus:
        pass

    @abstractmethod
    async def cancel_all_scheduled(self) -> None:
        """Cancel every pending notification."""
        pass

    @abstractmethod
    async def schedule(self, request: NotificationRequest) -> str:
        """Schedule a notification. Returns the platform identifier."""
        pass
