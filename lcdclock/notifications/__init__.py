"""Notification scheduling for lcdclock."""

from lcdclock.notifications.base import NotificationBackend, NotificationRequest, PermissionStatus
from lcdclock.notifications.logging_backend import LoggingNotificationBackend
from lcdclock.notifications.scheduler import NotificationScheduler, parse_snooze_minutes

__all__ = [
    "LoggingNotificationBackend",
    "NotificationBackend",
    "NotificationRequest",
    "NotificationScheduler",
    "PermissionStatus",
    "parse_snooze_minutes",
]
