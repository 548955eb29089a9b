"""Shared error types for lcdclock.

Failures in this package never crash the UI loop: the service facade catches
every ``LcdClockError``, keeps the prior state and reports a message instead.
"""


class LcdClockError(Exception):
    """Base error for lcdclock."""


class PersistenceError(LcdClockError):
    """Durable store read or write failed.

    The in-memory cache has already been updated when this is raised.
    """

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Failed to persist '{key}'")


class NotificationError(LcdClockError):
    """The notification backend failed to schedule or cancel."""


class NotificationPermissionError(NotificationError):
    """The platform refused notification permission."""

    def __init__(self, message: str = "Please enable notifications to set alarms"):
        super().__init__(message)


class InvalidAlarmError(LcdClockError, ValueError):
    """Alarm input failed validation (bad time or weekday mask)."""


class StoredDataError(LcdClockError):
    """Stored data has an unexpected shape and is left untouched."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Stored '{key}' is not a list; refusing to overwrite it")
