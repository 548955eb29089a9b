"""In-process notification backend that logs and records requests."""

import uuid

from loguru import logger

from lcdclock.notifications.base import NotificationBackend, NotificationRequest, PermissionStatus


class LoggingNotificationBackend(NotificationBackend):
    """Backend for headless runs and tests: nothing is delivered, everything is logged."""

    def __init__(self, permission: PermissionStatus = PermissionStatus.GRANTED):
        self.permission = permission
        self.scheduled: dict[str, NotificationRequest] = {}

    async def request_permissions(self) -> PermissionStatus:
        return self.permission

    async def cancel_all_scheduled(self) -> None:
        if self.scheduled:
            logger.debug(f"Cancelling {len(self.scheduled)} pending notification(s)")
        self.scheduled.clear()

    async def schedule(self, request: NotificationRequest) -> str:
        notification_id = str(uuid.uuid4())[:8]
        self.scheduled[notification_id] = request
        logger.info(
            f"Notification {notification_id}: '{request.title}' in {request.seconds}s"
            f"{' (repeats)' if request.repeats else ''}"
        )
        return notification_id
