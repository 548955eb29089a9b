"""Turn resolved alarm times and snoozes into notification requests."""

import math
import re
from datetime import datetime
from typing import Callable

from loguru import logger

from lcdclock.alarm.models import Alarm
from lcdclock.errors import NotificationError, NotificationPermissionError
from lcdclock.notifications.base import NotificationBackend, NotificationRequest, PermissionStatus

_SNOOZE_RE = re.compile(r"^EVERY\s+(\d+)\s+MIN$", re.IGNORECASE)


def parse_snooze_minutes(snooze_time: str) -> int | None:
    """Parse a snooze option like ``"EVERY 10 MIN"`` into minutes.

    Returns:
        Minutes to snooze, or None when snoozing is off (``"NO"``).

    Raises:
        ValueError: If the string is neither form.
    """
    value = snooze_time.strip()
    if value.upper() == "NO":
        return None

    match = _SNOOZE_RE.match(value)
    if not match or int(match.group(1)) <= 0:
        raise ValueError(f"Invalid snooze option: {snooze_time!r}. Use 'EVERY N MIN' or 'NO'")
    return int(match.group(1))


class NotificationScheduler:
    """Requests OS-level delivery for the next alarm and for snoozes."""

    def __init__(
        self,
        backend: NotificationBackend,
        clock: Callable[[], datetime] = datetime.now,
        alarm_title: str = "Alarm",
        snooze_title: str = "Snoozed Alarm",
        enabled: bool = True,
    ):
        self.backend = backend
        self.clock = clock
        self.alarm_title = alarm_title
        self.snooze_title = snooze_title
        self.enabled = enabled

    async def schedule_alarm(self, alarm: Alarm, fire_at: datetime) -> str | None:
        """
        Replace any pending notification with one for ``alarm`` at ``fire_at``.

        Args:
            alarm: The alarm that fires next.
            fire_at: Absolute local fire time.

        Returns:
            Backend notification id, or None when notifications are disabled.

        Raises:
            NotificationPermissionError: Permission was refused; nothing was scheduled.
            NotificationError: The backend failed.
        """
        if not self.enabled:
            logger.debug(f"Notifications disabled, not scheduling alarm {alarm.id}")
            return None

        await self._ensure_permission()

        seconds = max(0, math.floor((fire_at - self.clock()).total_seconds()))
        request = NotificationRequest(
            title=self.alarm_title,
            body=f"It's {alarm.time}",
            seconds=seconds,
            repeats=alarm.repeats,
            data={
                "alarmId": alarm.id,
                "alarmTime": fire_at.isoformat(),
                "snoozeTime": alarm.snooze_time,
                "repeatOption": alarm.repeat_option,
            },
        )

        try:
            await self.backend.cancel_all_scheduled()
            notification_id = await self.backend.schedule(request)
        except Exception as e:
            logger.error(f"Failed to schedule alarm {alarm.id}: {e}")
            raise NotificationError(f"Failed to set alarm: {e}") from e

        logger.info(f"Scheduled alarm {alarm.id} for {fire_at:%a %H:%M} (in {seconds}s)")
        return notification_id

    async def snooze(self, snooze_time: str) -> str | None:
        """
        Schedule a one-shot reminder ``N`` minutes from now.

        Returns:
            Backend notification id, or None when snoozing is off.

        Raises:
            ValueError: If ``snooze_time`` is malformed.
            NotificationError: The backend failed.
        """
        minutes = parse_snooze_minutes(snooze_time)
        if minutes is None or not self.enabled:
            logger.debug(f"Snooze skipped (option={snooze_time!r}, enabled={self.enabled})")
            return None

        request = NotificationRequest(
            title=self.snooze_title,
            body=f"Alarm snoozed for {minutes} minutes",
            seconds=minutes * 60,
        )
        try:
            notification_id = await self.backend.schedule(request)
        except Exception as e:
            logger.error(f"Failed to snooze: {e}")
            raise NotificationError(f"Failed to snooze: {e}") from e

        logger.info(f"Snoozed for {minutes} minutes")
        return notification_id

    async def _ensure_permission(self) -> None:
        try:
            status = await self.backend.request_permissions()
        except Exception as e:
            raise NotificationError(f"Permission request failed: {e}") from e
        if status != PermissionStatus.GRANTED:
            logger.warning(f"Notification permission not granted: {status.value}")
            raise NotificationPermissionError()
