"""Next-occurrence resolver for weekly-recurring alarms.

Pure functions: given the current instant and the alarm collection, find the
single active alarm that fires soonest and how many whole minutes remain.
Seconds are ignored throughout.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from loguru import logger

from lcdclock.alarm.models import Alarm

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class NextAlarm:
    """Resolver result. Both fields are None when nothing is scheduled."""
    alarm: Alarm | None = None
    minutes_until: int | None = None

    @property
    def is_scheduled(self) -> bool:
        return self.alarm is not None

    def fire_at(self, now: datetime) -> datetime | None:
        """Absolute fire instant: ``now`` truncated to the minute plus ``minutes_until``."""
        if self.minutes_until is None:
            return None
        return now.replace(second=0, microsecond=0) + timedelta(minutes=self.minutes_until)


def weekday_index(now: datetime) -> int:
    """Weekday of ``now`` with Monday=0 ... Sunday=6, matching ``Alarm.days``."""
    return now.weekday()


def minutes_until_day(now: datetime, today: int, day: int, hour: int, minute: int) -> int:
    """Minutes from ``now`` until ``hour:minute`` on weekday ``day``.

    A time today that is at or before ``now`` has already passed and counts
    as next week's occurrence.
    """
    day_diff = (day - today) % 7
    if day_diff == 0:
        candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
        if candidate <= now:
            day_diff = 7
    return day_diff * MINUTES_PER_DAY + hour * 60 + minute - (now.hour * 60 + now.minute)


def resolve_next_alarm(now: datetime, alarms: Iterable[Alarm]) -> NextAlarm:
    """
    Find the active alarm that fires soonest after ``now``.

    Inactive alarms and alarms with no eligible weekday are ignored. Alarms
    whose time cannot be parsed are skipped with a warning. When several
    alarms fire at the same minute the lowest ``id`` wins, so the result does
    not depend on collection order.

    Args:
        now: Current local time.
        alarms: The full alarm collection, in any order.

    Returns:
        The winning alarm and the minutes until it fires, or an empty result.
    """
    today = weekday_index(now)
    best: Alarm | None = None
    best_minutes: int | None = None

    for alarm in alarms:
        if not alarm.is_active or not alarm.has_eligible_day:
            continue

        try:
            hour, minute = alarm.hour, alarm.minute
        except (ValueError, TypeError):
            logger.warning(f"Skipping alarm {alarm.id} with invalid time {alarm.time!r}")
            continue

        for day, eligible in enumerate(alarm.days[:7]):
            if not eligible:
                continue
            total = minutes_until_day(now, today, day, hour, minute)
            if (
                best_minutes is None
                or total < best_minutes
                or (total == best_minutes and alarm.id < best.id)
            ):
                best, best_minutes = alarm, total

    if best is None:
        return NextAlarm()
    return NextAlarm(alarm=best, minutes_until=best_minutes)


async def resolve_next_alarm_async(
    now: datetime,
    alarms: Iterable[Alarm],
    offload: bool = True,
) -> NextAlarm:
    """Run ``resolve_next_alarm`` in a worker thread, or inline when ``offload`` is off.

    The result is identical either way.
    """
    snapshot = list(alarms)
    if not offload:
        return resolve_next_alarm(now, snapshot)
    return await asyncio.to_thread(resolve_next_alarm, now, snapshot)
