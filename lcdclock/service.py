"""Alarm clock service - keeps the next alarm in sync with every alarm change."""

from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable

from loguru import logger

from lcdclock.alarm.cache import AlarmCache
from lcdclock.alarm.display import format_countdown
from lcdclock.alarm.models import DEFAULT_SNOOZE, Alarm, AlarmDraft
from lcdclock.alarm.resolver import NextAlarm, resolve_next_alarm_async
from lcdclock.alarm.settings import AlarmSettingsStore
from lcdclock.alarm.store import AlarmStore
from lcdclock.config.schema import Config
from lcdclock.errors import LcdClockError, PersistenceError
from lcdclock.notifications.base import NotificationBackend
from lcdclock.notifications.logging_backend import LoggingNotificationBackend
from lcdclock.notifications.scheduler import NotificationScheduler
from lcdclock.storage.json_file import JsonFileStore

NextAlarmListener = Callable[[NextAlarm], Awaitable[None]]


@dataclass
class SaveResult:
    """Outcome of saving an alarm from the editor."""
    alarm: Alarm | None
    notification_id: str | None = None
    error: str | None = None


class AlarmClockService:
    """
    Facade used by the clock screens.

    The service subscribes to ``AlarmStore`` so every create, edit, toggle or
    delete recomputes ``next_alarm`` immediately. Errors never escape: they are
    logged, kept in ``last_error`` and the previous state stays in place.
    """

    def __init__(
        self,
        store: AlarmStore,
        scheduler: NotificationScheduler,
        settings: AlarmSettingsStore | None = None,
        clock: Callable[[], datetime] = datetime.now,
        offload: bool = True,
    ):
        """
        Initialize the service.

        Args:
            store: Alarm collection.
            scheduler: Notification scheduler used on explicit save and snooze.
            settings: Optional editor settings store.
            clock: Local wall clock; injectable for tests.
            offload: Run the resolver in a worker thread.
        """
        self.store = store
        self.scheduler = scheduler
        self.settings = settings
        self.clock = clock
        self.offload = offload
        self.next_alarm = NextAlarm()
        self.last_error: str | None = None
        self._resolved_at: datetime | None = None
        self._listeners: list[NextAlarmListener] = []
        self._unsubscribe: Callable[[], None] | None = None

    async def start(self) -> NextAlarm:
        """Subscribe to alarm changes and compute the first next alarm."""
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_alarms_changed)
        result = await self.refresh()
        logger.info(f"Alarm clock service started: {self.countdown_text()}")
        return result

    def stop(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def on_next_alarm(self, listener: NextAlarmListener) -> Callable[[], None]:
        """Register an observer of next-alarm recomputation. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def refresh(self) -> NextAlarm:
        """Reload the collection and recompute the next alarm."""
        return await self._recompute(await self.store.all())

    async def list_alarms(self) -> list[Alarm]:
        return await self.store.list_alarms()

    def countdown_text(self) -> str:
        return format_countdown(self.next_alarm.minutes_until)

    # ========== Mutations ==========

    async def create_alarm(self, draft: AlarmDraft) -> Alarm | None:
        try:
            return await self.store.create(draft)
        except LcdClockError as e:
            self._fail("create alarm", e)
            return None

    async def update_alarm(self, alarm_id: str, draft: AlarmDraft) -> Alarm | None:
        try:
            return await self.store.update(alarm_id, draft)
        except LcdClockError as e:
            self._fail("update alarm", e)
            return None

    async def toggle_alarm(self, alarm_id: str) -> Alarm | None:
        try:
            return await self.store.toggle_active(alarm_id)
        except LcdClockError as e:
            self._fail("update alarm", e)
            return None

    async def delete_alarm(self, alarm_id: str) -> bool:
        try:
            return await self.store.delete(alarm_id)
        except LcdClockError as e:
            self._fail("delete alarm", e)
            return False

    async def save_and_schedule(self, draft: AlarmDraft) -> SaveResult:
        """
        Save an alarm from the editor, remember its settings and schedule the next alarm.

        The notification targets whichever alarm fires next after the save,
        which is not necessarily the one just created.
        """
        self.last_error = None
        alarm = None
        try:
            alarm = await self.store.create(draft)
        except PersistenceError as e:
            # Kept in memory; still worth scheduling
            self._fail("save alarm", e)
        except LcdClockError as e:
            self._fail("save alarm", e)
            return SaveResult(alarm=None, error=self.last_error)

        if self.settings:
            hour, minute = draft.time.split(":")
            try:
                await self.settings.update(
                    hour=hour,
                    minute=minute,
                    sound=draft.sound,
                    snooze=draft.snooze_time,
                    repeat=draft.repeat_option,
                )
            except LcdClockError as e:
                self._fail("save alarm settings", e)

        notification_id = await self.schedule_next()
        return SaveResult(alarm=alarm, notification_id=notification_id, error=self.last_error)

    async def schedule_next(self) -> str | None:
        """Ask the scheduler to notify for the current next alarm."""
        result = await self.refresh()
        if not result.is_scheduled or self._resolved_at is None:
            logger.info("No active alarm to schedule")
            return None

        fire_at = result.fire_at(self._resolved_at)
        try:
            return await self.scheduler.schedule_alarm(result.alarm, fire_at)
        except LcdClockError as e:
            self._fail("set alarm", e)
            return None

    async def snooze(self, snooze_time: str | None = None) -> str | None:
        """Snooze using ``snooze_time`` or, by default, the editor's snooze option."""
        if snooze_time is None:
            snooze_time = (await self.settings.load()).snooze if self.settings else DEFAULT_SNOOZE
        try:
            return await self.scheduler.snooze(snooze_time)
        except (LcdClockError, ValueError) as e:
            self._fail("snooze", e)
            return None

    # ========== Internals ==========

    async def _on_alarms_changed(self, alarms: list[Alarm]) -> None:
        await self._recompute(alarms)

    async def _recompute(self, alarms: list[Alarm]) -> NextAlarm:
        now = self.clock()
        result = await resolve_next_alarm_async(now, alarms, offload=self.offload)
        self.next_alarm = result
        self._resolved_at = now
        logger.debug(f"Next alarm: {result.alarm.id if result.alarm else None} in {result.minutes_until} min")

        for listener in list(self._listeners):
            try:
                await listener(result)
            except Exception as e:
                logger.error(f"Next-alarm listener failed: {e}")
        return result

    def _fail(self, action: str, error: Exception) -> None:
        self.last_error = str(error)
        logger.warning(f"Failed to {action}: {error}")


def build_service(
    config: Config | None = None,
    backend: NotificationBackend | None = None,
) -> AlarmClockService:
    """Assemble the service graph from configuration."""
    config = config or Config()

    cache = AlarmCache(JsonFileStore(config.storage_path), ttl=config.cache.ttl_seconds)
    scheduler = NotificationScheduler(
        backend or LoggingNotificationBackend(),
        alarm_title=config.notifications.alarm_title,
        snooze_title=config.notifications.snooze_title,
        enabled=config.notifications.enabled,
    )
    return AlarmClockService(
        store=AlarmStore(cache, key=config.storage.alarms_key),
        scheduler=scheduler,
        settings=AlarmSettingsStore(cache, key=config.storage.settings_key),
        offload=config.resolver.offload,
    )
