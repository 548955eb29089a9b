"""Alarm collection operations on top of the shared cache."""

import time
import uuid
from typing import Any, Awaitable, Callable

from loguru import logger
from pydantic import ValidationError

from lcdclock.alarm.cache import AlarmCache
from lcdclock.alarm.models import Alarm, AlarmDraft
from lcdclock.errors import InvalidAlarmError, StoredDataError

ALARMS_KEY = "alarms"

AlarmListener = Callable[[list[Alarm]], Awaitable[None]]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return str(uuid.uuid4())[:8]


class AlarmStore:
    """
    Create, toggle, edit and delete alarms.

    Every mutation is a read-modify-write of the whole collection through
    ``AlarmCache``. Since the cache updates memory before writing through,
    back-to-back mutations in one process always see each other.

    Stored entries that fail validation are hidden from reads but written
    back unchanged on every mutation. A stored payload that is not a list
    blocks mutations with ``StoredDataError`` instead of being replaced.

    Subscribers are awaited with the new collection after each mutation,
    including when the durable write fails (memory already holds the change).
    """

    def __init__(
        self,
        cache: AlarmCache,
        key: str = ALARMS_KEY,
        clock_ms: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.cache = cache
        self.key = key
        self.clock_ms = clock_ms
        self.id_factory = id_factory
        self._listeners: list[AlarmListener] = []

    # ========== Reads ==========

    async def all(self) -> list[Alarm]:
        """Load the collection in storage order, skipping invalid entries."""
        raw = await self._raw_entries()
        alarms, _ = self._parse(raw or [])
        return alarms

    async def list_alarms(self) -> list[Alarm]:
        """Alarms for display, most recently created first."""
        alarms = await self.all()
        return sorted(alarms, key=lambda a: a.created_at, reverse=True)

    async def get(self, alarm_id: str) -> Alarm | None:
        for alarm in await self.all():
            if alarm.id == alarm_id:
                return alarm
        return None

    async def _raw_entries(self) -> list[Any] | None:
        raw = await self.cache.load(self.key, [])
        if not isinstance(raw, list):
            logger.warning(f"Stored '{self.key}' is not a list, ignoring it")
            return None
        return raw

    @staticmethod
    def _parse(raw: list[Any]) -> tuple[list[Alarm], list[Any]]:
        """Split stored entries into valid alarms and entries kept verbatim."""
        alarms: list[Alarm] = []
        invalid: list[Any] = []
        for item in raw:
            try:
                alarms.append(Alarm.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid alarm entry: {e.error_count()} validation error(s)")
                invalid.append(item)
        return alarms, invalid

    async def _load_for_update(self) -> tuple[list[Alarm], list[Any]]:
        raw = await self._raw_entries()
        if raw is None:
            raise StoredDataError(self.key)
        return self._parse(raw)

    # ========== Mutations ==========

    async def create(self, draft: AlarmDraft) -> Alarm:
        """
        Add a new active alarm.

        Args:
            draft: Time, weekday mask and descriptive options.

        Returns:
            The stored alarm with its fresh id and creation time.

        Raises:
            InvalidAlarmError: If the draft does not produce a valid alarm.
            StoredDataError: If the stored collection is not a list.
            PersistenceError: If the durable write fails (the alarm is still kept).
        """
        alarms, invalid = await self._load_for_update()
        taken = {a.id for a in alarms}
        taken.update(item["id"] for item in invalid if isinstance(item, dict) and isinstance(item.get("id"), str))

        alarm_id = self.id_factory()
        while alarm_id in taken:
            alarm_id = self.id_factory()

        try:
            alarm = Alarm(
                id=alarm_id,
                created_at=self.clock_ms(),
                is_active=True,
                **draft.model_dump(),
            )
        except ValidationError as e:
            raise InvalidAlarmError(str(e)) from e

        alarms.append(alarm)
        await self._commit(alarms, invalid)
        logger.info(f"Created alarm {alarm}")
        return alarm

    async def update(self, alarm_id: str, draft: AlarmDraft) -> Alarm | None:
        """Replace an alarm's settings, keeping id, creation time and active flag."""
        alarms, invalid = await self._load_for_update()
        for index, existing in enumerate(alarms):
            if existing.id != alarm_id:
                continue
            try:
                updated = Alarm(
                    id=existing.id,
                    created_at=existing.created_at,
                    is_active=existing.is_active,
                    **draft.model_dump(),
                )
            except ValidationError as e:
                raise InvalidAlarmError(str(e)) from e
            alarms[index] = updated
            await self._commit(alarms, invalid)
            logger.info(f"Updated alarm {updated}")
            return updated

        logger.warning(f"Cannot update alarm {alarm_id}: not found")
        return None

    async def toggle_active(self, alarm_id: str) -> Alarm | None:
        """Flip ``is_active`` on one alarm. Unknown ids are a no-op."""
        alarms, invalid = await self._load_for_update()
        for index, existing in enumerate(alarms):
            if existing.id == alarm_id:
                toggled = existing.model_copy(update={"is_active": not existing.is_active})
                alarms[index] = toggled
                await self._commit(alarms, invalid)
                logger.info(f"Alarm {alarm_id} is now {'active' if toggled.is_active else 'inactive'}")
                return toggled

        logger.warning(f"Cannot toggle alarm {alarm_id}: not found")
        return None

    async def delete(self, alarm_id: str) -> bool:
        """Remove an alarm. Returns False if it did not exist."""
        alarms, invalid = await self._load_for_update()
        remaining = [a for a in alarms if a.id != alarm_id]
        if len(remaining) == len(alarms):
            return False

        await self._commit(remaining, invalid)
        logger.info(f"Deleted alarm {alarm_id}")
        return True

    # ========== Subscriptions ==========

    def subscribe(self, listener: AlarmListener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _commit(self, alarms: list[Alarm], invalid: list[Any]) -> None:
        # Entries that failed validation are written back unchanged
        try:
            await self.cache.save(self.key, [a.to_dict() for a in alarms] + invalid)
        finally:
            await self._notify(alarms)

    async def _notify(self, alarms: list[Alarm]) -> None:
        for listener in list(self._listeners):
            try:
                await listener(list(alarms))
            except Exception as e:
                logger.error(f"Alarm listener failed: {e}")
