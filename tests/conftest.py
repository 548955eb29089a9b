"""Shared fixtures for alarm tests."""

import asyncio
import itertools
from datetime import datetime

import pytest

from lcdclock.alarm.cache import AlarmCache
from lcdclock.alarm.models import Alarm
from lcdclock.alarm.store import AlarmStore
from lcdclock.notifications.base import NotificationBackend, NotificationRequest, PermissionStatus
from lcdclock.storage.base import DurableStore
from lcdclock.storage.memory import MemoryStore

# 2024-01-01 is a Monday
MONDAY = datetime(2024, 1, 1)


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingStore(MemoryStore):
    """Memory store that counts reads and writes."""

    def __init__(self, initial: dict[str, str] | None = None):
        super().__init__(initial)
        self.gets = 0
        self.sets = 0

    async def get(self, key: str) -> str | None:
        self.gets += 1
        await asyncio.sleep(0)
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        self.sets += 1
        await super().set(key, value)


class FailingStore(DurableStore):
    """Store whose reads and/or writes raise."""

    def __init__(self, fail_get: bool = False, fail_set: bool = True, initial: dict[str, str] | None = None):
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.data = dict(initial or {})

    async def get(self, key: str) -> str | None:
        if self.fail_get:
            raise OSError("disk unavailable")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_set:
            raise OSError("disk full")
        self.data[key] = value


class BlockingStore(MemoryStore):
    """Store whose writes wait until ``release`` is set."""

    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()
        self.write_started = asyncio.Event()

    async def set(self, key: str, value: str) -> None:
        self.write_started.set()
        await self.release.wait()
        await super().set(key, value)


class SlowReadStore(MemoryStore):
    """Store whose reads capture the current value, then wait until ``release`` is set."""

    def __init__(self, initial: dict[str, str] | None = None):
        super().__init__(initial)
        self.release = asyncio.Event()
        self.read_started = asyncio.Event()

    async def get(self, key: str) -> str | None:
        value = self.data.get(key)
        self.read_started.set()
        await self.release.wait()
        return value


class RecordingBackend(NotificationBackend):
    """Notification backend that records every call."""

    def __init__(self, permission: PermissionStatus = PermissionStatus.GRANTED, fail: bool = False):
        self.permission = permission
        self.fail = fail
        self.calls: list[str] = []
        self.requests: list[NotificationRequest] = []

    async def request_permissions(self) -> PermissionStatus:
        self.calls.append("permissions")
        return self.permission

    async def cancel_all_scheduled(self) -> None:
        self.calls.append("cancel")
        self.requests.clear()

    async def schedule(self, request: NotificationRequest) -> str:
        self.calls.append("schedule")
        if self.fail:
            raise RuntimeError("notification service crashed")
        self.requests.append(request)
        return f"n{len(self.requests)}"


def make_alarm(
    alarm_id: str = "a1",
    time: str = "09:00",
    days: list[bool] | None = None,
    is_active: bool = True,
    created_at: int = 0,
    repeat_option: str = "NO",
) -> Alarm:
    return Alarm(
        id=alarm_id,
        time=time,
        days=days if days is not None else [True, False, False, False, False, False, False],
        is_active=is_active,
        created_at=created_at,
        repeat_option=repeat_option,
    )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def memory_store() -> CountingStore:
    return CountingStore()


@pytest.fixture
def cache(memory_store, clock) -> AlarmCache:
    return AlarmCache(memory_store, ttl=60.0, clock=clock)


@pytest.fixture
def alarm_store(cache) -> AlarmStore:
    """Store with deterministic ids (al1, al2, ...) and creation times."""
    ids = (f"al{n}" for n in itertools.count(1))
    times = itertools.count(1_700_000_000_000, 1000)
    return AlarmStore(cache, clock_ms=lambda: next(times), id_factory=lambda: next(ids))
