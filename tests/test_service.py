"""Tests for the alarm clock service facade."""

from datetime import datetime, timedelta

import pytest

from conftest import MONDAY, CountingStore, FailingStore, ManualClock, RecordingBackend
from lcdclock.alarm.cache import AlarmCache
from lcdclock.alarm.models import AlarmDraft
from lcdclock.alarm.resolver import NextAlarm
from lcdclock.alarm.settings import AlarmSettingsStore
from lcdclock.alarm.store import AlarmStore
from lcdclock.config.schema import Config
from lcdclock.notifications.base import PermissionStatus
from lcdclock.notifications.scheduler import NotificationScheduler
from lcdclock.service import AlarmClockService, build_service

NOW = MONDAY + timedelta(hours=8)  # Monday 08:00
MONDAY_ONLY = [True, False, False, False, False, False, False]


def _service(alarm_store, cache, backend=None, now: datetime = NOW) -> AlarmClockService:
    scheduler = NotificationScheduler(backend or RecordingBackend(), clock=lambda: now)
    return AlarmClockService(
        store=alarm_store,
        scheduler=scheduler,
        settings=AlarmSettingsStore(cache),
        clock=lambda: now,
        offload=False,
    )


@pytest.mark.asyncio
async def test_start_with_no_alarms(alarm_store, cache) -> None:
    service = _service(alarm_store, cache)

    assert await service.start() == NextAlarm()
    assert service.countdown_text() == "NO ALARMS SET"


@pytest.mark.asyncio
async def test_mutations_recompute_next_alarm(alarm_store, cache) -> None:
    service = _service(alarm_store, cache)
    await service.start()

    nine = await service.create_alarm(AlarmDraft(time="09:00", days=MONDAY_ONLY))
    assert service.next_alarm.alarm == nine
    assert service.next_alarm.minutes_until == 60
    assert service.countdown_text() == "NEXT ALARM IN 1h 0m"

    half_eight = await service.create_alarm(AlarmDraft(time="08:30", days=MONDAY_ONLY))
    assert service.next_alarm.alarm == half_eight

    await service.toggle_alarm(half_eight.id)
    assert service.next_alarm.alarm.id == nine.id

    await service.delete_alarm(nine.id)
    assert service.next_alarm == NextAlarm()


@pytest.mark.asyncio
async def test_next_alarm_listeners(alarm_store, cache) -> None:
    service = _service(alarm_store, cache)
    seen = []

    async def listener(result: NextAlarm) -> None:
        seen.append(result.minutes_until)

    service.on_next_alarm(listener)
    await service.start()
    await service.create_alarm(AlarmDraft(time="08:10", days=MONDAY_ONLY))

    assert seen == [None, 10]


@pytest.mark.asyncio
async def test_stop_unsubscribes(alarm_store, cache) -> None:
    service = _service(alarm_store, cache)
    await service.start()
    service.stop()

    await alarm_store.create(AlarmDraft(time="09:00", days=MONDAY_ONLY))

    assert service.next_alarm == NextAlarm()


@pytest.mark.asyncio
async def test_save_and_schedule(alarm_store, cache) -> None:
    backend = RecordingBackend()
    service = _service(alarm_store, cache, backend)
    await service.start()

    result = await service.save_and_schedule(
        AlarmDraft(time="09:00", days=MONDAY_ONLY, repeat_option="DAILY", snooze_time="EVERY 5 MIN")
    )

    assert result.error is None
    assert result.notification_id == "n1"
    assert result.alarm.time == "09:00"
    assert backend.requests[0].seconds == 3600
    assert backend.requests[0].repeats is True

    settings = await AlarmSettingsStore(cache).load()
    assert (settings.hour, settings.minute, settings.snooze) == ("09", "00", "EVERY 5 MIN")


@pytest.mark.asyncio
async def test_save_schedules_soonest_alarm_not_newest(alarm_store, cache) -> None:
    backend = RecordingBackend()
    service = _service(alarm_store, cache, backend)
    await service.start()
    soon = await service.create_alarm(AlarmDraft(time="08:05", days=MONDAY_ONLY))

    await service.save_and_schedule(AlarmDraft(time="11:00", days=MONDAY_ONLY))

    assert backend.requests[0].data["alarmId"] == soon.id
    assert backend.requests[0].seconds == 300


@pytest.mark.asyncio
async def test_permission_denied_is_reported(alarm_store, cache) -> None:
    backend = RecordingBackend(permission=PermissionStatus.DENIED)
    service = _service(alarm_store, cache, backend)
    await service.start()

    result = await service.save_and_schedule(AlarmDraft(time="09:00", days=MONDAY_ONLY))

    assert result.alarm is not None
    assert result.notification_id is None
    assert result.error == "Please enable notifications to set alarms"
    assert backend.requests == []


@pytest.mark.asyncio
async def test_persistence_failure_keeps_state_and_reports() -> None:
    cache = AlarmCache(FailingStore(fail_set=True), clock=ManualClock())
    store = AlarmStore(cache, id_factory=lambda: "kept")
    backend = RecordingBackend()
    service = _service(store, cache, backend)
    await service.start()

    result = await service.save_and_schedule(AlarmDraft(time="09:00", days=MONDAY_ONLY))

    assert result.alarm is None
    assert "Failed to persist" in result.error
    assert service.next_alarm.alarm.id == "kept"
    assert backend.requests[0].data["alarmId"] == "kept"


@pytest.mark.asyncio
async def test_snooze_uses_saved_settings(alarm_store, cache) -> None:
    backend = RecordingBackend()
    service = _service(alarm_store, cache, backend)
    await AlarmSettingsStore(cache).update(snooze="EVERY 15 MIN")

    assert await service.snooze() == "n1"
    assert backend.requests[0].seconds == 900


@pytest.mark.asyncio
async def test_malformed_snooze_is_reported(alarm_store, cache) -> None:
    service = _service(alarm_store, cache)

    assert await service.snooze("EVENTUALLY") is None
    assert "Invalid snooze option" in service.last_error


@pytest.mark.asyncio
async def test_unknown_ids_are_noops(alarm_store, cache) -> None:
    service = _service(alarm_store, cache)
    await service.start()

    assert await service.toggle_alarm("missing") is None
    assert await service.delete_alarm("missing") is False
    assert service.last_error is None


@pytest.mark.asyncio
async def test_build_service_uses_config(tmp_path) -> None:
    config = Config()
    config.storage.path = str(tmp_path / "storage.json")
    config.resolver.offload = False
    service = build_service(config, backend=RecordingBackend())

    await service.start()
    alarm = await service.create_alarm(AlarmDraft(time="06:00", days=[True] * 7))

    assert alarm is not None
    assert (tmp_path / "storage.json").exists()
    assert service.next_alarm.alarm.id == alarm.id


@pytest.mark.asyncio
async def test_update_alarm_recomputes(alarm_store, cache) -> None:
    service = _service(alarm_store, cache)
    await service.start()
    alarm = await service.create_alarm(AlarmDraft(time="09:00", days=MONDAY_ONLY))

    updated = await service.update_alarm(alarm.id, AlarmDraft(time="08:20", days=MONDAY_ONLY))

    assert updated.id == alarm.id
    assert service.next_alarm.minutes_until == 20
    assert [a.time for a in await service.list_alarms()] == ["08:20"]


@pytest.mark.asyncio
async def test_unexpected_stored_shape_is_reported() -> None:
    cache = AlarmCache(CountingStore({"alarms": '{"oops": 1}'}), clock=ManualClock())
    service = _service(AlarmStore(cache), cache)
    await service.start()

    result = await service.save_and_schedule(AlarmDraft(time="09:00", days=MONDAY_ONLY))

    assert result.alarm is None
    assert "not a list" in result.error
    assert service.next_alarm == NextAlarm()
