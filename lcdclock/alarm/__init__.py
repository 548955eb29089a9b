"""Alarm system for lcdclock - weekly-recurring alarms and next-alarm resolution."""

from lcdclock.alarm.cache import AlarmCache
from lcdclock.alarm.models import Alarm, AlarmDraft, AlarmSettings
from lcdclock.alarm.resolver import NextAlarm, resolve_next_alarm, resolve_next_alarm_async
from lcdclock.alarm.settings import AlarmSettingsStore
from lcdclock.alarm.store import AlarmStore

__all__ = [
    "Alarm",
    "AlarmCache",
    "AlarmDraft",
    "AlarmSettings",
    "AlarmSettingsStore",
    "AlarmStore",
    "NextAlarm",
    "resolve_next_alarm",
    "resolve_next_alarm_async",
]
