"""Persisted alarm-editor settings."""

from loguru import logger
from pydantic import ValidationError

from lcdclock.alarm.cache import AlarmCache
from lcdclock.alarm.models import AlarmSettings

SETTINGS_KEY = "@alarm_settings"


class AlarmSettingsStore:
    """Remembers the last time, sound, snooze and repeat chosen in the editor."""

    def __init__(self, cache: AlarmCache, key: str = SETTINGS_KEY):
        self.cache = cache
        self.key = key

    async def load(self) -> AlarmSettings:
        """Return saved settings, or defaults when none or corrupt."""
        raw = await self.cache.load(self.key, None)
        if raw is None:
            return AlarmSettings()
        try:
            return AlarmSettings.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid alarm settings: {e.error_count()} validation error(s)")
            return AlarmSettings()

    async def save(self, settings: AlarmSettings) -> None:
        """Persist settings. Raises ``PersistenceError`` if the write fails."""
        await self.cache.save(self.key, settings.model_dump())

    async def update(self, **changes: str) -> AlarmSettings:
        """Merge ``changes`` into the saved settings and persist the result."""
        current = await self.load()
        merged = AlarmSettings.model_validate({**current.model_dump(), **changes})
        await self.save(merged)
        return merged
