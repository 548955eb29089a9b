"""TTL-bounded read-through / write-through cache over a durable store."""

import asyncio
import copy
import json
import time
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger

from lcdclock.errors import PersistenceError
from lcdclock.storage.base import DurableStore

DEFAULT_TTL_SECONDS = 60.0


@dataclass
class CacheEntry:
    """A cached value and the clock reading when it was stored."""
    value: Any
    stored_at: float


class AlarmCache:
    """
    Shared in-memory view of JSON values held in a durable store.

    One instance is shared by every consumer in the process, so all screens
    see the same collection.

    - ``load`` serves a fresh entry from memory, otherwise re-reads the store.
      Concurrent stale loads of one key fetch once.
    - ``save`` updates memory before the first ``await`` and only then writes
      through. Later loads see the new value even while the write is in
      flight. A failed write raises ``PersistenceError`` and memory is kept.
    - Corrupt or missing data loads as the caller's default. Read failures
      are reported through ``last_error`` / ``on_error`` and fall back to the
      previous value.
    """

    def __init__(
        self,
        store: DurableStore,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        on_error: Callable[[str, Exception], None] | None = None,
    ):
        """
        Initialize the cache.

        Args:
            store: Durable store to read from and write through to.
            ttl: Seconds a cached entry stays fresh.
            clock: Monotonic clock in seconds; injectable for tests.
            on_error: Optional callback for persistence failures.
        """
        self.store = store
        self.ttl = ttl
        self.clock = clock
        self.on_error = on_error
        self.last_error: dict[str, Exception] = {}
        self._entries: dict[str, CacheEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._generations: dict[str, int] = {}  # bumped by every save

    def _is_fresh(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and (self.clock() - entry.stored_at) < self.ttl

    def _lock_for(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def _report(self, key: str, error: Exception) -> None:
        self.last_error[key] = error
        if self.on_error:
            try:
                self.on_error(key, error)
            except Exception:
                logger.exception(f"Cache error callback failed for '{key}'")

    async def load(self, key: str, default: Any = None) -> Any:
        """
        Return the value for ``key``, re-reading the store when stale.

        Args:
            key: Logical name, e.g. ``"alarms"``.
            default: Returned when nothing usable is stored.

        Returns:
            The cached or freshly loaded value.
        """
        if self._is_fresh(key):
            logger.debug(f"Cache hit for '{key}'")
            return self._entries[key].value

        async with self._lock_for(key):
            # Another task may have refreshed the entry while we waited
            if self._is_fresh(key):
                return self._entries[key].value

            generation = self._generations.get(key, 0)
            logger.debug(f"Cache miss for '{key}', reading store")
            try:
                raw = await self.store.get(key)
            except Exception as e:
                logger.error(f"Failed to read '{key}' from store: {e}")
                self._report(key, e)
                stale = self._entries.get(key)
                return stale.value if stale else copy.deepcopy(default)

            saved = self._entries.get(key)
            if saved is not None and self._generations.get(key, 0) != generation:
                # A save landed while the read was in flight; it wins
                return saved.value

            value = self._deserialize(key, raw, default)
            self._entries[key] = CacheEntry(value=value, stored_at=self.clock())
            self.last_error.pop(key, None)
            return value

    async def save(self, key: str, value: Any) -> None:
        """
        Replace the value for ``key`` in memory, then persist it.

        Raises:
            PersistenceError: If the durable write fails. Memory is not rolled back.
        """
        self._generations[key] = self._generations.get(key, 0) + 1
        self._entries[key] = CacheEntry(value=value, stored_at=self.clock())

        try:
            payload = json.dumps(value, ensure_ascii=False)
            await self.store.set(key, payload)
        except Exception as e:
            logger.error(f"Failed to persist '{key}': {e}")
            self._report(key, e)
            raise PersistenceError(key, f"Failed to persist '{key}': {e}") from e

        self.last_error.pop(key, None)
        logger.debug(f"Persisted '{key}'")

    def peek(self, key: str, default: Any = None) -> Any:
        """Return the in-memory value without touching the store."""
        entry = self._entries.get(key)
        return entry.value if entry else default

    def invalidate(self, key: str | None = None) -> None:
        """Drop one entry, or all entries when ``key`` is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    @staticmethod
    def _deserialize(key: str, raw: str | None, default: Any) -> Any:
        if raw is None:
            return copy.deepcopy(default)
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Stored value for '{key}' is not valid JSON, using default: {e}")
            return copy.deepcopy(default)
