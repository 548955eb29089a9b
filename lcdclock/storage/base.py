"""Durable store interface."""

from abc import ABC, abstractmethod


class DurableStore(ABC):
    """Abstract async key -> string store.

    Only single-key atomicity is expected. Implementations raise on failure;
    callers decide how to report it.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored string, or None if the key is missing."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Persist ``value`` under ``key``."""
        pass
