"""Durable key-value stores backing the alarm cache."""

from lcdclock.storage.base import DurableStore
from lcdclock.storage.json_file import JsonFileStore
from lcdclock.storage.memory import MemoryStore

__all__ = ["DurableStore", "JsonFileStore", "MemoryStore"]
