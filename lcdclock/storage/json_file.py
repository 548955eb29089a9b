"""Single-file JSON key-value store."""

import asyncio
import json
import os
import threading
from pathlib import Path

from loguru import logger

from lcdclock.storage.base import DurableStore


class JsonFileStore(DurableStore):
    """
    Persist every key as a string value inside one JSON object file.

    File I/O runs in a worker thread so the event loop is never blocked.
    Writes go to a temporary sibling and are moved into place with
    ``os.replace``, so a crash mid-write leaves the previous file intact.
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self._write_lock = threading.Lock()  # Serialise read-modify-write across keys

    async def get(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read_all)
        value = data.get(key)
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write_key, key, value)
        logger.debug(f"Stored key '{key}' in {self.path}")

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Storage file {self.path} is corrupt, treating as empty: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Storage file {self.path} does not hold an object, treating as empty")
            return {}
        return data

    def _write_key(self, key: str, value: str) -> None:
        with self._write_lock:
            data = self._read_all()
            data[key] = value

            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
