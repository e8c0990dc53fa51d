"""JSON file key-value store for the per-device participant id.

All values live in one small JSON object on disk. Writes go to a sibling
temporary file first and are swapped in with os.replace, so a crash never
leaves a half-written file behind. File I/O runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path

from structlog import get_logger

from lobbysync.application.ports.key_value_store import KeyValueStoreProtocol

logger = get_logger()

DEFAULT_STATE_FILE = "lobby_state.json"


class FileKeyValueStore(KeyValueStoreProtocol):
    """KeyValueStoreProtocol persisted to a JSON file.

    Attributes:
        path: The JSON file holding every value.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the store. The file is created on the first write.

        Args:
            path: The JSON file holding every value.
        """
        self.path = path
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        async with self._lock:
            values = await asyncio.to_thread(self._read)
        value = values.get(key)
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            values = await asyncio.to_thread(self._read)
            values[key] = value
            await asyncio.to_thread(self._write, values)
        logger.debug("local_value_written", key=key, path=str(self.path))

    def _read(self) -> dict[str, object]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            logger.warning("local_state_corrupt", path=str(self.path))
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, values: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(f"{self.path.name}.tmp")
        tmp.write_text(json.dumps(values, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp, self.path)
