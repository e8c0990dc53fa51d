"""In-memory key-value store for development and testing.

WARNING: This stub is NOT for production use. Values are lost when the
process exits, so every run gets a new device identity.
"""

from __future__ import annotations

from structlog import get_logger

from lobbysync.application.ports.key_value_store import KeyValueStoreProtocol

logger = get_logger()


class KeyValueStoreStub(KeyValueStoreProtocol):
    """Dictionary-backed KeyValueStoreProtocol.

    Attributes:
        reads: Number of get() calls.
        writes: Number of set() calls.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        """Initialize the stub.

        Args:
            initial: Values present before the first read.
        """
        self._values: dict[str, str] = dict(initial or {})
        self.reads = 0
        self.writes = 0
        logger.warning(
            "key_value_store_stub_active",
            message="[DEV MODE] Using in-memory key-value store - NOT FOR PRODUCTION",
        )

    async def get(self, key: str) -> str | None:
        self.reads += 1
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self.writes += 1
        self._values[key] = value
