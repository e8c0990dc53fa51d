"""Key-value store port - local durable storage on the client device.

Used for the per-device participant identifier: read once at startup and
written once on first generation. Survives reloads and restarts.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStoreProtocol(Protocol):
    """Abstract interface for local durable key-value storage."""

    async def get(self, key: str) -> str | None:
        """Read a value.

        Args:
            key: The key to read.

        Returns:
            The stored value, or None if the key was never written.
        """
        ...

    async def set(self, key: str, value: str) -> None:
        """Write a value durably.

        Args:
            key: The key to write.
            value: The value to store.
        """
        ...
