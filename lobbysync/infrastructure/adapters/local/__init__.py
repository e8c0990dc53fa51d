"""Local durable storage adapters."""

from lobbysync.infrastructure.adapters.local.file_key_value_store import (
    DEFAULT_STATE_FILE,
    FileKeyValueStore,
)

__all__: list[str] = ["DEFAULT_STATE_FILE", "FileKeyValueStore"]
