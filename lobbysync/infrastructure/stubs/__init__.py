"""Infrastructure stubs - in-memory implementations for development and tests."""

from lobbysync.infrastructure.stubs.key_value_store_stub import KeyValueStoreStub
from lobbysync.infrastructure.stubs.session_store_stub import (
    DEFAULT_CONSTRAINTS,
    SessionStoreStub,
    UniqueConstraint,
)

__all__: list[str] = [
    "DEFAULT_CONSTRAINTS",
    "KeyValueStoreStub",
    "SessionStoreStub",
    "UniqueConstraint",
]
