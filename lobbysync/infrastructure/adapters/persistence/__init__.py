"""PostgreSQL persistence adapters."""

from lobbysync.infrastructure.adapters.persistence.postgres_session_store import (
    PostgresSessionStore,
)
from lobbysync.infrastructure.adapters.persistence.schema import (
    create_schema,
    drop_schema,
    metadata,
    participants,
    sessions,
)

__all__: list[str] = [
    "PostgresSessionStore",
    "create_schema",
    "drop_schema",
    "metadata",
    "participants",
    "sessions",
]
