"""SQLAlchemy table definitions for the session store.

Two tables back the coordination core:

    sessions      (id, status, created_at, activated_at)
    participants  (id, session_id, display_name, join_order, is_ready,
                   has_voted, assigned_role, last_seen)

Constraints the join and activation flows depend on:
- sessions_one_forming: partial unique index, at most one forming session
- participants_session_join_order: unique (session_id, join_order)
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    Uuid,
    false,
)
from sqlalchemy.ext.asyncio import AsyncEngine

from lobbysync.domain.models.participant import MAX_DISPLAY_NAME_LENGTH

metadata = MetaData()

sessions = Table(
    "sessions",
    metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True),
    Column("status", String(16), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("activated_at", DateTime(timezone=True), nullable=True),
    CheckConstraint(
        "status IN ('forming', 'active', 'closed')", name="sessions_status_check"
    ),
)

Index(
    "sessions_one_forming",
    sessions.c.status,
    unique=True,
    postgresql_where=sessions.c.status == "forming",
    sqlite_where=sessions.c.status == "forming",
)
Index("sessions_created_at_idx", sessions.c.created_at)

participants = Table(
    "participants",
    metadata,
    Column("id", String(64), primary_key=True),
    Column(
        "session_id",
        Uuid(as_uuid=True),
        ForeignKey("sessions.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("display_name", String(MAX_DISPLAY_NAME_LENGTH), nullable=False),
    Column("join_order", Integer, nullable=False),
    Column("is_ready", Boolean, nullable=False, server_default=false()),
    Column("has_voted", Boolean, nullable=False, server_default=false()),
    Column("assigned_role", String(32), nullable=True),
    Column("last_seen", DateTime(timezone=True), nullable=False),
    UniqueConstraint(
        "session_id", "join_order", name="participants_session_join_order"
    ),
    CheckConstraint("join_order >= 1", name="participants_join_order_check"),
)


async def create_schema(engine: AsyncEngine) -> None:
    """Create both tables and their indexes if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


async def drop_schema(engine: AsyncEngine) -> None:
    """Drop both tables. Used by integration tests."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
