"""Session Store Gateway port - interface over the persistence collaborator.

Every read, write and subscription of the coordination core passes through
this port. Implementations may use PostgreSQL, Supabase, an in-memory stub,
or any store offering row storage, filtered queries and a change feed.

Constraints:
- update() with a condition is the ONLY mutual-exclusion primitive in the
  system. When the condition is unmet the write must be rejected with zero
  rows affected, never silently applied.
- subscribe() delivers at-least-once with no ordering across distinct rows.
  Consumers recompute from the latest state instead of applying deltas.
- insert() raises ConflictError on unique-constraint violations.

Usage:
    affected = await store.update(
        Table.SESSIONS,
        where={"id": session_id},
        patch={"status": "active", "activated_at": now},
        condition={"status": "forming"},
    )
    if affected == 0:
        # another coordinator already won
        ...
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

Row = dict[str, Any]
Filter = Mapping[str, Any]


class Table(Enum):
    """Tables owned by the coordination core."""

    SESSIONS = "sessions"
    PARTICIPANTS = "participants"


class ChangeEventType(Enum):
    """Kinds of change delivered by subscribe()."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


ALL_EVENTS: frozenset[ChangeEventType] = frozenset(ChangeEventType)


@dataclass(frozen=True)
class OrderBy:
    """Sort key for query().

    Attributes:
        field: Column to sort by.
        descending: Sort descending when True.
    """

    field: str
    descending: bool = False


@dataclass(frozen=True)
class ChangeEvent:
    """One change notification.

    Attributes:
        event_type: What happened to the row.
        table: Which table the row belongs to.
        new_row: Row after the change (for DELETE, the last known row).
    """

    event_type: ChangeEventType
    table: Table
    new_row: Row


@runtime_checkable
class SessionStoreGatewayProtocol(Protocol):
    """Abstract interface for the session store collaborator.

    All filters are equality filters over column values. All operations may
    raise StoreUnavailableError on transient failures.
    """

    async def insert(self, table: Table, row: Row) -> Row:
        """Insert a row.

        Args:
            table: Target table.
            row: Column values.

        Returns:
            The stored row, including store-side defaults.

        Raises:
            ConflictError: If the row violates a unique constraint.
        """
        ...

    async def update(
        self,
        table: Table,
        where: Filter,
        patch: Filter,
        condition: Filter | None = None,
    ) -> int:
        """Update every row matching where (and condition, if given).

        Args:
            table: Target table.
            where: Equality predicate selecting rows.
            patch: Column values to write.
            condition: Optional equality condition on the stored values. If
                unmet, the write is aborted and 0 is returned.

        Returns:
            Number of rows affected.
        """
        ...

    async def query(
        self,
        table: Table,
        where: Filter,
        order_by: Sequence[OrderBy] = (),
        limit: int | None = None,
    ) -> list[Row]:
        """Select rows.

        Args:
            table: Target table.
            where: Equality predicate selecting rows.
            order_by: Sort keys, applied in order.
            limit: Maximum number of rows.

        Returns:
            Matching rows (copies; mutating them does not touch the store).
        """
        ...

    async def count(self, table: Table, where: Filter) -> int:
        """Count rows matching where.

        Args:
            table: Target table.
            where: Equality predicate selecting rows.

        Returns:
            Number of matching rows.
        """
        ...

    async def delete(self, table: Table, where: Filter) -> int:
        """Delete rows matching where.

        Args:
            table: Target table.
            where: Equality predicate selecting rows.

        Returns:
            Number of rows deleted.
        """
        ...

    def subscribe(
        self,
        table: Table,
        where: Filter,
        events: frozenset[ChangeEventType] = ALL_EVENTS,
    ) -> AsyncIterator[ChangeEvent]:
        """Stream changes to rows matching where.

        The stream runs until the consuming task is cancelled or the
        iterator is closed.

        Args:
            table: Table to watch.
            where: Equality predicate on the new row.
            events: Event types to deliver.

        Returns:
            Async iterator of ChangeEvent, at-least-once, unordered across rows.
        """
        ...
