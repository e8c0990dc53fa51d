"""In-memory Session Store Gateway for development and testing.

Rows live in per-table dictionaries keyed by a running row number. Every
operation runs under one asyncio.Lock, so each insert, conditional update
and delete is atomic with respect to the others, which is all the
coordination core relies on.

Unique constraints mirror the SQL schema, including the partial constraint
that allows only one forming session.

WARNING: This stub is NOT for production use.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import AsyncIterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from structlog import get_logger

from lobbysync.application.ports.session_store import (
    ALL_EVENTS,
    ChangeEvent,
    ChangeEventType,
    Filter,
    OrderBy,
    Row,
    SessionStoreGatewayProtocol,
    Table,
)
from lobbysync.domain.errors.store import ConflictError, StoreUnavailableError

logger = get_logger()


@dataclass(frozen=True)
class UniqueConstraint:
    """A unique constraint over one or more columns.

    Attributes:
        name: Constraint name, reported in ConflictError.
        columns: Columns whose combined values must be unique.
        where: Optional equality filter making the constraint partial.
    """

    name: str
    columns: tuple[str, ...]
    where: Mapping[str, Any] | None = None

    def applies_to(self, row: Row) -> bool:
        return self.where is None or _matches(row, self.where)

    def key(self, row: Row) -> tuple[Any, ...]:
        return tuple(row.get(column) for column in self.columns)


DEFAULT_CONSTRAINTS: dict[Table, tuple[UniqueConstraint, ...]] = {
    Table.SESSIONS: (
        UniqueConstraint("sessions_pkey", ("id",)),
        UniqueConstraint(
            "sessions_one_forming", ("status",), where={"status": "forming"}
        ),
    ),
    Table.PARTICIPANTS: (
        UniqueConstraint("participants_pkey", ("id",)),
        UniqueConstraint(
            "participants_session_join_order", ("session_id", "join_order")
        ),
    ),
}


@dataclass
class _InjectedFailure:
    operation: str
    table: Table | None
    where: Mapping[str, Any] | None
    remaining: int

    def matches(self, operation: str, table: Table, target: Mapping[str, Any]) -> bool:
        if self.operation != operation or self.remaining <= 0:
            return False
        if self.table is not None and self.table != table:
            return False
        if self.where is None:
            return True
        return all(target.get(key) == value for key, value in self.where.items())


class _Subscription:
    """One subscriber's change feed.

    The queue is registered on construction, so changes made after
    subscribe() returns are delivered even before the first iteration.
    """

    def __init__(
        self,
        owner: SessionStoreStub,
        table: Table,
        where: Filter,
        events: frozenset[ChangeEventType],
    ) -> None:
        self._owner = owner
        self.table = table
        self.where = dict(where)
        self.events = events
        self._queue: asyncio.Queue[ChangeEvent | StoreUnavailableError] = (
            asyncio.Queue()
        )
        self._closed = False
        owner._subscriptions.append(self)

    def offer(self, event: ChangeEvent) -> None:
        if (
            event.table == self.table
            and event.event_type in self.events
            and _matches(event.new_row, self.where)
        ):
            self._queue.put_nowait(event)

    def fail(self, error: StoreUnavailableError) -> None:
        self._queue.put_nowait(error)

    def __aiter__(self) -> _Subscription:
        return self

    async def __anext__(self) -> ChangeEvent:
        if self._closed:
            raise StopAsyncIteration
        try:
            item = await self._queue.get()
        except asyncio.CancelledError:
            await self.aclose()
            raise
        if isinstance(item, StoreUnavailableError):
            await self.aclose()
            raise item
        return item

    async def aclose(self) -> None:
        if not self._closed:
            self._closed = True
            self._owner._unsubscribe(self)


@dataclass
class _TableData:
    rows: dict[int, Row] = field(default_factory=dict)
    next_key: int = 1


class SessionStoreStub(SessionStoreGatewayProtocol):
    """In-memory implementation of SessionStoreGatewayProtocol.

    Features:
    - Atomic conditional writes under a single asyncio.Lock
    - Unique and partial unique constraints raising ConflictError
    - Change feeds with per-subscriber queues
    - Failure injection for error path testing

    Example:
        store = SessionStoreStub()
        store.inject_failure("update", Table.PARTICIPANTS, where={"id": "p2"})
        await store.update(Table.PARTICIPANTS, {"id": "p2"}, {"is_ready": True})
        # Raises StoreUnavailableError once
    """

    def __init__(
        self,
        constraints: Mapping[Table, Sequence[UniqueConstraint]] | None = None,
    ) -> None:
        """Initialize empty tables.

        Args:
            constraints: Unique constraints per table. Defaults to the
                constraints of the SQL schema.
        """
        source = DEFAULT_CONSTRAINTS if constraints is None else constraints
        self._constraints = {table: tuple(source.get(table, ())) for table in Table}
        self._tables = {table: _TableData() for table in Table}
        self._lock = asyncio.Lock()
        self._subscriptions: list[_Subscription] = []
        self._failures: list[_InjectedFailure] = []

        logger.warning(
            "session_store_stub_active",
            message="[DEV MODE] Using in-memory session store - NOT FOR PRODUCTION",
        )

    # =========================================================================
    # SessionStoreGatewayProtocol Implementation
    # =========================================================================

    async def insert(self, table: Table, row: Row) -> Row:
        await asyncio.sleep(0)
        async with self._lock:
            self._check_failure("insert", table, row)
            stored = copy.deepcopy(dict(row))
            self._check_constraints(table, stored, exclude=None)
            data = self._tables[table]
            data.rows[data.next_key] = stored
            data.next_key += 1
            self._publish(ChangeEventType.INSERT, table, stored)
            return copy.deepcopy(stored)

    async def update(
        self,
        table: Table,
        where: Filter,
        patch: Filter,
        condition: Filter | None = None,
    ) -> int:
        await asyncio.sleep(0)
        async with self._lock:
            self._check_failure("update", table, where)
            data = self._tables[table]
            targets = [
                key
                for key, row in data.rows.items()
                if _matches(row, where)
                and (condition is None or _matches(row, condition))
            ]
            updated: dict[int, Row] = {}
            for key in targets:
                candidate = {**data.rows[key], **copy.deepcopy(dict(patch))}
                self._check_constraints(
                    table, candidate, exclude=set(targets), pending=updated
                )
                updated[key] = candidate
            data.rows.update(updated)
            for row in updated.values():
                self._publish(ChangeEventType.UPDATE, table, row)
            return len(updated)

    async def query(
        self,
        table: Table,
        where: Filter,
        order_by: Sequence[OrderBy] = (),
        limit: int | None = None,
    ) -> list[Row]:
        await asyncio.sleep(0)
        async with self._lock:
            self._check_failure("query", table, where)
            rows = [
                row for row in self._tables[table].rows.values() if _matches(row, where)
            ]
            for order in reversed(order_by):
                rows.sort(key=lambda r, f=order.field: r[f], reverse=order.descending)
            if limit is not None:
                rows = rows[:limit]
            return [copy.deepcopy(row) for row in rows]

    async def count(self, table: Table, where: Filter) -> int:
        await asyncio.sleep(0)
        async with self._lock:
            self._check_failure("count", table, where)
            return sum(
                1 for row in self._tables[table].rows.values() if _matches(row, where)
            )

    async def delete(self, table: Table, where: Filter) -> int:
        await asyncio.sleep(0)
        async with self._lock:
            self._check_failure("delete", table, where)
            data = self._tables[table]
            doomed = [key for key, row in data.rows.items() if _matches(row, where)]
            for key in doomed:
                row = data.rows.pop(key)
                self._publish(ChangeEventType.DELETE, table, row)
            return len(doomed)

    def subscribe(
        self,
        table: Table,
        where: Filter,
        events: frozenset[ChangeEventType] = ALL_EVENTS,
    ) -> AsyncIterator[ChangeEvent]:
        return _Subscription(self, table, where, events)

    # =========================================================================
    # Test Control Methods
    # =========================================================================

    def inject_failure(
        self,
        operation: str,
        table: Table | None = None,
        *,
        where: Mapping[str, Any] | None = None,
        times: int = 1,
    ) -> None:
        """Make the next matching calls raise StoreUnavailableError.

        Args:
            operation: Gateway operation name ("insert", "update", ...).
            table: Restrict to one table. None matches every table.
            where: Restrict to calls whose filter (or inserted row) has
                these values.
            times: How many matching calls fail.
        """
        self._failures.append(
            _InjectedFailure(
                operation=operation,
                table=table,
                where=dict(where) if where is not None else None,
                remaining=times,
            )
        )

    def clear_failures(self) -> None:
        """Drop every pending injected failure."""
        self._failures.clear()

    def break_subscriptions(self, table: Table) -> int:
        """Terminate every open feed on a table with StoreUnavailableError.

        Returns:
            Number of feeds broken.
        """
        broken = [sub for sub in self._subscriptions if sub.table == table]
        for sub in broken:
            sub.fail(StoreUnavailableError("subscribe", table.value, "feed dropped"))
        return len(broken)

    def rows(self, table: Table) -> list[Row]:
        """Copies of every row in a table, in insertion order."""
        return [copy.deepcopy(row) for row in self._tables[table].rows.values()]

    @property
    def subscription_count(self) -> int:
        """Number of open change feeds."""
        return len(self._subscriptions)

    def clear(self) -> None:
        """Remove all rows, failures and subscriptions."""
        self._tables = {table: _TableData() for table in Table}
        self._failures.clear()
        self._subscriptions.clear()

    # =========================================================================
    # Internals
    # =========================================================================

    def _check_failure(
        self, operation: str, table: Table, target: Mapping[str, Any]
    ) -> None:
        for failure in self._failures:
            if failure.matches(operation, table, target):
                failure.remaining -= 1
                raise StoreUnavailableError(operation, table.value, "injected failure")

    def _check_constraints(
        self,
        table: Table,
        candidate: Row,
        exclude: set[int] | None,
        pending: Mapping[int, Row] | None = None,
    ) -> None:
        existing = [
            row
            for key, row in self._tables[table].rows.items()
            if exclude is None or key not in exclude
        ]
        if pending:
            existing.extend(pending.values())
        for constraint in self._constraints[table]:
            if not constraint.applies_to(candidate):
                continue
            key = constraint.key(candidate)
            for row in existing:
                if constraint.applies_to(row) and constraint.key(row) == key:
                    raise ConflictError(table.value, constraint.name)

    def _publish(self, event_type: ChangeEventType, table: Table, row: Row) -> None:
        for sub in list(self._subscriptions):
            sub.offer(
                ChangeEvent(
                    event_type=event_type, table=table, new_row=copy.deepcopy(row)
                )
            )

    def _unsubscribe(self, sub: _Subscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)


def _matches(row: Mapping[str, Any], where: Mapping[str, Any]) -> bool:
    return all(row.get(column) == value for column, value in where.items())
