"""PostgreSQL Session Store Gateway (SQLAlchemy async + asyncpg).

Each gateway call runs in its own short transaction. The conditional
activation write is a single UPDATE ... WHERE id = :id AND status =
'forming'; under READ COMMITTED, PostgreSQL re-checks the WHERE clause
after acquiring the row lock, so at most one concurrent caller sees a row
count of 1.

Change feeds poll: the baseline query starts when subscribe() is called,
then every poll re-reads the filtered rows and diffs them against the
previous snapshot by primary key. subscribe() needs a running event loop.

Error mapping:
- IntegrityError -> ConflictError (constraint name preserved)
- any other SQLAlchemyError or OSError -> StoreUnavailableError
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from typing import Any

from sqlalchemy import ColumnElement, and_, delete, func, insert, select, update
from sqlalchemy import Table as SATable
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
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
from lobbysync.infrastructure.adapters.persistence.schema import (
    participants,
    sessions,
)

logger = get_logger()

TABLES: dict[Table, SATable] = {
    Table.SESSIONS: sessions,
    Table.PARTICIPANTS: participants,
}


class PostgresSessionStore(SessionStoreGatewayProtocol):
    """SessionStoreGatewayProtocol backed by PostgreSQL.

    Attributes:
        _session_factory: SQLAlchemy async session factory.
        _poll_interval: Seconds between change-feed polls.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        poll_interval_seconds: float = 1.0,
    ) -> None:
        """Initialize the gateway.

        Args:
            session_factory: SQLAlchemy async session factory.
            poll_interval_seconds: Seconds between change-feed polls.
        """
        self._session_factory = session_factory
        self._poll_interval = poll_interval_seconds
        self._log = logger.bind(component="persistence", store="postgres")

    async def insert(self, table: Table, row: Row) -> Row:
        sa_table = TABLES[table]
        stmt = insert(sa_table).values(**row).returning(*sa_table.c)
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                return dict(result.mappings().one())
        except IntegrityError as exc:
            constraint = _constraint_name(exc)
            self._log.debug("insert_conflict", table=table.value, constraint=constraint)
            raise ConflictError(table.value, constraint) from exc
        except (SQLAlchemyError, OSError) as exc:
            raise self._unavailable("insert", table, exc) from exc

    async def update(
        self,
        table: Table,
        where: Filter,
        patch: Filter,
        condition: Filter | None = None,
    ) -> int:
        sa_table = TABLES[table]
        clauses = _equals(sa_table, where) + _equals(sa_table, condition or {})
        stmt = update(sa_table).where(and_(*clauses)).values(**dict(patch))
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                return int(result.rowcount or 0)
        except IntegrityError as exc:
            raise ConflictError(table.value, _constraint_name(exc)) from exc
        except (SQLAlchemyError, OSError) as exc:
            raise self._unavailable("update", table, exc) from exc

    async def query(
        self,
        table: Table,
        where: Filter,
        order_by: Sequence[OrderBy] = (),
        limit: int | None = None,
    ) -> list[Row]:
        sa_table = TABLES[table]
        stmt = select(sa_table).where(and_(*_equals(sa_table, where)))
        for order in order_by:
            column = sa_table.c[order.field]
            stmt = stmt.order_by(column.desc() if order.descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [dict(row) for row in result.mappings().all()]
        except (SQLAlchemyError, OSError) as exc:
            raise self._unavailable("query", table, exc) from exc

    async def count(self, table: Table, where: Filter) -> int:
        sa_table = TABLES[table]
        stmt = (
            select(func.count())
            .select_from(sa_table)
            .where(and_(*_equals(sa_table, where)))
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return int(result.scalar() or 0)
        except (SQLAlchemyError, OSError) as exc:
            raise self._unavailable("count", table, exc) from exc

    async def delete(self, table: Table, where: Filter) -> int:
        sa_table = TABLES[table]
        stmt = delete(sa_table).where(and_(*_equals(sa_table, where)))
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                return int(result.rowcount or 0)
        except (SQLAlchemyError, OSError) as exc:
            raise self._unavailable("delete", table, exc) from exc

    def subscribe(
        self,
        table: Table,
        where: Filter,
        events: frozenset[ChangeEventType] = ALL_EVENTS,
    ) -> AsyncIterator[ChangeEvent]:
        # Baseline is read from subscribe time, ahead of the caller's own snapshot.
        baseline = asyncio.ensure_future(self.query(table, dict(where)))
        baseline.add_done_callback(_consume_exception)
        return self._poll(table, dict(where), events, baseline)

    async def _poll(
        self,
        table: Table,
        where: dict[str, Any],
        events: frozenset[ChangeEventType],
        baseline: asyncio.Future[list[Row]],
    ) -> AsyncIterator[ChangeEvent]:
        log = self._log.bind(table=table.value, operation="subscribe")
        previous = {row["id"]: row for row in await baseline}
        log.debug("change_feed_opened", rows=len(previous))
        while True:
            await asyncio.sleep(self._poll_interval)
            current = {row["id"]: row for row in await self.query(table, where)}
            for event in _diff(table, previous, current):
                if event.event_type in events:
                    yield event
            previous = current

    def _unavailable(
        self, operation: str, table: Table, exc: BaseException
    ) -> StoreUnavailableError:
        self._log.warning(
            "store_operation_failed",
            operation=operation,
            table=table.value,
            error=str(exc),
        )
        return StoreUnavailableError(operation, table.value, type(exc).__name__)


def _consume_exception(future: asyncio.Future[list[Row]]) -> None:
    # Raised again to the consumer on first iteration.
    if not future.cancelled():
        future.exception()


def _equals(sa_table: SATable, values: Filter) -> list[ColumnElement[bool]]:
    return [sa_table.c[column] == value for column, value in values.items()]


def _diff(
    table: Table, previous: dict[Any, Row], current: dict[Any, Row]
) -> list[ChangeEvent]:
    events: list[ChangeEvent] = []
    for key, row in current.items():
        old = previous.get(key)
        if old is None:
            events.append(ChangeEvent(ChangeEventType.INSERT, table, row))
        elif old != row:
            events.append(ChangeEvent(ChangeEventType.UPDATE, table, row))
    for key, row in previous.items():
        if key not in current:
            events.append(ChangeEvent(ChangeEventType.DELETE, table, row))
    return events


def _constraint_name(exc: IntegrityError) -> str:
    cause = getattr(exc.orig, "__cause__", None)
    name = getattr(cause, "constraint_name", None) or getattr(
        exc.orig, "constraint_name", None
    )
    return str(name) if name else "unique"
