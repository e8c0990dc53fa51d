"""Session roster service - typed access to sessions and participants.

This service is the only place that knows table names, column names and
row shapes. Everything above it works with Session and Participant models.

Constraints:
- activate() is a conditional write on status = forming; a zero row count
  means another coordinator already won and is reported as False, never
  raised.
- set_status() and clear_participant_flags() are unconditional (last
  writer wins).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from lobbysync.application.ports.session_store import (
    ChangeEvent,
    OrderBy,
    SessionStoreGatewayProtocol,
    Table,
)
from lobbysync.application.services.base import LoggingMixin
from lobbysync.domain.errors.lobby import SessionNotFoundError
from lobbysync.domain.models.participant import Participant
from lobbysync.domain.models.session import Session, SessionStatus


class SessionRosterService(LoggingMixin):
    """Typed facade over the Session Store Gateway.

    Attributes:
        _store: The injected Session Store Gateway.
    """

    def __init__(self, store: SessionStoreGatewayProtocol) -> None:
        """Initialize the service.

        Args:
            store: The Session Store Gateway.
        """
        self._store = store
        self._init_logger()

    # =========================================================================
    # Sessions
    # =========================================================================

    async def get_session(self, session_id: UUID) -> Session:
        """Fetch a session by id.

        Raises:
            SessionNotFoundError: If no such session exists.
        """
        rows = await self._store.query(Table.SESSIONS, {"id": session_id}, limit=1)
        if not rows:
            raise SessionNotFoundError(session_id)
        return Session.from_row(rows[0])

    async def find_forming_session(self) -> Session | None:
        """Find the newest session still in the forming state."""
        rows = await self._store.query(
            Table.SESSIONS,
            {"status": SessionStatus.FORMING.value},
            order_by=(OrderBy("created_at", descending=True),),
            limit=1,
        )
        return Session.from_row(rows[0]) if rows else None

    async def create_session(self, now: datetime) -> Session:
        """Insert a new forming session.

        Raises:
            ConflictError: If a forming session was created concurrently.
        """
        session = Session(
            id=uuid4(),
            status=SessionStatus.FORMING,
            created_at=now,
        )
        row = await self._store.insert(Table.SESSIONS, session.to_row())
        return Session.from_row(row)

    async def activate(self, session_id: UUID, activated_at: datetime) -> bool:
        """Move a session from forming to active with a conditional write.

        Args:
            session_id: The session to activate.
            activated_at: Activation timestamp.

        Returns:
            True if this call performed the transition, False if the stored
            status was no longer forming.
        """
        affected = await self._store.update(
            Table.SESSIONS,
            where={"id": session_id},
            patch={
                "status": SessionStatus.ACTIVE.value,
                "activated_at": activated_at,
            },
            condition={"status": SessionStatus.FORMING.value},
        )
        return affected == 1

    async def set_status(
        self,
        session_id: UUID,
        status: SessionStatus,
        activated_at: datetime | None = None,
    ) -> int:
        """Unconditionally overwrite a session's status."""
        patch: dict[str, Any] = {"status": status.value}
        if status == SessionStatus.FORMING:
            patch["activated_at"] = activated_at
        return await self._store.update(Table.SESSIONS, {"id": session_id}, patch)

    # =========================================================================
    # Participants
    # =========================================================================

    async def list_participants(self, session_id: UUID) -> list[Participant]:
        """All participant rows of a session, ordered by join_order."""
        rows = await self._store.query(
            Table.PARTICIPANTS,
            {"session_id": session_id},
            order_by=(OrderBy("join_order"),),
        )
        return [Participant.from_row(row) for row in rows]

    async def get_participant(self, participant_id: str) -> Participant | None:
        """Fetch a participant row by id, if it exists."""
        rows = await self._store.query(
            Table.PARTICIPANTS, {"id": participant_id}, limit=1
        )
        return Participant.from_row(rows[0]) if rows else None

    async def count_participants(self, session_id: UUID) -> int:
        """Number of participant rows in a session, active or not."""
        return await self._store.count(Table.PARTICIPANTS, {"session_id": session_id})

    async def next_join_order(self, session_id: UUID) -> int:
        """Next join_order for a session: highest allocated plus one.

        Departures leave gaps, so the row count is not a safe source for
        the next value.
        """
        rows = await self._store.query(
            Table.PARTICIPANTS,
            {"session_id": session_id},
            order_by=(OrderBy("join_order", descending=True),),
            limit=1,
        )
        return int(rows[0]["join_order"]) + 1 if rows else 1

    async def add_participant(self, participant: Participant) -> Participant:
        """Insert a participant row.

        Raises:
            ConflictError: If the id or (session_id, join_order) is taken.
        """
        row = await self._store.insert(Table.PARTICIPANTS, participant.to_row())
        return Participant.from_row(row)

    async def update_participant(self, participant_id: str, **patch: Any) -> int:
        """Patch one participant row owned by this client."""
        return await self._store.update(
            Table.PARTICIPANTS, {"id": participant_id}, patch
        )

    async def remove_participant(self, participant_id: str) -> int:
        """Delete a participant row."""
        return await self._store.delete(Table.PARTICIPANTS, {"id": participant_id})

    async def clear_participant_flags(self, session_id: UUID) -> int:
        """Return every participant of a session to its initial round state."""
        return await self._store.update(
            Table.PARTICIPANTS,
            {"session_id": session_id},
            {"is_ready": False, "has_voted": False, "assigned_role": None},
        )

    # =========================================================================
    # Change feeds
    # =========================================================================

    def watch_session(self, session_id: UUID) -> AsyncIterator[ChangeEvent]:
        """Stream changes to one session row."""
        return self._store.subscribe(Table.SESSIONS, {"id": session_id})

    def watch_participants(self, session_id: UUID) -> AsyncIterator[ChangeEvent]:
        """Stream changes to every participant row of one session."""
        return self._store.subscribe(Table.PARTICIPANTS, {"session_id": session_id})
