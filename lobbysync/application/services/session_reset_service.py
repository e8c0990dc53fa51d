"""Session reset service - return a session to forming, or close it.

Reset is a development and recovery operation. It overwrites without any
condition: it sets the session back to forming, then clears every
participant's readiness, vote and role. Running it twice yields the same
state. The status goes first: if another session is already forming the
write is refused before any participant row changes.

Close is the normal end of an active round (active -> closed). A closed
session is never reused; the next join creates a new forming session.
"""

from __future__ import annotations

from uuid import UUID

from lobbysync.application.services.base import LoggingMixin
from lobbysync.application.services.session_roster_service import (
    SessionRosterService,
)
from lobbysync.domain.errors.lobby import SessionNotFoundError
from lobbysync.domain.models.session import Session, SessionStatus


class SessionResetService(LoggingMixin):
    """Unconditional session lifecycle writes."""

    def __init__(self, roster: SessionRosterService) -> None:
        self._roster = roster
        self._init_logger(component="coordination")

    async def reset(self, session_id: UUID) -> Session:
        """Clear participant flags and set the session back to forming.

        Args:
            session_id: The session to reset.

        Returns:
            The session as stored after the reset.

        Raises:
            SessionNotFoundError: If the session does not exist.
            ConflictError: If a different session is already forming; nothing
                is changed.
        """
        log = self._log_operation("reset", session_id=str(session_id))
        affected = await self._roster.set_status(
            session_id, SessionStatus.FORMING, activated_at=None
        )
        if affected == 0:
            raise SessionNotFoundError(session_id)
        cleared = await self._roster.clear_participant_flags(session_id)
        log.info("session_reset", participants_cleared=cleared)
        return await self._roster.get_session(session_id)

    async def close(self, session_id: UUID) -> Session:
        """Mark a session closed.

        Args:
            session_id: The session to close.

        Returns:
            The closed session.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        affected = await self._roster.set_status(session_id, SessionStatus.CLOSED)
        if affected == 0:
            raise SessionNotFoundError(session_id)
        self._log_operation("close", session_id=str(session_id)).info(
            "session_closed"
        )
        return await self._roster.get_session(session_id)
