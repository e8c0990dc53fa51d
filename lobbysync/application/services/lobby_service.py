"""Lobby membership service - join, resume, readiness and votes.

Join resolution:
    join(display_name):
      ├─ identity.get_participant_id()     # stable per device
      ├─ roster.remove_participant(own id) # clear a row from an older session
      └─ up to join_retry_attempts times:
           ├─ find the forming session, or create one
           │    └─ ConflictError -> another client created it, re-query
           ├─ join_order = max(join_order) + 1
           └─ insert participant
                └─ ConflictError -> join_order taken, start over

Only the owning client writes is_ready, has_voted and last_seen of its own
row. has_voted is true-only: voting twice is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass

from lobbysync.application.ports.time_authority import TimeAuthorityProtocol
from lobbysync.application.services.base import LoggingMixin
from lobbysync.application.services.device_identity_service import (
    DeviceIdentityService,
)
from lobbysync.application.services.session_roster_service import (
    SessionRosterService,
)
from lobbysync.config.lobby_config import LobbyConfig
from lobbysync.domain.errors.lobby import (
    InvalidDisplayNameError,
    JoinConflictError,
    ParticipantNotFoundError,
    SessionNotFoundError,
)
from lobbysync.domain.errors.store import ConflictError
from lobbysync.domain.models.participant import Participant
from lobbysync.domain.models.session import Session


@dataclass(frozen=True)
class Membership:
    """A participant together with the session it belongs to."""

    session: Session
    participant: Participant


class LobbyService(LoggingMixin):
    """Membership operations for one client.

    Attributes:
        _roster: Typed store access.
        _identity: Per-device participant id.
        _time: Injected clock.
        _config: Name bound and join retry budget.
    """

    def __init__(
        self,
        roster: SessionRosterService,
        identity: DeviceIdentityService,
        time_authority: TimeAuthorityProtocol,
        config: LobbyConfig,
    ) -> None:
        """Initialize the service.

        Args:
            roster: Typed store access.
            identity: Per-device participant id.
            time_authority: Injected clock.
            config: Name bound and join retry budget.
        """
        self._roster = roster
        self._identity = identity
        self._time = time_authority
        self._config = config
        self._init_logger()

    async def resume(self) -> Membership | None:
        """Pick up this device's existing row if its session is still forming.

        Returns:
            The existing membership, or None if there is nothing to resume.
        """
        participant_id = await self._identity.get_participant_id()
        participant = await self._roster.get_participant(participant_id)
        if participant is None:
            return None

        try:
            session = await self._roster.get_session(participant.session_id)
        except SessionNotFoundError:
            return None
        if not session.is_forming:
            return None

        self._log_operation(
            "resume",
            participant_id=participant_id,
            session_id=str(session.id),
        ).info("membership_resumed", join_order=participant.join_order)
        return Membership(session=session, participant=participant)

    async def join(self, display_name: str) -> Membership:
        """Join the current forming session, creating one if needed.

        Args:
            display_name: Name to show to other participants.

        Returns:
            The new membership.

        Raises:
            InvalidDisplayNameError: If the trimmed name is empty or too long.
            JoinConflictError: If every attempt lost a race.
            StoreError: On transient store failures.
        """
        name = display_name.strip()
        if not name or len(name) > self._config.max_display_name_length:
            raise InvalidDisplayNameError(name, self._config.max_display_name_length)

        participant_id = await self._identity.get_participant_id()
        log = self._log_operation("join", participant_id=participant_id)

        await self._roster.remove_participant(participant_id)

        attempts = self._config.join_retry_attempts
        for attempt in range(1, attempts + 1):
            session = await self._resolve_forming_session()
            if session is None:
                log.info("join_session_race_lost", attempt=attempt)
                continue

            join_order = await self._roster.next_join_order(session.id)
            candidate = Participant(
                id=participant_id,
                session_id=session.id,
                display_name=name,
                join_order=join_order,
                last_seen=self._time.now(),
            )
            try:
                participant = await self._roster.add_participant(candidate)
            except ConflictError as exc:
                log.info(
                    "join_order_race_lost",
                    attempt=attempt,
                    join_order=join_order,
                    constraint=exc.constraint,
                )
                continue

            log.info(
                "participant_joined",
                session_id=str(session.id),
                join_order=participant.join_order,
                attempt=attempt,
            )
            return Membership(session=session, participant=participant)

        log.warning("join_failed", attempts=attempts)
        raise JoinConflictError(participant_id, attempts)

    async def _resolve_forming_session(self) -> Session | None:
        """Find the forming session or create it, reusing a concurrent winner."""
        session = await self._roster.find_forming_session()
        if session is not None:
            return session
        try:
            session = await self._roster.create_session(self._time.now())
        except ConflictError:
            return await self._roster.find_forming_session()
        self._log_operation("join", session_id=str(session.id)).info(
            "session_created"
        )
        return session

    async def toggle_ready(self, participant: Participant) -> Participant:
        """Flip this client's readiness flag.

        Args:
            participant: This client's current row.

        Returns:
            The row with the new readiness value.

        Raises:
            ParticipantNotFoundError: If the row no longer exists.
        """
        updated = participant.with_ready(not participant.is_ready)
        affected = await self._roster.update_participant(
            participant.id, is_ready=updated.is_ready
        )
        if affected == 0:
            raise ParticipantNotFoundError(participant.id)
        self._log_operation("toggle_ready", participant_id=participant.id).info(
            "readiness_changed", is_ready=updated.is_ready
        )
        return updated

    async def vote_to_start(self, participant: Participant) -> Participant:
        """Record this client's vote to start. Voting twice is a no-op.

        Args:
            participant: This client's current row.

        Returns:
            The row with has_voted set.

        Raises:
            ParticipantNotFoundError: If the row no longer exists.
        """
        if participant.has_voted:
            return participant
        affected = await self._roster.update_participant(
            participant.id, has_voted=True
        )
        if affected == 0:
            raise ParticipantNotFoundError(participant.id)
        self._log_operation("vote_to_start", participant_id=participant.id).info(
            "vote_recorded"
        )
        return participant.with_vote()

    async def leave(self, participant: Participant) -> None:
        """Remove this client's row on an explicit user request.

        Args:
            participant: This client's current row.
        """
        await self._roster.remove_participant(participant.id)
        self._log_operation(
            "leave",
            participant_id=participant.id,
            session_id=str(participant.session_id),
        ).info("participant_left")
