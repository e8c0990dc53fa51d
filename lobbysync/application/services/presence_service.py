"""Presence service - heartbeat emission and active-set reads.

Every owning client writes last_seen = now at a fixed interval. Nothing
acknowledges the write and nothing retries it beyond the store's own
policy: a missed beat is absorbed by the inactivity threshold, which covers
at least three intervals.

Departure is advisory. On teardown the client tries to delete its own row,
but correctness never depends on it: a client that vanishes simply ages out
of the active set.

Architecture Pattern:
    run(participant_id):
      loop:
        ├─ beat(participant_id)        # last_seen = now, errors logged
        └─ time.sleep(interval)        # cancellation point

    fetch_active(session_id):
      ├─ roster.list_participants()
      └─ filter_active(now, threshold)
"""

from __future__ import annotations

from uuid import UUID

from lobbysync.application.ports.time_authority import TimeAuthorityProtocol
from lobbysync.application.services.base import LoggingMixin
from lobbysync.application.services.session_roster_service import (
    SessionRosterService,
)
from lobbysync.config.lobby_config import LobbyConfig
from lobbysync.domain.errors.store import StoreError
from lobbysync.domain.models.participant import Participant
from lobbysync.domain.services.presence import filter_active


class PresenceService(LoggingMixin):
    """Presence Tracker for one client.

    Attributes:
        _roster: Typed store access.
        _time: Injected clock and timer.
        _config: Heartbeat interval and inactivity threshold.
    """

    def __init__(
        self,
        roster: SessionRosterService,
        time_authority: TimeAuthorityProtocol,
        config: LobbyConfig,
    ) -> None:
        """Initialize the service.

        Args:
            roster: Typed store access.
            time_authority: Injected clock and timer.
            config: Heartbeat interval and inactivity threshold.
        """
        self._roster = roster
        self._time = time_authority
        self._config = config
        self._init_logger()

    async def beat(self, participant_id: str) -> bool:
        """Emit one liveness write.

        Store failures are logged and swallowed; the next beat is the retry.

        Args:
            participant_id: This client's participant id.

        Returns:
            True if the write reached a row, False otherwise.
        """
        try:
            affected = await self._roster.update_participant(
                participant_id, last_seen=self._time.now()
            )
        except StoreError as exc:
            self._log_operation("beat", participant_id=participant_id).warning(
                "heartbeat_write_failed", error=str(exc)
            )
            return False
        return affected > 0

    async def run(self, participant_id: str) -> None:
        """Emit heartbeats until cancelled.

        Args:
            participant_id: This client's participant id.
        """
        log = self._log_operation("run", participant_id=participant_id)
        log.debug(
            "heartbeat_loop_started",
            interval_seconds=self._config.heartbeat_interval_seconds,
        )
        try:
            while True:
                await self.beat(participant_id)
                await self._time.sleep(self._config.heartbeat_interval_seconds)
        finally:
            log.debug("heartbeat_loop_stopped")

    async def depart(self, participant_id: str) -> None:
        """Best-effort removal of this client's own row on teardown.

        Args:
            participant_id: This client's participant id.
        """
        log = self._log_operation("depart", participant_id=participant_id)
        try:
            removed = await self._roster.remove_participant(participant_id)
        except StoreError as exc:
            log.warning("departure_write_failed", error=str(exc))
            return
        log.info("participant_departed", removed=removed)

    async def fetch_active(self, session_id: UUID) -> tuple[Participant, ...]:
        """Read the authoritative active set of a session.

        Args:
            session_id: The session to read.

        Returns:
            Active participants ordered by join_order.
        """
        participants = await self._roster.list_participants(session_id)
        return filter_active(
            participants, self._time.now(), self._config.inactive_threshold
        )
