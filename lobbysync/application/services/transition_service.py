"""Transition service - the one-time forming -> active activation.

Only the elected coordinator calls activate(). Cross-client correctness comes
from the conditional write alone; the in-process in-flight guard only stops
this client's own event handlers from entering the sequence twice.

Architecture Pattern:
    activate(session_id):
      ├─ in-flight guard             # ALREADY_IN_FLIGHT if re-entered
      ├─ presence.fetch_active()     # refreshed roster, not the countdown's
      ├─ |active| < 2                # INSUFFICIENT_PARTICIPANTS
      ├─ assign_roles(|active|)      # Fisher-Yates over catalog
      ├─ write assigned_role         # concurrently, failures tolerated
      ├─ roster.activate()           # status=active IF status=forming
      │    └─ 0 rows                 # LOST_RACE, silent
      └─ reconcile failed role writes once
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

import structlog

from lobbysync.application.ports.time_authority import TimeAuthorityProtocol
from lobbysync.application.services.base import LoggingMixin
from lobbysync.application.services.presence_service import PresenceService
from lobbysync.application.services.session_roster_service import (
    SessionRosterService,
)
from lobbysync.domain.errors.store import StoreError
from lobbysync.domain.exceptions import LobbyError
from lobbysync.domain.models.session import Session, SessionStatus
from lobbysync.domain.services.quorum import MIN_QUORUM_PARTICIPANTS
from lobbysync.domain.services.role_assignment import assign_roles, build_role_plan


class TransitionOutcome(Enum):
    """Result of one activation attempt."""

    ACTIVATED = "activated"  # This client performed the transition
    LOST_RACE = "lost_race"  # Conditional write found status != forming
    INSUFFICIENT_PARTICIPANTS = "insufficient_participants"  # < 2 active
    ALREADY_IN_FLIGHT = "already_in_flight"  # Re-entered by this client
    FAILED = "failed"  # Transient store failure before the activating write


@dataclass(frozen=True)
class TransitionResult:
    """What an activation attempt did.

    Attributes:
        outcome: The outcome.
        session: The activated session (ACTIVATED only).
        role_plan: participant id -> role id written (or attempted).
        failed_role_writes: Participant ids whose role write still failed
            after reconciliation.
    """

    outcome: TransitionOutcome
    session: Session | None = None
    role_plan: dict[str, str | None] = field(default_factory=dict)
    failed_role_writes: tuple[str, ...] = ()


class TransitionService(LoggingMixin):
    """Transition Executor.

    Attributes:
        _roster: Typed store access.
        _presence: Authoritative active-set reads.
        _time: Injected clock.
        _rng: Random source for role shuffling.
        _in_flight: Session ids with an activation currently running.
    """

    def __init__(
        self,
        roster: SessionRosterService,
        presence: PresenceService,
        time_authority: TimeAuthorityProtocol,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            roster: Typed store access.
            presence: Authoritative active-set reads.
            time_authority: Injected clock.
            rng: Random source for role shuffling. Defaults to SystemRandom.
        """
        self._roster = roster
        self._presence = presence
        self._time = time_authority
        self._rng = rng or random.SystemRandom()
        self._in_flight: set[UUID] = set()
        self._init_logger(component="coordination")

    def is_in_flight(self, session_id: UUID) -> bool:
        """True while an activation for session_id is running on this client."""
        return session_id in self._in_flight

    async def activate(self, session_id: UUID) -> TransitionResult:
        """Run the activation sequence for a forming session.

        Never raises for lost races, insufficient members, store errors or a
        missing session; every path returns a TransitionResult and clears the
        in-flight guard.

        Args:
            session_id: The session to activate.

        Returns:
            TransitionResult describing what happened.
        """
        log = self._log_operation("activate", session_id=str(session_id))

        if session_id in self._in_flight:
            log.debug("activation_already_in_flight")
            return TransitionResult(outcome=TransitionOutcome.ALREADY_IN_FLIGHT)

        self._in_flight.add(session_id)
        try:
            return await self._activate(session_id, log)
        except LobbyError as exc:
            log.warning(
                "activation_failed", error=str(exc), error_type=type(exc).__name__
            )
            return TransitionResult(outcome=TransitionOutcome.FAILED)
        finally:
            self._in_flight.discard(session_id)

    async def _activate(
        self, session_id: UUID, log: structlog.BoundLogger
    ) -> TransitionResult:
        current = await self._roster.get_session(session_id)
        if not current.is_forming:
            log.info("activation_skipped_not_forming", status=current.status.value)
            return TransitionResult(outcome=TransitionOutcome.LOST_RACE)

        active = await self._presence.fetch_active(session_id)
        if len(active) < MIN_QUORUM_PARTICIPANTS:
            log.info("activation_aborted_insufficient", active_count=len(active))
            return TransitionResult(
                outcome=TransitionOutcome.INSUFFICIENT_PARTICIPANTS
            )

        roles = assign_roles(len(active), rng=self._rng)
        role_plan = build_role_plan(active, roles)
        unassigned = sum(1 for role in role_plan.values() if role is None)
        if unassigned:
            log.info("participants_without_role", count=unassigned)

        failed = await self._write_roles(role_plan)
        if failed:
            log.warning("role_writes_failed", participant_ids=failed)

        activated_at = self._time.now()
        if not await self._roster.activate(session_id, activated_at):
            log.info("activation_lost_race")
            return TransitionResult(
                outcome=TransitionOutcome.LOST_RACE, role_plan=role_plan
            )

        still_failed: list[str] = []
        if failed:
            still_failed = await self._write_roles(
                {pid: role_plan[pid] for pid in failed}
            )
            if still_failed:
                log.warning(
                    "role_reconciliation_incomplete", participant_ids=still_failed
                )
            else:
                log.info("role_reconciliation_completed", count=len(failed))

        session = Session(
            id=session_id,
            status=SessionStatus.ACTIVE,
            created_at=current.created_at,
            activated_at=activated_at,
        )
        log.info(
            "session_activated",
            participant_count=len(active),
            activated_at=activated_at.isoformat(),
        )
        return TransitionResult(
            outcome=TransitionOutcome.ACTIVATED,
            session=session,
            role_plan=role_plan,
            failed_role_writes=tuple(still_failed),
        )

    async def _write_roles(self, role_plan: dict[str, str | None]) -> list[str]:
        """Write assigned_role for every planned participant concurrently.

        Returns:
            Ids of participants whose write raised a StoreError.
        """
        participant_ids = list(role_plan)
        results = await asyncio.gather(
            *(
                self._roster.update_participant(pid, assigned_role=role_plan[pid])
                for pid in participant_ids
            ),
            return_exceptions=True,
        )
        failed: list[str] = []
        for pid, result in zip(participant_ids, results, strict=True):
            if isinstance(result, StoreError):
                failed.append(pid)
            elif isinstance(result, BaseException):
                raise result
        return failed
