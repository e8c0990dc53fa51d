"""Lobby view reducer pipeline.

Every inbound notification re-runs the whole pipeline over an immutable
roster snapshot instead of applying deltas:

    roster -> filter_active -> aggregate_quorum -> elect_coordinator -> LobbyView

Out-of-order or duplicated notifications are harmless because nothing is
carried over from the previous view except the countdown display value.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from lobbysync.domain.models.lobby_view import LobbyView
from lobbysync.domain.models.participant import Participant
from lobbysync.domain.models.session import Session
from lobbysync.domain.services.leader_election import elect_coordinator
from lobbysync.domain.services.presence import filter_active
from lobbysync.domain.services.quorum import aggregate_quorum


def derive_lobby_view(
    session: Session | None,
    roster: Sequence[Participant],
    self_id: str | None,
    now: datetime,
    inactive_threshold: timedelta,
    countdown: int | None = None,
) -> LobbyView:
    """Derive one client's view from a roster snapshot.

    Args:
        session: The session as last observed.
        roster: All participant rows of the session (active or not).
        self_id: This client's participant id.
        now: Current time from the injected time authority.
        inactive_threshold: Maximum heartbeat age for the active set.
        countdown: Current local countdown value, passed through.

    Returns:
        The derived LobbyView.
    """
    active = filter_active(roster, now, inactive_threshold)
    coordinator = elect_coordinator(active)
    me = next((p for p in roster if p.id == self_id), None)

    return LobbyView(
        session=session,
        active=active,
        me=me,
        quorum=aggregate_quorum(active),
        coordinator_id=coordinator.id if coordinator else None,
        countdown=countdown,
    )
