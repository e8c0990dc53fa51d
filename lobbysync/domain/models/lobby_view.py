"""Derived lobby view models.

These are the outputs of the reducer pipeline in
lobbysync.domain.services.lobby_view. They are recomputed from scratch on
every inbound change and never mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass

from lobbysync.domain.models.participant import Participant
from lobbysync.domain.models.role import Role, get_role_by_id
from lobbysync.domain.models.session import Session


@dataclass(frozen=True, eq=True)
class QuorumState:
    """Readiness and vote aggregation over the active set.

    Attributes:
        active_count: Size of the active set.
        all_ready: Active set non-empty and every member ready.
        all_voted: At least two active members and every one voted.
        vote_count: Active members that voted.
        vote_threshold: ceil(active_count / 2).
        quorum_reached: vote_count >= vote_threshold with >= 2 active members.
    """

    active_count: int
    all_ready: bool
    all_voted: bool
    vote_count: int
    vote_threshold: int
    quorum_reached: bool


@dataclass(frozen=True, eq=True)
class LobbyView:
    """Everything one client derives from one roster snapshot.

    Attributes:
        session: The session as last observed, None before joining.
        active: Active participants ordered by join_order.
        me: This client's own participant row, if present in the snapshot.
        quorum: Aggregated readiness and votes.
        coordinator_id: Id of the elected coordinator, None if nobody is active.
        countdown: Seconds left on the local countdown, None when unset.
    """

    session: Session | None
    active: tuple[Participant, ...]
    me: Participant | None
    quorum: QuorumState
    coordinator_id: str | None
    countdown: int | None = None

    @property
    def is_coordinator(self) -> bool:
        """True if this client is the elected coordinator."""
        return self.me is not None and self.me.id == self.coordinator_id

    @property
    def my_role(self) -> Role | None:
        """Catalog entry for this client's assigned role."""
        if self.me is None:
            return None
        return get_role_by_id(self.me.assigned_role)
