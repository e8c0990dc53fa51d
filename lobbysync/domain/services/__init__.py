"""Domain services for LobbySync.

Pure functions over immutable roster snapshots:
- presence: active-set filter
- quorum: readiness and vote aggregation
- leader_election: deterministic coordinator
- role_assignment: shuffled role slots
- lobby_view: the full reducer pipeline
"""

from lobbysync.domain.services.leader_election import elect_coordinator, is_coordinator
from lobbysync.domain.services.lobby_view import derive_lobby_view
from lobbysync.domain.services.presence import filter_active, is_active
from lobbysync.domain.services.quorum import (
    MIN_QUORUM_PARTICIPANTS,
    aggregate_quorum,
    compute_vote_threshold,
)
from lobbysync.domain.services.role_assignment import assign_roles, build_role_plan

__all__: list[str] = [
    "MIN_QUORUM_PARTICIPANTS",
    "aggregate_quorum",
    "assign_roles",
    "build_role_plan",
    "compute_vote_threshold",
    "derive_lobby_view",
    "elect_coordinator",
    "filter_active",
    "is_active",
    "is_coordinator",
]
