"""Roster and quorum aggregation domain service.

Pure functions recomputed on every change to the active set.

Rules:
- all_ready: active set non-empty and every member ready
- vote_threshold: ceil(0.5 * |active|), rounding a half up (3 -> 2)
- quorum_reached: vote_count >= vote_threshold and |active| >= 2

A single active participant can never reach quorum, whatever the
ceiling arithmetic says.
"""

from __future__ import annotations

from collections.abc import Sequence

from lobbysync.domain.models.lobby_view import QuorumState
from lobbysync.domain.models.participant import Participant

MIN_QUORUM_PARTICIPANTS: int = 2


def compute_vote_threshold(active_count: int) -> int:
    """Votes needed for quorum with the given active-set size.

    Args:
        active_count: Number of active participants.

    Returns:
        ceil(active_count / 2), computed in integers.
    """
    if active_count <= 0:
        return 0
    return (active_count + 1) // 2


def aggregate_quorum(active: Sequence[Participant]) -> QuorumState:
    """Aggregate readiness and votes over the active set.

    Args:
        active: The active set (already filtered for presence).

    Returns:
        QuorumState for this snapshot.
    """
    active_count = len(active)
    vote_count = sum(1 for p in active if p.has_voted)
    vote_threshold = compute_vote_threshold(active_count)
    has_minimum = active_count >= MIN_QUORUM_PARTICIPANTS

    return QuorumState(
        active_count=active_count,
        all_ready=active_count > 0 and all(p.is_ready for p in active),
        all_voted=has_minimum and vote_count == active_count,
        vote_count=vote_count,
        vote_threshold=vote_threshold,
        quorum_reached=has_minimum and vote_count >= vote_threshold,
    )
