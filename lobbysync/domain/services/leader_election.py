"""Leader election domain service.

The coordinator is the active participant with the smallest join_order.
This is a total, deterministic function of the active set, so every client
that sees the same roster elects the same coordinator without exchanging a
single message. There is no lease: when the coordinator goes quiet the next
recomputation simply yields the next one.
"""

from __future__ import annotations

from collections.abc import Sequence

from lobbysync.domain.models.participant import Participant


def elect_coordinator(active: Sequence[Participant]) -> Participant | None:
    """Elect the coordinator of an active set.

    Args:
        active: The active set, in any order.

    Returns:
        The participant with minimum join_order, or None if the set is empty.
        Ties on join_order (which the store forbids) fall back to id so the
        result stays deterministic.
    """
    if not active:
        return None
    return min(active, key=lambda p: (p.join_order, p.id))


def is_coordinator(active: Sequence[Participant], participant_id: str) -> bool:
    """Check whether a participant is the elected coordinator.

    Args:
        active: The active set.
        participant_id: The id to check (usually this client's own).

    Returns:
        True if participant_id is the coordinator's id.
    """
    coordinator = elect_coordinator(active)
    return coordinator is not None and coordinator.id == participant_id
