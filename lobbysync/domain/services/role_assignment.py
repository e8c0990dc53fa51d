"""Role assignment domain service.

Pure function of the participant count: take the min(n, k) highest-priority
roles from the catalog, then shuffle them with Fisher-Yates. Slot i goes to
the i-th participant in join_order.

Participants beyond the catalog size get no role. Extending that is a
product decision, so it is left as None here.
"""

from __future__ import annotations

import random
from collections.abc import Sequence

from lobbysync.domain.models.participant import Participant
from lobbysync.domain.models.role import ROLE_CATALOG, Role


def assign_roles(
    participant_count: int,
    rng: random.Random | None = None,
    catalog: Sequence[Role] = ROLE_CATALOG,
) -> list[str]:
    """Produce a shuffled list of role ids for the given participant count.

    Args:
        participant_count: Number of participants to assign.
        rng: Random source. Defaults to a fresh SystemRandom.
        catalog: Role catalog to draw from.

    Returns:
        min(participant_count, len(catalog)) distinct role ids in slot order.

    Raises:
        ValueError: If participant_count is negative.
    """
    if participant_count < 0:
        raise ValueError(
            f"participant_count must be >= 0, got {participant_count}"
        )

    rng = rng or random.SystemRandom()
    ordered = sorted(catalog, key=lambda role: role.priority)
    roles = [role.id for role in ordered[: min(participant_count, len(ordered))]]

    # Fisher-Yates
    for i in range(len(roles) - 1, 0, -1):
        j = rng.randint(0, i)
        roles[i], roles[j] = roles[j], roles[i]

    return roles


def build_role_plan(
    participants: Sequence[Participant],
    roles: Sequence[str],
) -> dict[str, str | None]:
    """Map participants to role slots by join order.

    Args:
        participants: Participants of the transition, in any order.
        roles: Output of assign_roles for len(participants).

    Returns:
        participant id -> role id, with None for slots past the end of roles.
    """
    ordered = sorted(participants, key=lambda p: p.join_order)
    return {
        participant.id: roles[slot] if slot < len(roles) else None
        for slot, participant in enumerate(ordered)
    }
