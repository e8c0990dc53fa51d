"""Role catalog for post-activation role assignment.

The catalog is a fixed, priority-ordered set of distinct roles. Lower
priority values are more important and are handed out first when there
are fewer participants than roles.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, eq=True)
class Role:
    """A role that can be assigned to one participant.

    Attributes:
        id: Stable identifier stored in Participant.assigned_role.
        name: Display name.
        icon: Icon key for the presentation layer.
        description: What the role does.
        priority: Static total order over the catalog (1 = first assigned).
    """

    id: str
    name: str
    icon: str
    description: str
    priority: int


ROLE_CATALOG: tuple[Role, ...] = (
    Role(
        id="wolf",
        name="Werewolf",
        icon="wolf",
        description="Hunts at night while hiding among the villagers.",
        priority=1,
    ),
    Role(
        id="seer",
        name="Seer",
        icon="eye",
        description="Reveals the true identity of one player each night.",
        priority=2,
    ),
    Role(
        id="bodyguard",
        name="Bodyguard",
        icon="shield",
        description="Protects one player from the night attack.",
        priority=3,
    ),
    Role(
        id="beggar",
        name="Beggar",
        icon="user",
        description="No special power, but every life counts for the team.",
        priority=4,
    ),
    Role(
        id="mute",
        name="Mute",
        icon="volume-x",
        description="Cannot speak during the day but can still vote.",
        priority=5,
    ),
    Role(
        id="gm",
        name="Game Master",
        icon="crown",
        description="Runs the pace of the game and knows every identity.",
        priority=6,
    ),
)


def get_role_by_id(role_id: str | None) -> Role | None:
    """Look up a catalog role by id.

    Args:
        role_id: The role id, or None for unassigned participants.

    Returns:
        The matching Role, or None if unknown or unassigned.
    """
    if role_id is None:
        return None
    for role in ROLE_CATALOG:
        if role.id == role_id:
            return role
    return None
