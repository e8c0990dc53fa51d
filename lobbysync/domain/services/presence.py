"""Presence domain service.

The active set is a derived view over an append-only roster: a participant
is active iff its last heartbeat is younger than the inactivity threshold.
Every reader recomputes it; nothing is stored and no row is deleted for
being inactive.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from lobbysync.domain.models.participant import Participant


def is_active(
    participant: Participant,
    now: datetime,
    inactive_threshold: timedelta,
) -> bool:
    """Check whether a participant's heartbeat is recent enough.

    Args:
        participant: The roster row to check.
        now: Current time from the injected time authority.
        inactive_threshold: Maximum age of the last heartbeat.

    Returns:
        True if now - last_seen < inactive_threshold.
    """
    return now - participant.last_seen < inactive_threshold


def filter_active(
    participants: Iterable[Participant],
    now: datetime,
    inactive_threshold: timedelta,
) -> tuple[Participant, ...]:
    """Derive the active set from a roster snapshot.

    Args:
        participants: Every roster row of one session, in any order.
        now: Current time from the injected time authority.
        inactive_threshold: Maximum age of the last heartbeat.

    Returns:
        Active participants ordered by join_order ascending.
    """
    active = [p for p in participants if is_active(p, now, inactive_threshold)]
    active.sort(key=lambda p: p.join_order)
    return tuple(active)
