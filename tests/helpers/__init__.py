"""Test helpers for lobbysync tests.

Helpers:
    FakeTimeAuthority: Controllable time authority for deterministic tests
    settle: Let ready tasks run without moving the fake clock
    make_participant: Participant factory with sensible defaults

Usage:
    from tests.helpers import FakeTimeAuthority, make_participant
"""

from tests.helpers.factories import make_participant, make_session, seed_participants
from tests.helpers.fake_time_authority import FakeTimeAuthority, settle

__all__ = [
    "FakeTimeAuthority",
    "make_participant",
    "make_session",
    "seed_participants",
    "settle",
]
