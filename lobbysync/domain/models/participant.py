"""Participant domain model for one joined client.

Each client exclusively owns writes to its own is_ready, has_voted and
last_seen. Only the coordinator that wins a transition writes
assigned_role for everybody.

Constraints:
- join_order is unique within a session and strictly increasing by insertion
- has_voted is true-only within a round (cleared by reset)
- inactivity is derived from last_seen, never stored
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any
from uuid import UUID

# Upper bound enforced by the model itself. LobbyConfig may be stricter.
MAX_DISPLAY_NAME_LENGTH = 128


@dataclass(frozen=True, eq=True)
class Participant:
    """A joined client tracked by one roster row.

    Attributes:
        id: Stable per-device identifier (generated once, persisted locally).
        session_id: Owning session.
        display_name: Free-form name shown to other participants.
        join_order: Position in the session, the sole election tiebreak.
        is_ready: Readiness toggle, written by the owner only.
        has_voted: Vote-to-start flag, written by the owner only.
        assigned_role: Role id, None until activation.
        last_seen: Last heartbeat timestamp.

    Raises:
        ValueError: If id or display_name is empty, display_name is too
            long, or join_order is not positive.
    """

    id: str
    session_id: UUID
    display_name: str
    join_order: int
    last_seen: datetime
    is_ready: bool = False
    has_voted: bool = False
    assigned_role: str | None = None

    def __post_init__(self) -> None:
        """Validate fields after initialization.

        Raises:
            ValueError: If validation fails.
        """
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("Participant id must be a non-empty string")
        if not self.display_name.strip():
            raise ValueError("Participant display_name must be non-empty")
        if len(self.display_name) > MAX_DISPLAY_NAME_LENGTH:
            raise ValueError(
                f"Participant display_name must be at most "
                f"{MAX_DISPLAY_NAME_LENGTH} characters"
            )
        if self.join_order < 1:
            raise ValueError(
                f"Participant join_order must be >= 1, got {self.join_order}"
            )

    def with_ready(self, is_ready: bool) -> Participant:
        """Return a copy with the readiness flag changed."""
        return replace(self, is_ready=is_ready)

    def with_vote(self) -> Participant:
        """Return a copy that has voted to start."""
        return replace(self, has_voted=True)

    def with_last_seen(self, last_seen: datetime) -> Participant:
        """Return a copy with a refreshed heartbeat timestamp."""
        return replace(self, last_seen=last_seen)

    def to_row(self) -> dict[str, Any]:
        """Convert to a store row."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "display_name": self.display_name,
            "join_order": self.join_order,
            "is_ready": self.is_ready,
            "has_voted": self.has_voted,
            "assigned_role": self.assigned_role,
            "last_seen": self.last_seen,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Participant:
        """Build a Participant from a store row.

        Args:
            row: Row mapping as returned by the Session Store Gateway.

        Returns:
            The Participant.
        """
        raw_session_id = row["session_id"]
        return cls(
            id=str(row["id"]),
            session_id=(
                raw_session_id
                if isinstance(raw_session_id, UUID)
                else UUID(str(raw_session_id))
            ),
            display_name=row["display_name"],
            join_order=int(row["join_order"]),
            last_seen=row["last_seen"],
            is_ready=bool(row.get("is_ready", False)),
            has_voted=bool(row.get("has_voted", False)),
            assigned_role=row.get("assigned_role"),
        )
