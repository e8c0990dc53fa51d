"""Session domain model for the shared coordination unit.

A Session moves forming -> active through exactly one conditional write,
and back to forming only through an explicit reset.

Constraints:
- status is monotonic except for the explicit reset
- activated_at is set exactly once per activation and cleared by reset
- sessions are never physically deleted by this core
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID


class SessionStatus(Enum):
    """Lifecycle status of a Session."""

    FORMING = "forming"  # Waiting room, joins resolve against this session
    ACTIVE = "active"  # Roles assigned, session running
    CLOSED = "closed"  # Session ended, may be reset to forming


@dataclass(frozen=True, eq=True)
class Session:
    """One coordination unit shared by every participant in the lobby.

    Attributes:
        id: Opaque unique identifier.
        status: Current lifecycle status.
        created_at: When the session row was created.
        activated_at: When the session last became active, None otherwise.
    """

    id: UUID
    status: SessionStatus
    created_at: datetime
    activated_at: datetime | None = None

    @property
    def is_forming(self) -> bool:
        """True while the session still accepts joins and votes."""
        return self.status == SessionStatus.FORMING

    @property
    def is_active(self) -> bool:
        """True once the activating write has landed."""
        return self.status == SessionStatus.ACTIVE

    def to_row(self) -> dict[str, Any]:
        """Convert to a store row."""
        return {
            "id": self.id,
            "status": self.status.value,
            "created_at": self.created_at,
            "activated_at": self.activated_at,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Session:
        """Build a Session from a store row.

        Args:
            row: Row mapping as returned by the Session Store Gateway.

        Returns:
            The Session.
        """
        raw_id = row["id"]
        return cls(
            id=raw_id if isinstance(raw_id, UUID) else UUID(str(raw_id)),
            status=SessionStatus(row["status"]),
            created_at=row["created_at"],
            activated_at=row.get("activated_at"),
        )
