"""Domain errors for LobbySync.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from LobbyError.
"""

from lobbysync.domain.errors.lobby import (
    InvalidDisplayNameError,
    JoinConflictError,
    NotJoinedError,
    ParticipantNotFoundError,
    SessionNotFoundError,
)
from lobbysync.domain.errors.store import (
    ConflictError,
    StoreError,
    StoreUnavailableError,
)

__all__: list[str] = [
    "ConflictError",
    "InvalidDisplayNameError",
    "JoinConflictError",
    "NotJoinedError",
    "ParticipantNotFoundError",
    "SessionNotFoundError",
    "StoreError",
    "StoreUnavailableError",
]
