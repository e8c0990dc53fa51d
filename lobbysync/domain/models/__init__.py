"""Domain models for LobbySync.

Contains value objects and domain models that represent the session,
its participants, the role catalog and the derived lobby view. These
models are immutable and contain no infrastructure dependencies.
"""

from lobbysync.domain.models.lobby_view import LobbyView, QuorumState
from lobbysync.domain.models.participant import MAX_DISPLAY_NAME_LENGTH, Participant
from lobbysync.domain.models.role import ROLE_CATALOG, Role, get_role_by_id
from lobbysync.domain.models.session import Session, SessionStatus

__all__: list[str] = [
    "LobbyView",
    "MAX_DISPLAY_NAME_LENGTH",
    "Participant",
    "QuorumState",
    "ROLE_CATALOG",
    "Role",
    "Session",
    "SessionStatus",
    "get_role_by_id",
]
