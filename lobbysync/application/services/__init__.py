"""Application services - Use case orchestration.

Available services:
- SessionRosterService: Typed access to session and participant rows
- DeviceIdentityService: Stable per-device participant id
- PresenceService: Heartbeats and active-set reads
- LobbyService: Join, resume, readiness, votes, leave
- CountdownService: Local countdown driven by the shared quorum flag
- TransitionService: Coordinator's one-time forming -> active activation
- SessionResetService: Unconditional reset and close
- LobbyClient: Per-client orchestration of all of the above
"""

from lobbysync.application.services.countdown_service import CountdownService
from lobbysync.application.services.device_identity_service import (
    PARTICIPANT_ID_KEY,
    DeviceIdentityService,
)
from lobbysync.application.services.lobby_client import LobbyClient
from lobbysync.application.services.lobby_service import LobbyService, Membership
from lobbysync.application.services.presence_service import PresenceService
from lobbysync.application.services.session_reset_service import (
    SessionResetService,
)
from lobbysync.application.services.session_roster_service import (
    SessionRosterService,
)
from lobbysync.application.services.transition_service import (
    TransitionOutcome,
    TransitionResult,
    TransitionService,
)

__all__: list[str] = [
    "PARTICIPANT_ID_KEY",
    "CountdownService",
    "DeviceIdentityService",
    "LobbyClient",
    "LobbyService",
    "Membership",
    "PresenceService",
    "SessionResetService",
    "SessionRosterService",
    "TransitionOutcome",
    "TransitionResult",
    "TransitionService",
]
