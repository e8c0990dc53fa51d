"""
Domain layer - Pure coordination logic for LobbySync.

This layer contains:
- Domain models (Session, Participant, Role, LobbyView)
- Pure reducer services (presence, quorum, election, role assignment)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or bootstrap.
Only stdlib and typing imports are allowed.
"""

from lobbysync.domain.exceptions import LobbyError

__all__: list[str] = ["LobbyError"]
