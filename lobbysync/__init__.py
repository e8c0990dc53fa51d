"""
LobbySync - Session coordination core for small multiplayer lobbies.

Independent clients converge on a single decision (when a shared session
moves from forming to active) without any client holding authority:

- Presence is derived from heartbeats, never stored as a flag
- Readiness and votes aggregate into a quorum decision
- The coordinator is a pure function of join order
- The activation is a conditional write that succeeds at most once
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
