"""Lobby membership errors.

This module provides exception classes for join, resume and participant
action failures.
"""

from __future__ import annotations

from uuid import UUID

from lobbysync.domain.exceptions import LobbyError


class JoinConflictError(LobbyError):
    """Raised when a join could not settle on a session and join order.

    A join re-reads and retries after every ConflictError. This error is
    raised only once the configured number of attempts is used up.

    Attributes:
        participant_id: The device participant id trying to join.
        attempts: How many attempts were made.
    """

    def __init__(self, participant_id: str, attempts: int) -> None:
        """Initialize the error.

        Args:
            participant_id: The device participant id trying to join.
            attempts: How many attempts were made.
        """
        self.participant_id = participant_id
        self.attempts = attempts
        super().__init__(
            f"Participant {participant_id} could not join after {attempts} attempts"
        )


class NotJoinedError(LobbyError):
    """Raised when a participant action is attempted before joining."""

    def __init__(self, action: str) -> None:
        """Initialize the error.

        Args:
            action: The action that requires a joined participant.
        """
        self.action = action
        super().__init__(f"Cannot {action} before joining a session")


class SessionNotFoundError(LobbyError):
    """Raised when a session row does not exist."""

    def __init__(self, session_id: UUID) -> None:
        """Initialize the error.

        Args:
            session_id: The missing session id.
        """
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class ParticipantNotFoundError(LobbyError):
    """Raised when a participant row does not exist."""

    def __init__(self, participant_id: str) -> None:
        """Initialize the error.

        Args:
            participant_id: The missing participant id.
        """
        self.participant_id = participant_id
        super().__init__(f"Participant not found: {participant_id}")


class InvalidDisplayNameError(LobbyError, ValueError):
    """Raised when a display name is empty or too long."""

    def __init__(self, display_name: str, max_length: int) -> None:
        """Initialize the error.

        Args:
            display_name: The rejected name.
            max_length: The configured maximum length.
        """
        self.display_name = display_name
        self.max_length = max_length
        super().__init__(
            f"Display name must be 1-{max_length} characters, got {len(display_name)}"
        )
