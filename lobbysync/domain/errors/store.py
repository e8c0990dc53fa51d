"""Session store errors.

These errors are raised by Session Store Gateway implementations. They are
transient from the caller's point of view: a user action surfaces them as
a message, a background loop logs them and waits for its next trigger.
"""

from __future__ import annotations

from lobbysync.domain.exceptions import LobbyError


class StoreError(LobbyError):
    """Base class for all session store failures."""


class StoreUnavailableError(StoreError):
    """Raised when the store cannot be reached or the operation failed.

    Attributes:
        operation: The gateway operation that failed (e.g., "update").
        table: The table the operation targeted.
    """

    def __init__(self, operation: str, table: str, reason: str = "") -> None:
        """Initialize the error.

        Args:
            operation: The gateway operation that failed.
            table: The table the operation targeted.
            reason: Optional underlying cause.
        """
        self.operation = operation
        self.table = table
        self.reason = reason
        message = f"Session store {operation} on {table} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ConflictError(StoreError):
    """Raised when an insert violates a unique constraint.

    The join flow treats this as a lost race: re-read and retry or reuse
    whatever the other writer created.

    Attributes:
        table: The table the insert targeted.
        constraint: Name of the violated constraint.
    """

    def __init__(self, table: str, constraint: str) -> None:
        """Initialize the error.

        Args:
            table: The table the insert targeted.
            constraint: Name of the violated constraint.
        """
        self.table = table
        self.constraint = constraint
        super().__init__(
            f"Insert into {table} violates unique constraint {constraint}"
        )
