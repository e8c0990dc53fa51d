"""Lobby timing and membership configuration.

This module defines configuration for heartbeat, presence, countdown and
join behaviour with environment variable overrides for deployment tuning.

Constraints:
- The inactivity threshold must cover at least three heartbeat intervals,
  so one or two missed beats never drop a participant from the active set.
- Every client in a lobby should run with the same countdown duration;
  only the final transition needs cross-client exclusivity.

Environment Variables:
- LOBBY_HEARTBEAT_INTERVAL_SECONDS: Liveness write interval (default: 3, min: 1, max: 60)
- LOBBY_INACTIVE_THRESHOLD_SECONDS: Heartbeat age that drops a participant (default: 30, min: 3, max: 600)
- LOBBY_COUNTDOWN_SECONDS: Countdown after quorum (default: 5, min: 1, max: 60)
- LOBBY_MAX_DISPLAY_NAME_LENGTH: Display name bound (default: 32, min: 1, max: 128)
- LOBBY_JOIN_RETRY_ATTEMPTS: Join attempts on conflicts (default: 3, min: 1, max: 10)
- LOBBY_SUBSCRIPTION_POLL_SECONDS: Change-feed poll interval for polling stores (default: 1, min: 1, max: 30)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


# =============================================================================
# Presence Configuration
# =============================================================================

DEFAULT_HEARTBEAT_INTERVAL_SECONDS = 3
MIN_HEARTBEAT_INTERVAL_SECONDS = 1
MAX_HEARTBEAT_INTERVAL_SECONDS = 60

DEFAULT_INACTIVE_THRESHOLD_SECONDS = 30
MIN_INACTIVE_THRESHOLD_SECONDS = 3
MAX_INACTIVE_THRESHOLD_SECONDS = 600

# Inactivity threshold must tolerate this many heartbeat intervals
MISSED_HEARTBEAT_TOLERANCE = 3

# =============================================================================
# Countdown Configuration
# =============================================================================

DEFAULT_COUNTDOWN_SECONDS = 5
MIN_COUNTDOWN_SECONDS = 1
MAX_COUNTDOWN_SECONDS = 60

# =============================================================================
# Membership Configuration
# =============================================================================

DEFAULT_MAX_DISPLAY_NAME_LENGTH = 32
MIN_DISPLAY_NAME_LENGTH_BOUND = 1
MAX_DISPLAY_NAME_LENGTH_BOUND = 128

DEFAULT_JOIN_RETRY_ATTEMPTS = 3
MIN_JOIN_RETRY_ATTEMPTS = 1
MAX_JOIN_RETRY_ATTEMPTS = 10

# =============================================================================
# Change Feed Configuration
# =============================================================================

DEFAULT_SUBSCRIPTION_POLL_SECONDS = 1
MIN_SUBSCRIPTION_POLL_SECONDS = 1
MAX_SUBSCRIPTION_POLL_SECONDS = 30


@dataclass(frozen=True)
class LobbyConfig:
    """Configuration for presence, countdown and join behaviour.

    All values can be overridden via environment variables.

    Attributes:
        heartbeat_interval_seconds: Interval between liveness writes.
        inactive_threshold_seconds: Heartbeat age after which a participant
            leaves the active set. Must be >= 3x the heartbeat interval.
        countdown_seconds: Local countdown duration once quorum is reached.
        max_display_name_length: Maximum display name length.
        join_retry_attempts: Join attempts before JoinConflictError.
        subscription_poll_seconds: Poll interval for stores whose change
            feed is implemented by polling.
    """

    heartbeat_interval_seconds: int = DEFAULT_HEARTBEAT_INTERVAL_SECONDS
    inactive_threshold_seconds: int = DEFAULT_INACTIVE_THRESHOLD_SECONDS
    countdown_seconds: int = DEFAULT_COUNTDOWN_SECONDS
    max_display_name_length: int = DEFAULT_MAX_DISPLAY_NAME_LENGTH
    join_retry_attempts: int = DEFAULT_JOIN_RETRY_ATTEMPTS
    subscription_poll_seconds: int = DEFAULT_SUBSCRIPTION_POLL_SECONDS

    def __post_init__(self) -> None:
        """Validate configuration values."""
        self._check_range(
            "heartbeat_interval_seconds",
            self.heartbeat_interval_seconds,
            MIN_HEARTBEAT_INTERVAL_SECONDS,
            MAX_HEARTBEAT_INTERVAL_SECONDS,
        )
        self._check_range(
            "inactive_threshold_seconds",
            self.inactive_threshold_seconds,
            MIN_INACTIVE_THRESHOLD_SECONDS,
            MAX_INACTIVE_THRESHOLD_SECONDS,
        )
        self._check_range(
            "countdown_seconds",
            self.countdown_seconds,
            MIN_COUNTDOWN_SECONDS,
            MAX_COUNTDOWN_SECONDS,
        )
        self._check_range(
            "max_display_name_length",
            self.max_display_name_length,
            MIN_DISPLAY_NAME_LENGTH_BOUND,
            MAX_DISPLAY_NAME_LENGTH_BOUND,
        )
        self._check_range(
            "join_retry_attempts",
            self.join_retry_attempts,
            MIN_JOIN_RETRY_ATTEMPTS,
            MAX_JOIN_RETRY_ATTEMPTS,
        )
        self._check_range(
            "subscription_poll_seconds",
            self.subscription_poll_seconds,
            MIN_SUBSCRIPTION_POLL_SECONDS,
            MAX_SUBSCRIPTION_POLL_SECONDS,
        )
        minimum_threshold = MISSED_HEARTBEAT_TOLERANCE * self.heartbeat_interval_seconds
        if self.inactive_threshold_seconds < minimum_threshold:
            raise ValueError(
                f"inactive_threshold_seconds must be at least "
                f"{MISSED_HEARTBEAT_TOLERANCE}x heartbeat_interval_seconds "
                f"({minimum_threshold}), got {self.inactive_threshold_seconds}"
            )

    @staticmethod
    def _check_range(name: str, value: int, low: int, high: int) -> None:
        if not low <= value <= high:
            raise ValueError(f"{name} must be between {low} and {high}, got {value}")

    @property
    def inactive_threshold(self) -> timedelta:
        """Get the inactivity threshold as a timedelta.

        Returns:
            Inactivity threshold as timedelta.
        """
        return timedelta(seconds=self.inactive_threshold_seconds)

    @classmethod
    def from_environment(cls) -> LobbyConfig:
        """Create config from environment variables with defaults.

        Values outside their bounds are clamped. If the inactivity threshold
        would be shorter than three heartbeat intervals it is raised to that
        minimum rather than rejected.

        Returns:
            LobbyConfig with values from environment or defaults.
        """
        heartbeat = _clamp(
            _get_int_env(
                "LOBBY_HEARTBEAT_INTERVAL_SECONDS", DEFAULT_HEARTBEAT_INTERVAL_SECONDS
            ),
            MIN_HEARTBEAT_INTERVAL_SECONDS,
            MAX_HEARTBEAT_INTERVAL_SECONDS,
        )
        threshold = _clamp(
            _get_int_env(
                "LOBBY_INACTIVE_THRESHOLD_SECONDS", DEFAULT_INACTIVE_THRESHOLD_SECONDS
            ),
            MIN_INACTIVE_THRESHOLD_SECONDS,
            MAX_INACTIVE_THRESHOLD_SECONDS,
        )
        threshold = max(threshold, MISSED_HEARTBEAT_TOLERANCE * heartbeat)

        countdown = _clamp(
            _get_int_env("LOBBY_COUNTDOWN_SECONDS", DEFAULT_COUNTDOWN_SECONDS),
            MIN_COUNTDOWN_SECONDS,
            MAX_COUNTDOWN_SECONDS,
        )
        name_length = _clamp(
            _get_int_env(
                "LOBBY_MAX_DISPLAY_NAME_LENGTH", DEFAULT_MAX_DISPLAY_NAME_LENGTH
            ),
            MIN_DISPLAY_NAME_LENGTH_BOUND,
            MAX_DISPLAY_NAME_LENGTH_BOUND,
        )
        join_attempts = _clamp(
            _get_int_env("LOBBY_JOIN_RETRY_ATTEMPTS", DEFAULT_JOIN_RETRY_ATTEMPTS),
            MIN_JOIN_RETRY_ATTEMPTS,
            MAX_JOIN_RETRY_ATTEMPTS,
        )
        poll = _clamp(
            _get_int_env(
                "LOBBY_SUBSCRIPTION_POLL_SECONDS", DEFAULT_SUBSCRIPTION_POLL_SECONDS
            ),
            MIN_SUBSCRIPTION_POLL_SECONDS,
            MAX_SUBSCRIPTION_POLL_SECONDS,
        )

        return cls(
            heartbeat_interval_seconds=heartbeat,
            inactive_threshold_seconds=threshold,
            countdown_seconds=countdown,
            max_display_name_length=name_length,
            join_retry_attempts=join_attempts,
            subscription_poll_seconds=poll,
        )


# Pre-defined configurations for common use cases

# Default config (3s heartbeat, 30s inactivity, 5s countdown)
DEFAULT_LOBBY_CONFIG = LobbyConfig()

# Testing config with the shortest legal timings
TEST_LOBBY_CONFIG = LobbyConfig(
    heartbeat_interval_seconds=MIN_HEARTBEAT_INTERVAL_SECONDS,  # 1 second
    inactive_threshold_seconds=MIN_INACTIVE_THRESHOLD_SECONDS,  # 3 seconds
    countdown_seconds=3,
)
