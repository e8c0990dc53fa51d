"""Configuration module for LobbySync.

Available Configurations:
- LobbyConfig: Heartbeat, presence, countdown and join tuning
"""

from lobbysync.config.lobby_config import (
    DEFAULT_LOBBY_CONFIG,
    TEST_LOBBY_CONFIG,
    LobbyConfig,
)

__all__ = [
    "LobbyConfig",
    "DEFAULT_LOBBY_CONFIG",
    "TEST_LOBBY_CONFIG",
]
