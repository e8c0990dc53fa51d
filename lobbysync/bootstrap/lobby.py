"""Bootstrap wiring for lobby clients.

Shared collaborators (session store, clock, config) are process-wide
singletons. Each call to build_lobby_client() creates a fresh client with
its own services, so tests can run several clients against one store.

Environment Variables:
- DATABASE_URL: when set, the PostgreSQL session store is used; otherwise
  the in-memory stub (dev mode)
- LOBBY_STATE_DIR: directory for the device identity file
  (default: ~/.lobbysync)
- LOBBY_*: see lobbysync.config.lobby_config
"""

from __future__ import annotations

import os
import random
from pathlib import Path

from structlog import get_logger

from lobbysync.application.ports.key_value_store import KeyValueStoreProtocol
from lobbysync.application.ports.session_store import SessionStoreGatewayProtocol
from lobbysync.application.ports.time_authority import TimeAuthorityProtocol
from lobbysync.application.services.device_identity_service import (
    DeviceIdentityService,
)
from lobbysync.application.services.lobby_client import LobbyClient
from lobbysync.application.services.lobby_service import LobbyService
from lobbysync.application.services.presence_service import PresenceService
from lobbysync.application.services.session_reset_service import (
    SessionResetService,
)
from lobbysync.application.services.session_roster_service import (
    SessionRosterService,
)
from lobbysync.application.services.transition_service import TransitionService
from lobbysync.bootstrap.database import get_engine, get_session_factory
from lobbysync.config.lobby_config import LobbyConfig
from lobbysync.infrastructure.adapters.local.file_key_value_store import (
    DEFAULT_STATE_FILE,
    FileKeyValueStore,
)
from lobbysync.infrastructure.adapters.persistence.postgres_session_store import (
    PostgresSessionStore,
)
from lobbysync.infrastructure.adapters.persistence.schema import create_schema
from lobbysync.infrastructure.adapters.time.system_time_authority import (
    SystemTimeAuthority,
)
from lobbysync.infrastructure.stubs.session_store_stub import SessionStoreStub

logger = get_logger()

STATE_DIR_ENV = "LOBBY_STATE_DIR"
DEFAULT_STATE_DIR = Path.home() / ".lobbysync"

_session_store: SessionStoreGatewayProtocol | None = None
_time_authority: TimeAuthorityProtocol | None = None
_lobby_config: LobbyConfig | None = None


def get_lobby_config() -> LobbyConfig:
    """Get lobby configuration, read from the environment once."""
    global _lobby_config
    if _lobby_config is None:
        _lobby_config = LobbyConfig.from_environment()
    return _lobby_config


def get_time_authority() -> TimeAuthorityProtocol:
    """Get the process clock."""
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_session_store() -> SessionStoreGatewayProtocol:
    """Get the session store: PostgreSQL if DATABASE_URL is set, else the stub."""
    global _session_store
    if _session_store is None:
        if os.environ.get("DATABASE_URL"):
            _session_store = PostgresSessionStore(
                get_session_factory(),
                poll_interval_seconds=get_lobby_config().subscription_poll_seconds,
            )
        else:
            logger.warning("database_url_missing_using_stub", component="bootstrap")
            _session_store = SessionStoreStub()
    return _session_store


def get_key_value_store() -> KeyValueStoreProtocol:
    """Get the device-local key-value store under LOBBY_STATE_DIR."""
    state_dir = Path(os.environ.get(STATE_DIR_ENV, str(DEFAULT_STATE_DIR)))
    return FileKeyValueStore(state_dir / DEFAULT_STATE_FILE)


def build_lobby_client(
    *,
    store: SessionStoreGatewayProtocol | None = None,
    key_value_store: KeyValueStoreProtocol | None = None,
    time_authority: TimeAuthorityProtocol | None = None,
    config: LobbyConfig | None = None,
    rng: random.Random | None = None,
) -> LobbyClient:
    """Wire one LobbyClient.

    Every argument defaults to the process-wide collaborator.

    Args:
        store: Session Store Gateway.
        key_value_store: Local store for the device participant id.
        time_authority: Clock and timer.
        config: Lobby configuration.
        rng: Random source for role shuffling.

    Returns:
        An idle LobbyClient; call start() or join() next.
    """
    store = store if store is not None else get_session_store()
    kv = key_value_store if key_value_store is not None else get_key_value_store()
    clock = time_authority if time_authority is not None else get_time_authority()
    cfg = config if config is not None else get_lobby_config()

    roster = SessionRosterService(store)
    identity = DeviceIdentityService(kv)
    presence = PresenceService(roster, clock, cfg)
    return LobbyClient(
        roster=roster,
        identity=identity,
        lobby=LobbyService(roster, identity, clock, cfg),
        presence=presence,
        transition=TransitionService(roster, presence, clock, rng=rng),
        reset=SessionResetService(roster),
        time_authority=clock,
        config=cfg,
    )


def reset_lobby_dependencies() -> None:
    """Reset all singleton instances for testing."""
    global _session_store, _time_authority, _lobby_config
    _session_store = None
    _time_authority = None
    _lobby_config = None


def set_session_store(store: SessionStoreGatewayProtocol) -> None:
    """Set custom session store for testing."""
    global _session_store
    _session_store = store


async def ensure_lobby_schema() -> None:
    """Create the sessions and participants tables if they do not exist.

    Raises:
        ValueError: If DATABASE_URL is not configured.
    """
    await create_schema(get_engine())
    logger.info("lobby_schema_ensured", component="bootstrap")
