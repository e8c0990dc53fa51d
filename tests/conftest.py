"""
Pytest configuration and shared fixtures for lobbysync tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Time-dependent tests use FakeTimeAuthority, never the wall clock
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

import pytest

from lobbysync.config.lobby_config import TEST_LOBBY_CONFIG, LobbyConfig
from lobbysync.infrastructure.stubs.key_value_store_stub import KeyValueStoreStub
from lobbysync.infrastructure.stubs.session_store_stub import SessionStoreStub
from tests.helpers.fake_time_authority import FakeTimeAuthority


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from lobbysync import __version__

    return __version__


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Fresh fake clock at 2026-01-01T00:00:00 UTC."""
    return FakeTimeAuthority()


@pytest.fixture
def lobby_config() -> LobbyConfig:
    """Short timings: heartbeat 1s, inactive after 3s, countdown 3s."""
    return TEST_LOBBY_CONFIG


@pytest.fixture
def session_store() -> SessionStoreStub:
    """Empty in-memory session store."""
    return SessionStoreStub()


@pytest.fixture
def key_value_store() -> KeyValueStoreStub:
    """Empty in-memory key-value store."""
    return KeyValueStoreStub()
