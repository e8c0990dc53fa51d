"""Fixtures for lobby application service tests."""

from __future__ import annotations

import random
from collections.abc import AsyncGenerator, Callable

import pytest

from lobbysync.application.services.lobby_client import LobbyClient
from lobbysync.application.services.presence_service import PresenceService
from lobbysync.application.services.session_roster_service import (
    SessionRosterService,
)
from lobbysync.bootstrap.lobby import build_lobby_client
from lobbysync.config.lobby_config import LobbyConfig
from lobbysync.domain.models.session import Session
from lobbysync.infrastructure.stubs.key_value_store_stub import KeyValueStoreStub
from lobbysync.infrastructure.stubs.session_store_stub import SessionStoreStub
from tests.helpers import FakeTimeAuthority


@pytest.fixture
def roster(session_store: SessionStoreStub) -> SessionRosterService:
    return SessionRosterService(session_store)


@pytest.fixture
def presence(
    roster: SessionRosterService,
    fake_time_authority: FakeTimeAuthority,
    lobby_config: LobbyConfig,
) -> PresenceService:
    return PresenceService(roster, fake_time_authority, lobby_config)


@pytest.fixture
async def forming_session(
    roster: SessionRosterService, fake_time_authority: FakeTimeAuthority
) -> Session:
    return await roster.create_session(fake_time_authority.now())


@pytest.fixture
async def lobby_clients(
    session_store: SessionStoreStub,
    fake_time_authority: FakeTimeAuthority,
    lobby_config: LobbyConfig,
) -> AsyncGenerator[Callable[..., LobbyClient], None]:
    """Factory for clients sharing one store and clock; all closed at teardown."""
    created: list[LobbyClient] = []

    def factory(
        key_value_store: KeyValueStoreStub | None = None,
        config: LobbyConfig | None = None,
    ) -> LobbyClient:
        client = build_lobby_client(
            store=session_store,
            key_value_store=key_value_store or KeyValueStoreStub(),
            time_authority=fake_time_authority,
            config=config or lobby_config,
            rng=random.Random(len(created)),
        )
        created.append(client)
        return client

    yield factory

    for client in created:
        await client.close()
