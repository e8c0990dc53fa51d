"""Unit tests for SessionResetService."""

from uuid import uuid4

import pytest

from lobbysync.application.services.session_reset_service import (
    SessionResetService,
)
from lobbysync.application.services.session_roster_service import (
    SessionRosterService,
)
from lobbysync.domain.errors.lobby import SessionNotFoundError
from lobbysync.domain.errors.store import ConflictError
from lobbysync.domain.models.session import Session, SessionStatus
from tests.helpers import FakeTimeAuthority, seed_participants


@pytest.fixture
def resetter(roster: SessionRosterService) -> SessionResetService:
    return SessionResetService(roster)


class TestReset:
    """Tests for reset()."""

    @pytest.mark.asyncio
    async def test_reset_is_idempotent(
        self,
        resetter: SessionResetService,
        roster: SessionRosterService,
        forming_session: Session,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        await seed_participants(
            roster,
            forming_session.id,
            fake_time_authority,
            3,
            is_ready=True,
            has_voted=True,
        )
        await roster.update_participant("p1", assigned_role="wolf")
        await roster.activate(forming_session.id, fake_time_authority.now())

        first = await resetter.reset(forming_session.id)
        first_roster = await roster.list_participants(forming_session.id)
        second = await resetter.reset(forming_session.id)
        second_roster = await roster.list_participants(forming_session.id)

        assert first == second
        assert first.status == SessionStatus.FORMING
        assert first.activated_at is None
        assert first_roster == second_roster
        assert all(
            not p.is_ready and not p.has_voted and p.assigned_role is None
            for p in second_roster
        )

    @pytest.mark.asyncio
    async def test_reset_missing_session_raises(
        self, resetter: SessionResetService
    ) -> None:
        with pytest.raises(SessionNotFoundError):
            await resetter.reset(uuid4())

    @pytest.mark.asyncio
    async def test_reset_conflicts_with_another_forming_session(
        self,
        resetter: SessionResetService,
        roster: SessionRosterService,
        forming_session: Session,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        await roster.activate(forming_session.id, fake_time_authority.now())
        await roster.create_session(fake_time_authority.now())

        with pytest.raises(ConflictError):
            await resetter.reset(forming_session.id)

    @pytest.mark.asyncio
    async def test_refused_reset_leaves_active_round_intact(
        self,
        resetter: SessionResetService,
        roster: SessionRosterService,
        forming_session: Session,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        await seed_participants(
            roster, forming_session.id, fake_time_authority, 2, has_voted=True
        )
        await roster.update_participant("p1", assigned_role="wolf")
        await roster.update_participant("p2", assigned_role="seer")
        await roster.activate(forming_session.id, fake_time_authority.now())
        await roster.create_session(fake_time_authority.now())

        with pytest.raises(ConflictError):
            await resetter.reset(forming_session.id)

        session = await roster.get_session(forming_session.id)
        participants = await roster.list_participants(forming_session.id)
        assert session.status == SessionStatus.ACTIVE
        assert session.activated_at is not None
        assert [p.assigned_role for p in participants] == ["wolf", "seer"]
        assert all(p.has_voted for p in participants)


class TestClose:
    """Tests for close()."""

    @pytest.mark.asyncio
    async def test_close_marks_session_closed(
        self,
        resetter: SessionResetService,
        roster: SessionRosterService,
        forming_session: Session,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        await roster.activate(forming_session.id, fake_time_authority.now())

        closed = await resetter.close(forming_session.id)

        assert closed.status == SessionStatus.CLOSED
        assert await roster.find_forming_session() is None

    @pytest.mark.asyncio
    async def test_close_missing_session_raises(
        self, resetter: SessionResetService
    ) -> None:
        with pytest.raises(SessionNotFoundError):
            await resetter.close(uuid4())
