"""Unit tests for SessionRosterService."""

import asyncio
from uuid import uuid4

import pytest

from lobbysync.application.ports.session_store import ChangeEventType
from lobbysync.application.services.session_roster_service import (
    SessionRosterService,
)
from lobbysync.domain.errors.lobby import SessionNotFoundError
from lobbysync.domain.errors.store import ConflictError
from lobbysync.domain.models.session import Session, SessionStatus
from tests.helpers import FakeTimeAuthority, make_participant, seed_participants


class TestSessions:
    """Tests for session reads and writes."""

    @pytest.mark.asyncio
    async def test_get_missing_session_raises(
        self, roster: SessionRosterService
    ) -> None:
        with pytest.raises(SessionNotFoundError):
            await roster.get_session(uuid4())

    @pytest.mark.asyncio
    async def test_second_forming_session_conflicts(
        self,
        roster: SessionRosterService,
        forming_session: Session,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        with pytest.raises(ConflictError) as exc_info:
            await roster.create_session(fake_time_authority.now())

        assert exc_info.value.constraint == "sessions_one_forming"
        assert await roster.find_forming_session() == forming_session

    @pytest.mark.asyncio
    async def test_new_forming_session_allowed_once_previous_is_active(
        self,
        roster: SessionRosterService,
        forming_session: Session,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        await roster.activate(forming_session.id, fake_time_authority.now())

        created = await roster.create_session(fake_time_authority.now())

        assert (await roster.find_forming_session()) == created

    @pytest.mark.asyncio
    async def test_activate_is_a_conditional_write(
        self,
        roster: SessionRosterService,
        forming_session: Session,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        now = fake_time_authority.now()

        results = await asyncio.gather(
            *(roster.activate(forming_session.id, now) for _ in range(4))
        )

        assert results.count(True) == 1
        stored = await roster.get_session(forming_session.id)
        assert stored.status == SessionStatus.ACTIVE
        assert stored.activated_at == now

    @pytest.mark.asyncio
    async def test_set_status_forming_clears_activated_at(
        self,
        roster: SessionRosterService,
        forming_session: Session,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        await roster.activate(forming_session.id, fake_time_authority.now())

        affected = await roster.set_status(forming_session.id, SessionStatus.FORMING)

        assert affected == 1
        stored = await roster.get_session(forming_session.id)
        assert stored.status == SessionStatus.FORMING
        assert stored.activated_at is None


class TestParticipants:
    """Tests for participant rows."""

    @pytest.mark.asyncio
    async def test_next_join_order_skips_departed_gaps(
        self,
        roster: SessionRosterService,
        forming_session: Session,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        assert await roster.next_join_order(forming_session.id) == 1
        await seed_participants(roster, forming_session.id, fake_time_authority, 3)

        await roster.remove_participant("p2")

        assert await roster.count_participants(forming_session.id) == 2
        assert await roster.next_join_order(forming_session.id) == 4

    @pytest.mark.asyncio
    async def test_duplicate_join_order_conflicts(
        self,
        roster: SessionRosterService,
        forming_session: Session,
    ) -> None:
        await roster.add_participant(
            make_participant("a", 1, session_id=forming_session.id)
        )

        with pytest.raises(ConflictError) as exc_info:
            await roster.add_participant(
                make_participant("b", 1, session_id=forming_session.id)
            )

        assert exc_info.value.constraint == "participants_session_join_order"

    @pytest.mark.asyncio
    async def test_list_participants_ordered_by_join_order(
        self,
        roster: SessionRosterService,
        forming_session: Session,
    ) -> None:
        for participant_id, order in (("c", 3), ("a", 1), ("b", 2)):
            await roster.add_participant(
                make_participant(participant_id, order, session_id=forming_session.id)
            )

        listed = await roster.list_participants(forming_session.id)

        assert [p.id for p in listed] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_clear_participant_flags(
        self,
        roster: SessionRosterService,
        forming_session: Session,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        await seed_participants(
            roster,
            forming_session.id,
            fake_time_authority,
            2,
            is_ready=True,
            has_voted=True,
        )
        await roster.update_participant("p1", assigned_role="seer")

        cleared = await roster.clear_participant_flags(forming_session.id)

        assert cleared == 2
        for participant in await roster.list_participants(forming_session.id):
            assert participant.is_ready is False
            assert participant.has_voted is False
            assert participant.assigned_role is None


class TestWatch:
    """Tests for change feeds."""

    @pytest.mark.asyncio
    async def test_watch_participants_sees_only_its_session(
        self,
        roster: SessionRosterService,
        forming_session: Session,
    ) -> None:
        feed = roster.watch_participants(forming_session.id)
        await roster.add_participant(
            make_participant("other", 1, session_id=uuid4())
        )
        await roster.add_participant(
            make_participant("mine", 1, session_id=forming_session.id)
        )

        event = await feed.__anext__()

        assert event.event_type is ChangeEventType.INSERT
        assert event.new_row["id"] == "mine"
