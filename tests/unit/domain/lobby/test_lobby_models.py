"""Unit tests for Session, Participant and Role models."""

from uuid import uuid4

import pytest

from lobbysync.domain.models.participant import MAX_DISPLAY_NAME_LENGTH, Participant
from lobbysync.domain.models.role import ROLE_CATALOG, get_role_by_id
from lobbysync.domain.models.session import Session, SessionStatus
from tests.helpers import FakeTimeAuthority, make_participant, make_session


class TestSession:
    """Tests for Session."""

    def test_status_properties(self) -> None:
        assert make_session(SessionStatus.FORMING).is_forming is True
        assert make_session(SessionStatus.ACTIVE).is_active is True
        assert make_session(SessionStatus.CLOSED).is_forming is False

    def test_from_row_accepts_string_ids_and_statuses(self) -> None:
        session_id = uuid4()
        row = {
            "id": str(session_id),
            "status": "active",
            "created_at": FakeTimeAuthority().now(),
            "activated_at": None,
        }

        session = Session.from_row(row)

        assert session.id == session_id
        assert session.status is SessionStatus.ACTIVE

    def test_unknown_status_rejected(self) -> None:
        row = make_session().to_row() | {"status": "paused"}

        with pytest.raises(ValueError):
            Session.from_row(row)


class TestParticipant:
    """Tests for Participant validation and copies."""

    def test_rejects_empty_display_name(self) -> None:
        with pytest.raises(ValueError, match="display_name"):
            make_participant("a", 1, display_name="   ")

    def test_rejects_overlong_display_name(self) -> None:
        with pytest.raises(ValueError, match="at most"):
            make_participant("a", 1, display_name="x" * (MAX_DISPLAY_NAME_LENGTH + 1))

    def test_rejects_non_positive_join_order(self) -> None:
        with pytest.raises(ValueError, match="join_order"):
            make_participant("a", 0)

    def test_rejects_empty_id(self) -> None:
        with pytest.raises(ValueError, match="id"):
            make_participant("", 1)

    def test_with_helpers_return_copies(self) -> None:
        original = make_participant("a", 1)

        ready = original.with_ready(True)
        voted = original.with_vote()

        assert original.is_ready is False and original.has_voted is False
        assert ready.is_ready is True
        assert voted.has_voted is True

    def test_row_conversion_preserves_fields(self) -> None:
        original = make_participant("a", 3, is_ready=True, assigned_role="seer")

        assert Participant.from_row(original.to_row()) == original


class TestRoleCatalog:
    """Tests for the role catalog."""

    def test_priorities_are_a_total_order(self) -> None:
        priorities = [role.priority for role in ROLE_CATALOG]
        assert len(set(priorities)) == len(priorities)

    def test_ids_are_unique(self) -> None:
        ids = [role.id for role in ROLE_CATALOG]
        assert len(set(ids)) == len(ids)

    def test_get_role_by_id(self) -> None:
        role = get_role_by_id("seer")

        assert role is not None
        assert role.name == "Seer"
        assert get_role_by_id(None) is None
        assert get_role_by_id("unknown") is None
