"""Unit tests for the lobby view reducer pipeline."""

from datetime import timedelta

from lobbysync.domain.models.session import SessionStatus
from lobbysync.domain.services.lobby_view import derive_lobby_view
from tests.helpers import FakeTimeAuthority, make_participant, make_session

THRESHOLD = timedelta(seconds=3)


class TestDeriveLobbyView:
    """Tests for derive_lobby_view()."""

    def test_view_before_joining(self) -> None:
        view = derive_lobby_view(None, [], None, FakeTimeAuthority().now(), THRESHOLD)

        assert view.session is None
        assert view.me is None
        assert view.coordinator_id is None
        assert view.is_coordinator is False
        assert view.my_role is None

    def test_coordinator_and_quorum(self) -> None:
        clock = FakeTimeAuthority()
        session = make_session()
        roster = [
            make_participant("a", 1, has_voted=True, last_seen=clock.now()),
            make_participant("b", 2, has_voted=True, last_seen=clock.now()),
            make_participant("c", 3, last_seen=clock.now()),
        ]

        view = derive_lobby_view(session, roster, "a", clock.now(), THRESHOLD)

        assert view.coordinator_id == "a"
        assert view.is_coordinator is True
        assert view.quorum.quorum_reached is True
        assert [p.id for p in view.active] == ["a", "b", "c"]

    def test_silent_coordinator_is_replaced(self) -> None:
        clock = FakeTimeAuthority()
        silent = make_participant("a", 1, has_voted=True, last_seen=clock.now())
        clock.advance(seconds=5)
        roster = [
            silent,
            make_participant("b", 2, has_voted=True, last_seen=clock.now()),
            make_participant("c", 3, has_voted=True, last_seen=clock.now()),
        ]

        view = derive_lobby_view(make_session(), roster, "b", clock.now(), THRESHOLD)

        assert view.coordinator_id == "b"
        assert view.is_coordinator is True

    def test_me_is_kept_even_when_inactive(self) -> None:
        clock = FakeTimeAuthority()
        me = make_participant("a", 1, last_seen=clock.now())
        clock.advance(seconds=10)

        view = derive_lobby_view(make_session(), [me], "a", clock.now(), THRESHOLD)

        assert view.me == me
        assert view.active == ()
        assert view.is_coordinator is False

    def test_my_role_resolves_catalog_entry(self) -> None:
        clock = FakeTimeAuthority()
        roster = [make_participant("a", 1, assigned_role="wolf", last_seen=clock.now())]

        view = derive_lobby_view(
            make_session(SessionStatus.ACTIVE), roster, "a", clock.now(), THRESHOLD
        )

        assert view.my_role is not None
        assert view.my_role.id == "wolf"

    def test_countdown_passes_through(self) -> None:
        view = derive_lobby_view(
            make_session(), [], None, FakeTimeAuthority().now(), THRESHOLD, countdown=4
        )

        assert view.countdown == 4
