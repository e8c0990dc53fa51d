"""Unit tests for quorum aggregation.

Threshold is ceil(n/2) over the active set, and a single participant can
never reach quorum however the arithmetic rounds.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lobbysync.domain.services.quorum import (
    MIN_QUORUM_PARTICIPANTS,
    aggregate_quorum,
    compute_vote_threshold,
)
from tests.helpers import make_participant


def _roster(size: int, voted: int = 0, ready: int = 0) -> list:
    return [
        make_participant(
            f"p{i}", i, has_voted=i <= voted, is_ready=i <= ready
        )
        for i in range(1, size + 1)
    ]


class TestComputeVoteThreshold:
    """Tests for compute_vote_threshold()."""

    @pytest.mark.parametrize(
        ("active_count", "expected"),
        [(0, 0), (1, 1), (2, 1), (3, 2), (4, 2), (5, 3), (6, 3), (20, 10)],
    )
    def test_rounds_half_up(self, active_count: int, expected: int) -> None:
        assert compute_vote_threshold(active_count) == expected

    @given(st.integers(min_value=1, max_value=1000))
    def test_threshold_is_ceiling_of_half(self, active_count: int) -> None:
        threshold = compute_vote_threshold(active_count)
        assert threshold * 2 >= active_count
        assert (threshold - 1) * 2 < active_count


class TestAggregateQuorum:
    """Tests for aggregate_quorum()."""

    def test_empty_set(self) -> None:
        quorum = aggregate_quorum([])

        assert quorum.active_count == 0
        assert quorum.all_ready is False
        assert quorum.all_voted is False
        assert quorum.quorum_reached is False

    def test_single_participant_never_reaches_quorum(self) -> None:
        quorum = aggregate_quorum(_roster(1, voted=1, ready=1))

        assert quorum.vote_count == 1
        assert quorum.vote_threshold == 1
        assert quorum.all_ready is True
        assert quorum.quorum_reached is False
        assert quorum.all_voted is False

    def test_three_participants_need_two_votes(self) -> None:
        assert aggregate_quorum(_roster(3, voted=1)).quorum_reached is False
        assert aggregate_quorum(_roster(3, voted=2)).quorum_reached is True

    def test_four_participants_reach_quorum_at_second_vote(self) -> None:
        """A, B, C, D joined; quorum lands with the second vote, not the last."""
        assert aggregate_quorum(_roster(4, voted=1)).quorum_reached is False

        quorum = aggregate_quorum(_roster(4, voted=2))
        assert quorum.vote_threshold == 2
        assert quorum.quorum_reached is True
        assert quorum.all_voted is False

    def test_all_ready_requires_every_member(self) -> None:
        assert aggregate_quorum(_roster(3, ready=2)).all_ready is False
        assert aggregate_quorum(_roster(3, ready=3)).all_ready is True

    def test_all_voted(self) -> None:
        assert aggregate_quorum(_roster(3, voted=3)).all_voted is True

    @given(
        st.integers(min_value=0, max_value=20).flatmap(
            lambda n: st.tuples(st.just(n), st.integers(min_value=0, max_value=n))
        )
    )
    def test_quorum_matches_definition(self, sizes: tuple[int, int]) -> None:
        size, voted = sizes
        quorum = aggregate_quorum(_roster(size, voted=voted))

        expected = size >= MIN_QUORUM_PARTICIPANTS and voted >= (size + 1) // 2
        assert quorum.quorum_reached is expected
        assert quorum.vote_count == voted
