"""Tests for the horizon extension leaf hook."""

import pytest

from gomoku_zero.ai.horizon import HorizonExtension, HorizonStatus
from gomoku_zero.ai.minimax_ai import INF, MinimaxAI
from gomoku_zero.ai.threats import INTERESTING_THRESHOLD
from gomoku_zero.models import Mark, Move

B = Mark.BLACK
W = Mark.WHITE

OPEN_THREE = [(7, 5, B), (7, 6, B), (7, 7, B)]


@pytest.fixture
def make_search(evaluator, store, make_config):
    def _make(hook: HorizonExtension, player: Mark = W, **params) -> MinimaxAI:
        ai = MinimaxAI(player, make_config(**params), evaluator, store, leaf_hook=hook)
        ai.begin_search()
        return ai
    return _make


class TestCandidateFilter:

    def test_search_mode_keeps_everything(self) -> None:
        hook = HorizonExtension()
        moves = [Move((0, 0), 100_000), Move((0, 1), 10)]
        assert hook.filter_candidates(moves) == moves

    def test_kill_mode_keeps_threats_only(self) -> None:
        hook = HorizonExtension(threshold=1_000)
        hook.status = HorizonStatus.KILL
        moves = [Move((0, 0), 100_000), Move((0, 1), 1_000), Move((0, 2), 10)]
        assert hook.filter_candidates(moves) == [Move((0, 0), 100_000)]

    def test_defaults(self) -> None:
        hook = HorizonExtension()
        assert hook.threshold == INTERESTING_THRESHOLD
        assert hook.probability == 20
        assert hook.depth == 10
        assert not hook.in_flight


class TestLeafValue:

    def test_extends_sharp_leaf(self, make_search, make_position) -> None:
        hook = HorizonExtension(probability=100, depth=2)
        ai = make_search(hook)
        position = make_position(OPEN_THREE)
        before = position.snapshot()

        value = hook.leaf_value(ai, position, 123, -INF, INF, W)

        assert isinstance(value, int)
        assert hook.rollouts == 1
        assert hook.status is HorizonStatus.SEARCH
        assert position.snapshot() == before

    def test_zero_probability_never_extends(self, make_search, make_position) -> None:
        hook = HorizonExtension(probability=0)
        ai = make_search(hook)
        assert hook.leaf_value(ai, make_position(OPEN_THREE), 123, -INF, INF, W) == 123
        assert hook.rollouts == 0

    def test_quiet_leaf_not_extended(self, make_search, make_position) -> None:
        hook = HorizonExtension(probability=100, threshold=10**6)
        ai = make_search(hook)
        assert hook.leaf_value(ai, make_position(OPEN_THREE), 5, -INF, INF, W) == 5
        assert hook.rollouts == 0

    def test_no_nested_extension(self, make_search, make_position) -> None:
        hook = HorizonExtension(probability=100)
        hook.status = HorizonStatus.KILL
        ai = make_search(hook)
        assert hook.leaf_value(ai, make_position(OPEN_THREE), 9, -INF, INF, W) == 9
        assert hook.rollouts == 0

    def test_empty_board_leaf(self, make_search, make_position) -> None:
        hook = HorizonExtension(probability=100)
        ai = make_search(hook)
        assert hook.leaf_value(ai, make_position(), 0, -INF, INF, B) == 0


class TestWithSearch:

    def test_full_search_reports_rollouts(self, make_search, make_position) -> None:
        hook = HorizonExtension(probability=100, depth=2)
        ai = make_search(hook, W, depth=2, breadth=4)
        position = make_position(OPEN_THREE + [(6, 6, W), (8, 8, W)])
        before = position.snapshot()
        move = ai.select_move(position)
        assert position[move.co] is Mark.EMPTY
        assert position.snapshot() == before
        stats = ai.search_stats()
        assert stats["horizon_rollouts"] == hook.rollouts
        assert hook.rollouts > 0
        assert hook.status is HorizonStatus.SEARCH

    def test_still_blocks_open_four(self, make_search, make_position) -> None:
        hook = HorizonExtension(probability=50, depth=3)
        ai = make_search(hook, W, depth=2)
        position = make_position(
            [(7, c, B) for c in range(5, 9)] + [(3, 3, W), (11, 11, W), (3, 11, W)]
        )
        assert ai.select_move(position).co in {(7, 4), (7, 9)}
