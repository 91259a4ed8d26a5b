"""Tests for line windows and threat classification."""

import pytest

from gomoku_zero.ai.threats import (
    INTERESTING_THRESHOLD,
    THREAT_WEIGHTS,
    WIN,
    Threat,
    classify,
    linearize,
    weight,
)
from gomoku_zero.models import Mark

B = Mark.BLACK
W = Mark.WHITE


class TestWeights:

    def test_five_dominates_everything_else(self) -> None:
        rest = sum(w for t, w in THREAT_WEIGHTS.items() if t is not Threat.FIVE)
        assert WIN == weight(Threat.FIVE)
        assert WIN > 16 * rest

    def test_ordering(self) -> None:
        assert weight(Threat.STRAIGHT_FOUR) > weight(Threat.BLOCKED_FOUR)
        assert weight(Threat.BLOCKED_FOUR) > weight(Threat.STRAIGHT_THREE)
        assert weight(Threat.STRAIGHT_THREE) > weight(Threat.BLOCKED_THREE)
        assert weight(Threat.BLOCKED_TWO) > weight(Threat.BLOCKED_POKED_TWO)
        assert weight(Threat.NONE) == 0

    def test_interesting_threshold_is_blocked_three(self) -> None:
        assert INTERESTING_THRESHOLD == weight(Threat.BLOCKED_THREE)


class TestLinearize:

    def test_open_four_horizontal(self, make_position) -> None:
        position = make_position([(7, c, B) for c in range(7, 11)])
        lines = linearize(position, B, (7, 7))
        assert lines[0] == (0, 0, 1, 1, 1, 1, 0, 0)
        assert lines[1] == (0, 0, 1, 0, 0)

    def test_edge_counts_as_opponent(self, make_position) -> None:
        position = make_position([(0, 0, B)])
        lines = linearize(position, B, (0, 0))
        assert lines[0] == (2, 1, 0, 0)
        assert lines[3] == (2, 1, 2)

    def test_opponent_mark_stops_walk(self, make_position) -> None:
        position = make_position([(7, 6, W), (7, 8, B)])
        lines = linearize(position, B, (7, 7))
        assert lines[0] == (2, 1, 1, 0, 0)

    def test_edge_for_white_is_black(self, make_position) -> None:
        position = make_position([(0, 0, W)])
        assert linearize(position, W, (0, 0))[0] == (1, 2, 0, 0)

    def test_walk_reaches_at_most_five(self, make_position) -> None:
        position = make_position([(7, c, B) for c in range(2, 13)])
        line = linearize(position, B, (7, 7))[0]
        assert len(line) == 11

    def test_centre_assumed_player(self, make_position) -> None:
        position = make_position()
        assert linearize(position, W, (7, 7))[0] == (0, 0, 2, 0, 0)


class TestClassify:

    @pytest.mark.parametrize(
        "seq, player, expected",
        [
            ((0, 0, 1, 1, 1, 0, 0), B, (Threat.STRAIGHT_THREE,)),
            ((2, 1, 1, 1, 0, 0), B, (Threat.BLOCKED_THREE,)),
            ((0, 1, 0, 1, 1, 0, 0), B, (Threat.STRAIGHT_POKED_THREE,)),
            ((0, 1, 1, 0, 1, 1, 0, 0), B, (Threat.STRAIGHT_POKED_FOUR,)),
            ((2, 1, 1, 0, 1, 1, 0), B, (Threat.BLOCKED_POKED_FOUR,)),
            ((0, 0, 1, 1, 1, 1, 0, 0), B, (Threat.STRAIGHT_FOUR,)),
            ((2, 1, 1, 1, 1, 0, 0), B, (Threat.BLOCKED_FOUR,)),
            ((1, 2, 2, 2, 2, 0, 0), W, (Threat.BLOCKED_FOUR,)),
            ((0, 1, 1, 0, 0), B, (Threat.STRAIGHT_TWO,)),
            ((2, 1, 1, 0, 0), B, (Threat.BLOCKED_TWO,)),
            ((2, 1, 0, 1, 0, 0), B, (Threat.BLOCKED_POKED_TWO,)),
            ((1, 1, 1, 1, 1), B, (Threat.FIVE,)),
            ((2, 1, 1, 1, 1, 1, 2), B, (Threat.FIVE,)),
            ((0, 0, 1, 0, 0), B, (Threat.NONE,)),
        ],
    )
    def test_shapes(self, seq, player, expected) -> None:
        assert classify(seq, player) == expected

    def test_blocked_both_ends_short_interior(self) -> None:
        assert classify((2, 1, 1, 1, 0, 2), B) == (Threat.NONE,)

    def test_overlapping_poked_pairs(self) -> None:
        assert classify((0, 1, 0, 1, 0, 1, 0), B) == (
            Threat.STRAIGHT_POKED_TWO,
            Threat.STRAIGHT_POKED_TWO,
        )

    def test_poked_five_scores_longest_block(self) -> None:
        assert classify((1, 1, 1, 1, 0, 1, 0), B) == (Threat.STRAIGHT_FOUR,)

    def test_separate_blocks(self) -> None:
        assert classify((1, 1, 0, 0, 1, 1, 0), B) == (
            Threat.STRAIGHT_TWO,
            Threat.STRAIGHT_TWO,
        )


class TestCellScores:
    """Whole-cell sums through the evaluator."""

    def test_open_four_scores_straight_four(self, evaluator, make_position) -> None:
        position = make_position([(7, c, B) for c in range(7, 11)])
        assert evaluator.evaluate(position, B, (7, 7)) == 100_000

    def test_corner_four_is_blocked(self, evaluator, make_position) -> None:
        position = make_position([(0, c, B) for c in range(4)])
        assert evaluator.evaluate(position, B, (0, 0)) == 10_000

    @pytest.mark.parametrize(
        "cells",
        [
            [(7, c) for c in range(3, 8)],
            [(r, 7) for r in range(3, 8)],
            [(3 + i, 3 + i) for i in range(5)],
            [(5 + i, 9 - i) for i in range(5)],
        ],
        ids=["horizontal", "vertical", "diagonal", "anti_diagonal"],
    )
    def test_five_reaches_win(self, evaluator, make_position, cells) -> None:
        position = make_position([(r, c, B) for r, c in cells])
        for co in cells:
            assert evaluator.evaluate(position, B, co) >= WIN
