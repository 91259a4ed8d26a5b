"""Tests for ThreatEvaluator and its pattern cache."""

from gomoku_zero.ai.bounded_transposition_table import BoundedTranspositionTable
from gomoku_zero.ai.evaluator import ThreatEvaluator, get_default_evaluator
from gomoku_zero.ai.threats import WIN, Threat
from gomoku_zero.models import Mark

B = Mark.BLACK
W = Mark.WHITE


class TestPatternCache:

    def test_classifications_are_memoised(self, evaluator) -> None:
        seq = (0, 0, 1, 1, 1, 0, 0)
        first = evaluator.classify(seq, B)
        second = evaluator.classify(seq, B)
        assert first == second == (Threat.STRAIGHT_THREE,)
        stats = evaluator.pattern_cache.stats()
        assert stats["misses"] == 1
        assert stats["hits"] == 1

    def test_key_includes_player(self, evaluator) -> None:
        seq = (0, 1, 1, 2)
        assert evaluator.classify(seq, B) != evaluator.classify(seq, W)
        assert len(evaluator.pattern_cache) == 2

    def test_shared_cache_between_evaluators(self) -> None:
        table = BoundedTranspositionTable(100, name="patterns")
        ThreatEvaluator(table).classify((0, 1, 1, 0), B)
        ThreatEvaluator(table).classify((0, 1, 1, 0), B)
        assert table.stats()["hits"] == 1

    def test_clear(self, evaluator) -> None:
        evaluator.classify((0, 1, 0), B)
        evaluator.clear()
        assert len(evaluator.pattern_cache) == 0

    def test_default_evaluator_is_singleton(self) -> None:
        assert get_default_evaluator() is get_default_evaluator()


class TestAnalysis:

    def test_analyze_lists_every_axis(self, evaluator, make_position) -> None:
        position = make_position([(7, 8, B), (8, 7, B)])
        threats = evaluator.analyze(position, B, (7, 7))
        assert threats.count(Threat.STRAIGHT_TWO) == 2
        assert threats.count(Threat.NONE) == 2

    def test_analyze_by_axis(self, evaluator, make_position) -> None:
        position = make_position([(7, 8, B), (8, 7, B)])
        by_axis = evaluator.analyze_by_axis(position, B, (7, 7))
        assert by_axis["horizontal"] == ["straight_two"]
        assert by_axis["vertical"] == ["straight_two"]
        assert by_axis["diagonal"] == ["none"]
        assert by_axis["anti_diagonal"] == ["none"]

    def test_evaluate_board_sums_own_marks(self, evaluator, make_position) -> None:
        position = make_position([(7, 7, B), (7, 8, B), (3, 3, W)])
        # Each black stone sees one straight two.
        assert evaluator.evaluate_board(position, B) == 3_000
        assert evaluator.evaluate_board(position, W) == 0

    def test_evaluate_board_detects_five(self, evaluator, make_position) -> None:
        position = make_position([(2, c, W) for c in range(5)])
        assert evaluator.evaluate_board(position, W) >= WIN
        assert evaluator.evaluate_board(position, B) == 0

    def test_threat_magnitude_sees_opponent_four(self, evaluator, make_position) -> None:
        position = make_position([(7, c, W) for c in range(3, 7)])
        assert evaluator.threat_magnitude(position, (7, 6)) == 100_000

    def test_threat_magnitude_is_max_single_threat(self, evaluator, make_position) -> None:
        position = make_position(
            [(7, 6, B), (7, 7, B), (7, 8, B), (6, 7, B), (8, 7, B)]
        )
        assert evaluator.threat_magnitude(position, (7, 7)) == 5_000
