"""
Threat evaluator: per-cell and whole-board scores built from line patterns.

Classifying a line window is the hot spot of every search, and the same
windows recur constantly, so classifications are memoised in a pattern cache
shared by every evaluator that is handed the same table.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Tuple

from ..config import PATTERN_CACHE_MAX
from ..core.position import Co, Position
from ..models import Mark
from .bounded_transposition_table import BoundedTranspositionTable
from .threats import THREAT_WEIGHTS, Threat, classify, linearize

logger = logging.getLogger(__name__)


class ThreatEvaluator:
    """Scores cells and boards by the threats they create."""

    def __init__(self, pattern_cache: Optional[BoundedTranspositionTable] = None):
        self.pattern_cache = pattern_cache or BoundedTranspositionTable(
            max_entries=PATTERN_CACHE_MAX, entry_size_estimate=160,
            name="patterns",
        )

    def classify(self, seq: Tuple[int, ...], player: Mark) -> Tuple[Threat, ...]:
        key = (int(player), seq)
        threats = self.pattern_cache.get(key)
        if threats is None:
            threats = classify(seq, player)
            self.pattern_cache.put(key, threats)
        return threats

    def analyze(self, position: Position, player: Mark, co: Co) -> List[Threat]:
        """Threats ``player`` would hold at ``co``, over all four axes."""
        threats: List[Threat] = []
        for seq in linearize(position, player, co):
            threats.extend(self.classify(seq, player))
        return threats

    def analyze_by_axis(
        self, position: Position, player: Mark, co: Co
    ) -> Dict[str, List[str]]:
        names = ("horizontal", "vertical", "diagonal", "anti_diagonal")
        return {
            name: [t.value for t in self.classify(seq, player)]
            for name, seq in zip(names, linearize(position, player, co))
        }

    def evaluate(self, position: Position, player: Mark, co: Co) -> int:
        """Sum of threat weights for ``player`` at ``co``."""
        total = 0
        for seq in linearize(position, player, co):
            for threat in self.classify(seq, player):
                total += THREAT_WEIGHTS[threat]
        return total

    def evaluate_board(self, position: Position, player: Mark) -> int:
        """Sum of cell scores over every mark ``player`` has on the board."""
        grid = position.grid
        me = int(player)
        total = 0
        for r, c in position.history:
            if grid[r][c] == me:
                total += self.evaluate(position, player, (r, c))
        return total

    def threat_magnitude(self, position: Position, co: Co) -> int:
        """Weight of the most severe single threat either color holds at ``co``."""
        threats = self.analyze(position, Mark.BLACK, co)
        threats.extend(self.analyze(position, Mark.WHITE, co))
        return max(THREAT_WEIGHTS[t] for t in threats)

    def clear(self) -> None:
        self.pattern_cache.clear()
        logger.debug("Pattern cache cleared")


_default_evaluator: Optional[ThreatEvaluator] = None
_default_lock = threading.Lock()


def get_default_evaluator() -> ThreatEvaluator:
    """Process-wide evaluator whose pattern cache lives as long as the process."""
    global _default_evaluator
    if _default_evaluator is None:
        with _default_lock:
            if _default_evaluator is None:
                _default_evaluator = ThreatEvaluator()
    return _default_evaluator
