"""
Candidate generation and ordering for Gomoku Zero searches.

Only active cells are ever considered: empty cells within the position's
neighbourhood radius of an existing mark. Each is scored with the threat
evaluator for one color and the list is sorted best-first. Ties keep
row-major order, so results are reproducible.

When the previous position (the current one minus its last mark) already
has a cached score map, only the cells whose line windows can see the new
mark are rescored. Everything else is copied over.

Usage Example:
```python
from gomoku_zero.ai.move_ordering import CandidateGenerator

candidates = CandidateGenerator()
best_for_black = candidates.sorted_moves(position, Mark.BLACK, num=5)
merged = candidates.merged_moves(position, num=5)
```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..config import REUSE_SCORE_MAPS
from ..core.position import Co, Position
from ..models import Mark, Move
from .evaluator import ThreatEvaluator, get_default_evaluator
from .transposition_store import ScoreMap, TranspositionStore, get_default_store

logger = logging.getLogger(__name__)

RAYS: Tuple[Co, ...] = tuple(
    (dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if dr or dc
)


def _by_score(move: Move) -> int:
    return -move.score


@dataclass
class CandidateGenerator:
    """Scores and orders candidate cells.

    Attributes
    ----------
    evaluator : ThreatEvaluator
        Cell scorer; defaults to the process-wide evaluator.
    store : TranspositionStore
        Cache for ordered moves and score maps.
    reuse_score_maps : bool
        Rebuild from the previous position's score map when possible.
    """

    evaluator: ThreatEvaluator = field(default_factory=get_default_evaluator)
    store: TranspositionStore = field(default_factory=get_default_store)
    reuse_score_maps: bool = REUSE_SCORE_MAPS
    recomputed: int = field(default=0, init=False)
    reused: int = field(default=0, init=False)

    def sorted_moves(
        self, position: Position, player: Mark, num: Optional[int] = None
    ) -> List[Move]:
        """Active cells scored for ``player``, best first.

        Parameters
        ----------
        position : Position
            Board to read; left unchanged.
        player : Mark
            Color whose threats are scored.
        num : int, optional
            Truncate to the best ``num`` moves.

        Returns
        -------
        list of Move
            Empty when the board has no marks.
        """
        key = self.store.key(position)
        moves = self.store.get_ordered_moves(key, player)
        if moves is None:
            moves = self._generate(position, player, key)
        if num is not None:
            return list(moves[:num])
        return list(moves)

    def merged_moves(self, position: Position, num: int) -> List[Move]:
        """Top ``num`` moves of each color, deduplicated, best first.

        A cell that is good for both colors appears once with the higher of
        its two scores.
        """
        best: Dict[Co, int] = {}
        for player in (Mark.BLACK, Mark.WHITE):
            for co, score in self.sorted_moves(position, player, num):
                if score > best.get(co, -1):
                    best[co] = score
        merged = [Move(co, score) for co, score in best.items()]
        merged.sort(key=_by_score)
        return merged

    def _generate(self, position: Position, player: Mark, key) -> Tuple[Move, ...]:
        previous = self._previous_scores(position, player) if self.reuse_score_maps else None
        evaluate = self.evaluator.evaluate
        scores: ScoreMap = {}
        for co in position.active_cells():
            score = previous.get(co) if previous is not None else None
            if score is None:
                score = evaluate(position, player, co)
                self.recomputed += 1
            else:
                self.reused += 1
            scores[co] = score
        moves = sorted((Move(co, s) for co, s in scores.items()), key=_by_score)
        result = tuple(moves)
        self.store.put_score_map(key, player, scores)
        self.store.put_ordered_moves(key, player, result)
        return result

    def _previous_scores(self, position: Position, player: Mark) -> Optional[ScoreMap]:
        """Score map of the position before the last move, minus stale cells."""
        co = position.last_move
        if co is None:
            return None
        mark = position.remove(co)
        try:
            previous = self.store.get_score_map(self.store.key(position), player)
        finally:
            position.place(co, mark)
        if previous is None:
            return None

        scores = dict(previous)
        grid = position.grid
        me = int(player)
        for dr, dc in RAYS:
            r, c = co[0] + dr, co[1] + dc
            empties = 0
            while position.in_bounds(r, c):
                cell = grid[r][c]
                if cell == 0:
                    if empties > 1:
                        break
                    empties += 1
                elif cell != me:
                    break
                else:
                    empties = 0
                scores.pop((r, c), None)
                r += dr
                c += dc
        return scores

    def stats(self) -> Dict[str, int]:
        return {"recomputed": self.recomputed, "reused": self.reused}
