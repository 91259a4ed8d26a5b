"""
Transposition caches shared by every search in the process.

Three tables, all keyed by a value snapshot of the position:

- heuristic: black score minus white score
- ordered moves: sorted candidate list per color
- score maps: cell -> score per color, used to rebuild the next position's
  map incrementally

In hash-only mode the key is the 64-bit Zobrist hash. In strict mode it is a
``PositionKey`` carrying every cell, so two positions share an entry only
when they are identical. Reads never block; writes are serialized per table.
Switching modes drops every entry, since old keys are meaningless in the new
mode.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Hashable
from typing import Any, Dict, Optional, Tuple

from ..config import STRICT_EQUALITY, TT_MAX_ENTRIES
from ..core.position import Co, Position
from ..models import Mark, Move
from .bounded_transposition_table import BoundedTranspositionTable

logger = logging.getLogger(__name__)

ScoreMap = Dict[Co, int]


class TranspositionStore:
    """Heuristic, ordered-move and score-map caches."""

    def __init__(
        self,
        max_entries: int = TT_MAX_ENTRIES,
        strict: bool = STRICT_EQUALITY,
    ):
        self.strict = strict
        self.heuristics = BoundedTranspositionTable(
            max_entries, entry_size_estimate=96, name="heuristic"
        )
        self.ordered_moves = BoundedTranspositionTable(
            max_entries, entry_size_estimate=2048, name="ordered_moves"
        )
        self.score_maps = BoundedTranspositionTable(
            max_entries, entry_size_estimate=4096, name="score_maps"
        )

    @property
    def tables(self) -> Tuple[BoundedTranspositionTable, ...]:
        return (self.heuristics, self.ordered_moves, self.score_maps)

    def key(self, position: Position) -> Hashable:
        if self.strict:
            return position.snapshot()
        return position.zobrist_hash

    def set_strict(self, strict: bool) -> None:
        if strict == self.strict:
            return
        self.clear()
        self.strict = strict
        logger.info("Transposition keys now %s", "strict" if strict else "hash-only")

    def get_heuristic(self, key: Hashable) -> Optional[int]:
        return self.heuristics.get(key)

    def put_heuristic(self, key: Hashable, value: int) -> None:
        self.heuristics.put(key, value)

    def get_ordered_moves(
        self, key: Hashable, player: Mark
    ) -> Optional[Tuple[Move, ...]]:
        return self.ordered_moves.get((key, int(player)))

    def put_ordered_moves(
        self, key: Hashable, player: Mark, moves: Tuple[Move, ...]
    ) -> None:
        self.ordered_moves.put((key, int(player)), moves)

    def get_score_map(self, key: Hashable, player: Mark) -> Optional[ScoreMap]:
        return self.score_maps.get((key, int(player)))

    def put_score_map(self, key: Hashable, player: Mark, scores: ScoreMap) -> None:
        self.score_maps.put((key, int(player)), scores)

    def clear(self) -> None:
        for table in self.tables:
            table.clear()

    def stats(self) -> Dict[str, Any]:
        return {
            "strict": self.strict,
            "tables": {table.name: table.stats() for table in self.tables},
        }


_default_store: Optional[TranspositionStore] = None
_default_lock = threading.Lock()


def get_default_store() -> TranspositionStore:
    """Process-wide store; entries persist until cleared or evicted."""
    global _default_store
    if _default_store is None:
        with _default_lock:
            if _default_store is None:
                _default_store = TranspositionStore()
    return _default_store
