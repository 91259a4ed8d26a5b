"""
Game session: a live position, the side to move, and change notifications.

Listeners receive a ``PositionChanged`` event after every accepted move or
undo. Events are delivered on a single background worker in the order they
were produced, so a slow listener never holds up play or search.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from .ai.base import next_to_move
from .ai.evaluator import ThreatEvaluator
from .ai.factory import create_ai
from .ai.mcts_ai import MCTSAI
from .ai.transposition_store import TranspositionStore
from .config import ACTIVE_RADIUS
from .core.position import Co, Position
from .errors import InvalidStateError
from .models import HistoryEntry, Mark, Move, SearchKind, SearchParams

logger = logging.getLogger(__name__)


@dataclass
class PositionChanged:
    """Snapshot pushed to listeners after the position changes."""
    grid: List[List[int]]
    last_move: Optional[Co]
    to_move: Mark
    winner: Optional[Mark]
    move_count: int
    active_map: Optional[List[List[bool]]] = None
    tree: Optional[Dict[str, Any]] = None
    search_stats: Dict[str, Any] = field(default_factory=dict)


Listener = Callable[[PositionChanged], None]


class GameSession:
    """Owns one Position and tells listeners about every change."""

    def __init__(
        self,
        dim: int = 15,
        listeners: Optional[Iterable[Listener]] = None,
        include_active_map: bool = False,
        include_tree: bool = False,
        tree_depth: int = 2,
        evaluator: Optional[ThreatEvaluator] = None,
        store: Optional[TranspositionStore] = None,
        radius: int = ACTIVE_RADIUS,
    ):
        self.position = Position(dim, radius=radius)
        self.listeners: List[Listener] = list(listeners or ())
        self.include_active_map = include_active_map
        self.include_tree = include_tree
        self.tree_depth = tree_depth
        self.evaluator = evaluator
        self.store = store
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="gomoku-notify"
        )
        self._pending: Optional[Future] = None

    @property
    def to_move(self) -> Mark:
        return next_to_move(self.position)

    def add_listener(self, listener: Listener) -> None:
        self.listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self.listeners.remove(listener)

    def winner(self) -> Optional[Mark]:
        return self.position.winner()

    def is_over(self) -> bool:
        return self.position.is_full() or self.winner() is not None

    def play(self, row: int, col: int) -> PositionChanged:
        """Place the side to move's mark at (row, col).

        Raises:
            InvalidCoordinateError: Off the board or occupied
            InvalidStateError: The game has already been won
        """
        if self.winner() is not None:
            raise InvalidStateError("Game is already over")
        self.position.place((row, col), self.to_move)
        return self._publish()

    def undo(self) -> Optional[Co]:
        co = self.position.last_move
        if co is None:
            return None
        self.position.remove(co)
        self._publish()
        return co

    def request_move(
        self,
        kind: SearchKind | str = SearchKind.ALPHA_BETA,
        think_time_ms: Optional[int] = None,
        params: Optional[SearchParams] = None,
        seed: Optional[int] = None,
    ) -> Optional[Move]:
        """Search for the side to move and play the result.

        Returns None, without playing, when the game is over.
        """
        if self.is_over():
            return None
        ai = create_ai(
            kind, self.to_move, think_time_ms, params, seed,
            self.evaluator, self.store,
        )
        move = ai.select_move(self.position)
        if move is None:
            return None
        tree = None
        if self.include_tree and isinstance(ai, MCTSAI) and ai.last_root is not None:
            tree = ai.last_root.to_dict(self.tree_depth)
        self.position.place(move.co, ai.player)
        self._publish(tree=tree, search_stats=ai.search_stats())
        return move

    def history(self) -> List[HistoryEntry]:
        return self.position.to_history()

    def load_history(self, entries: Iterable[HistoryEntry]) -> PositionChanged:
        """Replace the position with one rebuilt from ``entries``."""
        self.position = Position.from_history(
            self.position.dim, entries, radius=self.position.radius
        )
        return self._publish()

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until every event produced so far has been delivered."""
        if self._pending is not None:
            self._pending.result(timeout=timeout)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "GameSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _publish(
        self,
        tree: Optional[Dict[str, Any]] = None,
        search_stats: Optional[Dict[str, Any]] = None,
    ) -> PositionChanged:
        position = self.position
        event = PositionChanged(
            grid=[list(line) for line in position.grid],
            last_move=position.last_move,
            to_move=self.to_move,
            winner=self.winner(),
            move_count=position.occupied,
            active_map=(
                position.active_map().tolist() if self.include_active_map else None
            ),
            tree=tree,
            search_stats=search_stats or {},
        )
        self._pending = self._executor.submit(self._deliver, event)
        return event

    def _deliver(self, event: PositionChanged) -> None:
        for listener in list(self.listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Position listener %r failed", listener)
