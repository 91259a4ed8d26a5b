"""Minimax AI implementation for Gomoku Zero.

Fixed-depth, breadth-limited minimax with alpha-beta pruning over the live
position. Marks are placed and removed in place; nothing is copied.

Node values are heuristic values from the searching player's perspective.
Any value at or beyond ``WIN`` is a proven result and stops the search of
that node. ``config.think_time`` is a cooperative budget: it is checked
after every sibling and the best move found so far is returned when it runs
out.

Leaf nodes go through a pluggable leaf hook. The default hook returns the
static value unchanged; ``HorizonExtension`` replaces it with a deeper
look at tactically sharp leaves.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

from ..core.position import Position
from ..models import AIConfig, Mark, Move
from .base import BaseAI, SearchState
from .evaluator import ThreatEvaluator
from .threats import WIN
from .transposition_store import TranspositionStore

logger = logging.getLogger(__name__)

INF = float("inf")


class LeafHook(Protocol):
    """Strategy consulted at depth-0 nodes and when listing candidates."""

    def leaf_value(
        self,
        search: "MinimaxAI",
        position: Position,
        score: int,
        alpha: float,
        beta: float,
        player: Mark,
    ) -> int:
        ...

    def filter_candidates(self, moves: List[Move]) -> List[Move]:
        ...


def is_terminal(score: float) -> bool:
    return score >= WIN or score <= -WIN


class MinimaxAI(BaseAI):
    """AI that uses minimax with alpha-beta pruning.

    Search parameters come from ``config.params``:

    - ``depth``: plies searched before the leaf hook takes over
    - ``breadth``: candidates examined per node
    - ``randomized_selection``: add 0-9 points of noise to node values
    """

    def __init__(
        self,
        player: Mark,
        config: Optional[AIConfig] = None,
        evaluator: Optional[ThreatEvaluator] = None,
        store: Optional[TranspositionStore] = None,
        leaf_hook: Optional[LeafHook] = None,
    ) -> None:
        super().__init__(player, config, evaluator, store)
        self.depth = self.params.depth
        self.breadth = self.params.breadth
        self.leaf_hook = leaf_hook
        self.alpha_cuts = 0
        self.beta_cuts = 0
        self.cum_cut_depth = 0
        self.cancelled = False

    def select_move(self, position: Position) -> Optional[Move]:
        """Best move for ``self.player``, never None while a cell is free."""
        self.begin_search()
        self.alpha_cuts = self.beta_cuts = self.cum_cut_depth = 0
        self.cancelled = False

        move = self.search(position, self.depth, self.player, -INF, INF)

        if move is None or move.co is None or move.score in (INF, -INF):
            terminal = move is not None and move.co is None
            self.state = SearchState.TERMINAL if terminal else SearchState.COMPLETED
            logger.info("No searchable candidates, using basic policy")
            move = self.basic_move(position, self.player)
        elif move.score <= -WIN:
            # Every line loses; at least make the most useful move.
            self.state = SearchState.TERMINAL
            fallback = self.basic_move(position, self.player)
            if fallback is not None:
                move = Move(fallback.co, int(move.score))
        elif self.cancelled:
            self.state = SearchState.TIMED_OUT
        elif move.score >= WIN:
            self.state = SearchState.TERMINAL
        else:
            self.state = SearchState.COMPLETED

        self._log_stats(move)
        return move

    def candidates_for(self, position: Position) -> List[Move]:
        moves = self.candidates.merged_moves(position, self.breadth)[:self.breadth]
        if self.leaf_hook is not None:
            moves = self.leaf_hook.filter_candidates(moves)
        return moves

    def search(
        self,
        position: Position,
        depth: int,
        player: Mark,
        alpha: float,
        beta: float,
    ) -> Optional[Move]:
        """
        Alpha-beta over the live position.

        Returns:
            The best move and its value for ``player``'s side of the tree, a
            coordinate-less Move for terminal and leaf nodes, or None when
            the node has no candidates.
        """
        self.nodes_visited += 1
        score = self.heuristic_value(position)
        if self.params.randomized_selection:
            score += self.rng.randrange(10)

        if is_terminal(score):
            return Move(None, score)
        if depth == 0:
            if self.leaf_hook is not None:
                score = self.leaf_hook.leaf_value(
                    self, position, score, alpha, beta, player
                )
            return Move(None, score)

        candidates = self.candidates_for(position)
        if not candidates:
            return None

        maximizing = player is self.player
        best_co = self.get_random_element(candidates).co
        best_score = -INF if maximizing else INF

        for co, _ in candidates:
            position.place(co, player)
            try:
                child = self.search(position, depth - 1, player.opponent, alpha, beta)
            finally:
                position.remove(co)

            value = child.score if child is not None else None
            if value is not None and value not in (INF, -INF):
                if maximizing and value > best_score:
                    best_co, best_score = co, value
                    if value >= WIN:
                        return Move(best_co, best_score)
                    alpha = max(alpha, value)
                    if beta <= alpha:
                        self.alpha_cuts += 1
                        self.cum_cut_depth += depth
                        return Move(best_co, alpha)
                elif not maximizing and value < best_score:
                    best_co, best_score = co, value
                    if value <= -WIN:
                        return Move(best_co, best_score)
                    beta = min(beta, value)
                    if beta <= alpha:
                        self.beta_cuts += 1
                        self.cum_cut_depth += depth
                        return Move(best_co, beta)

            if self.is_timed_out():
                self.cancelled = True
                break

        return Move(best_co, best_score)

    def search_stats(self) -> Dict[str, Any]:
        stats = super().search_stats()
        cuts = self.alpha_cuts + self.beta_cuts
        stats.update({
            "depth": self.depth,
            "breadth": self.breadth,
            "alpha_cuts": self.alpha_cuts,
            "beta_cuts": self.beta_cuts,
            "avg_cut_depth": self.cum_cut_depth / cuts if cuts else 0.0,
            "cancelled": self.cancelled,
        })
        if self.leaf_hook is not None:
            stats["horizon_rollouts"] = getattr(self.leaf_hook, "rollouts", 0)
        return stats

    def _log_stats(self, move: Optional[Move]) -> None:
        stats = self.search_stats()
        logger.debug(
            "Minimax: move=%s score=%s nodes=%d alpha_cuts=%d beta_cuts=%d "
            "avg_cut_depth=%.2f state=%s elapsed=%dms",
            move.co if move else None,
            move.score if move else None,
            stats["nodes_visited"],
            stats["alpha_cuts"],
            stats["beta_cuts"],
            stats["avg_cut_depth"],
            stats["state"],
            stats["elapsed_ms"],
        )
