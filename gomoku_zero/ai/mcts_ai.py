"""Monte Carlo Tree Search for Gomoku Zero.

Each call builds a fresh tree and runs select / expand / playout /
backpropagate iterations until the time budget is spent:

- Selection walks down by UCB1 (C = sqrt 2) through nodes whose candidate
  lists are exhausted.
- Expansion adds one child per visit from a cached, breadth-limited and
  optionally shuffled candidate list, so the tree widens progressively.
- Playout places the new child's move and lets the basic policy play both
  sides for a few moves, stopping as soon as either color has five.
- Backpropagation adds a visit to every node up to the root and a win to
  each node whose player to move is not the simulated winner.

The tree stores coordinates and statistics only. Before each simulation the
path from the root is replayed on the shared position, and exactly those
marks are removed afterwards.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

from ..core.position import Co, Position
from ..models import AIConfig, Mark, Move
from .base import BaseAI, SearchState
from .evaluator import ThreatEvaluator
from .transposition_store import TranspositionStore

logger = logging.getLogger(__name__)

EXPLORATION = math.sqrt(2.0)


class MCTSNode:
    """Search tree node.

    ``identity`` is the player to move at this node; ``co`` is the move that
    led here and was made by the parent's ``identity``.
    """
    __slots__ = [
        'identity', 'co', 'wins', 'visits', 'parent', 'children',
        'candidates', 'terminal', 'winner',
    ]

    def __init__(
        self,
        identity: Mark,
        co: Optional[Co] = None,
        parent: Optional["MCTSNode"] = None,
    ):
        self.identity = identity
        self.co = co
        self.wins = 0
        self.visits = 0
        self.parent = parent
        self.children: List["MCTSNode"] = []
        self.candidates: Optional[List[Move]] = None
        self.terminal = False
        self.winner: Optional[Mark] = None

    @property
    def win_ratio(self) -> float:
        return self.wins / self.visits if self.visits else 0.0

    def ucb1(self) -> float:
        """Upper confidence bound; unvisited nodes are explored first."""
        if self.visits == 0 or self.parent is None:
            return math.inf
        exploitation = self.wins / self.visits
        exploration = EXPLORATION * math.sqrt(
            math.log(self.parent.visits) / self.visits
        )
        return exploitation + exploration

    def select(self) -> "MCTSNode":
        node = self
        while not (node.terminal or node.candidates is None or node.candidates):
            if not node.children:
                break
            node = max(node.children, key=MCTSNode.ucb1)
        return node

    def expand(self, candidates: List[Move]) -> Optional["MCTSNode"]:
        """Add the next untried candidate as a child.

        ``candidates`` is only used the first time a node is expanded.
        """
        if self.candidates is None:
            self.candidates = list(candidates)
        if not self.candidates:
            return None
        move = self.candidates.pop(0)
        child = MCTSNode(self.identity.opponent, move.co, self)
        self.children.append(child)
        return child

    def backpropagate(self, winner: Optional[Mark]) -> None:
        node: Optional[MCTSNode] = self
        while node is not None:
            if winner is not None and winner is not node.identity:
                node.wins += 1
            node.visits += 1
            node = node.parent

    def path(self) -> List["MCTSNode"]:
        """Nodes from the root's child down to this node."""
        nodes: List[MCTSNode] = []
        node: Optional[MCTSNode] = self
        while node is not None and node.parent is not None:
            nodes.append(node)
            node = node.parent
        nodes.reverse()
        return nodes

    def to_dict(self, max_depth: int = 2) -> Dict[str, Any]:
        """Tree snapshot for visualization."""
        data: Dict[str, Any] = {
            "co": list(self.co) if self.co is not None else None,
            "identity": self.identity.name,
            "wins": self.wins,
            "visits": self.visits,
            "terminal": self.terminal,
        }
        if max_depth > 0:
            data["children"] = [
                child.to_dict(max_depth - 1)
                for child in sorted(self.children, key=lambda n: -n.visits)
            ]
        return data

    def __repr__(self) -> str:
        return (
            f"MCTSNode(co={self.co}, identity={self.identity.name}, "
            f"wins={self.wins}, visits={self.visits}, children={len(self.children)})"
        )


class MCTSAI(BaseAI):
    """Monte Carlo Tree Search AI.

    Search parameters come from ``config.params``:

    - ``mc_breadth``: candidates considered per node
    - ``mc_simulation_depth``: basic-policy moves per playout
    - ``mc_random_expansion``: shuffle each node's candidates
    """

    def __init__(
        self,
        player: Mark,
        config: Optional[AIConfig] = None,
        evaluator: Optional[ThreatEvaluator] = None,
        store: Optional[TranspositionStore] = None,
    ) -> None:
        super().__init__(player, config, evaluator, store)
        self.breadth = self.params.mc_breadth
        self.max_simulation_depth = self.params.mc_simulation_depth
        self.random_expansion = self.params.mc_random_expansion
        self.iterations = 0
        self.last_root: Optional[MCTSNode] = None

    def select_move(self, position: Position) -> Optional[Move]:
        self.begin_search()
        self.iterations = 0
        root = MCTSNode(self.player)
        self.last_root = root

        while not self.is_timed_out():
            self._iterate(position, root)
            self.iterations += 1
            if root.terminal:
                break

        best: Optional[MCTSNode] = None
        for child in root.children:
            if best is None or child.visits > best.visits:
                best = child

        if best is None:
            self.state = SearchState.COMPLETED
            logger.info("MCTS produced no children, using basic policy")
            move = self.basic_move(position, self.player)
        else:
            self.state = SearchState.TIMED_OUT
            move = Move(best.co, best.visits)
        self._log_stats(root, move)
        return move

    def _iterate(self, position: Position, root: MCTSNode) -> None:
        node = root.select()
        path = node.path()
        placed: List[Co] = []
        try:
            for step in path:
                position.place(step.co, step.parent.identity)
                placed.append(step.co)
            self.nodes_visited += 1

            if node.terminal:
                node.backpropagate(node.winner)
                return
            child = node.expand(self._node_candidates(position, node))
            if child is None:
                node.terminal = True
                node.backpropagate(None)
                return
            child.backpropagate(self.playout(position, child))
        finally:
            for co in reversed(placed):
                position.remove(co)

    def _node_candidates(self, position: Position, node: MCTSNode) -> List[Move]:
        if node.candidates is not None:
            return node.candidates
        moves = self.candidates.merged_moves(position, self.breadth)[:self.breadth]
        if self.random_expansion:
            moves = self.shuffle_array(moves)
        return moves

    def playout(self, position: Position, node: MCTSNode) -> Optional[Mark]:
        """
        Simulate from ``node``'s move and return the winner, or None.

        The position must already hold the path down to ``node.parent``.
        """
        mover = node.parent.identity
        position.place(node.co, mover)
        placed: List[Co] = [node.co]
        try:
            if self.winner_at(position, node.co) is not None:
                node.terminal = True
                node.winner = mover
                return mover
            to_move = node.identity
            for _ in range(self.max_simulation_depth):
                move = self.basic_move(position, to_move)
                if move is None:
                    return None
                position.place(move.co, to_move)
                placed.append(move.co)
                winner = self.winner_at(position, move.co)
                if winner is not None:
                    return winner
                to_move = to_move.opponent
            return None
        finally:
            for co in reversed(placed):
                position.remove(co)

    def search_stats(self) -> Dict[str, Any]:
        stats = super().search_stats()
        stats.update({
            "iterations": self.iterations,
            "breadth": self.breadth,
            "root_visits": self.last_root.visits if self.last_root else 0,
        })
        return stats

    def _log_stats(self, root: MCTSNode, move: Optional[Move]) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            top = sorted(root.children, key=lambda n: -n.visits)[:3]
            logger.debug(
                "MCTS: move=%s iterations=%d root_visits=%d top=%s",
                move.co if move else None,
                self.iterations,
                root.visits,
                ", ".join(
                    f"{n.co}:{n.wins}/{n.visits}" for n in top
                ),
            )