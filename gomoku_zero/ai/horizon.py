"""Horizon extension for the alpha-beta search.

A fixed-depth search cannot see a four that appears one ply past its leaves.
This leaf hook looks at the move that produced each leaf; when that move
created a sharp threat for either color it may run a narrow secondary
search that only considers threatening candidates, and use that result as
the leaf value.

At most one secondary search runs at a time: while one is in flight, leaves
inside it are scored statically.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, List

from ..core.position import Position
from ..models import Mark, Move
from .threats import INTERESTING_THRESHOLD

if TYPE_CHECKING:
    from .minimax_ai import MinimaxAI

logger = logging.getLogger(__name__)


class HorizonStatus(str, Enum):
    SEARCH = "search"
    KILL = "kill"


class HorizonExtension:
    """Leaf hook that extends sharp leaves with a threat-only search.

    Args:
        probability: Percent chance (0-100) that an eligible leaf is extended
        threshold: Minimum threat weight at the leaf's last move
        depth: Depth of the secondary search
    """

    def __init__(
        self,
        probability: int = 20,
        threshold: int = INTERESTING_THRESHOLD,
        depth: int = 10,
    ):
        self.probability = probability
        self.threshold = threshold
        self.depth = depth
        self.status = HorizonStatus.SEARCH
        self.rollouts = 0

    @property
    def in_flight(self) -> bool:
        return self.status is HorizonStatus.KILL

    def leaf_value(
        self,
        search: "MinimaxAI",
        position: Position,
        score: int,
        alpha: float,
        beta: float,
        player: Mark,
    ) -> int:
        if self.in_flight or not search.should_roll(self.probability):
            return score
        co = position.last_move
        if co is None:
            return score
        magnitude = search.evaluator.threat_magnitude(position, co)
        if magnitude <= self.threshold:
            return score

        self.status = HorizonStatus.KILL
        self.rollouts += 1
        try:
            extended = search.search(position, self.depth, player, alpha, beta)
        finally:
            self.status = HorizonStatus.SEARCH
        if extended is not None and extended.score not in (float("inf"), float("-inf")):
            logger.debug(
                "Horizon extension at %s: %d -> %s", co, score, extended.score
            )
            return int(extended.score)
        return score

    def filter_candidates(self, moves: List[Move]) -> List[Move]:
        if self.status is HorizonStatus.KILL:
            return [m for m in moves if m.score > self.threshold]
        return moves
