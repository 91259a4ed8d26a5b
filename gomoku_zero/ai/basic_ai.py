"""
Basic AI for Gomoku Zero
One-ply greedy policy: win, else block, else the stronger of attack and defence
"""

import logging
from typing import Optional

from ..core.position import Position
from ..models import Move
from .base import BaseAI, SearchState

logger = logging.getLogger(__name__)


class BasicAI(BaseAI):
    """Greedy policy; also the fallback and playout policy of the other searches."""

    def select_move(self, position: Position) -> Optional[Move]:
        self.begin_search()
        move = self.basic_move(position, self.player)
        self.state = SearchState.COMPLETED
        logger.debug(
            "BasicAI: move=%s score=%s", move.co if move else None,
            move.score if move else None,
        )
        return move
