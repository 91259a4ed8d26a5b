"""
Base AI class for Gomoku Zero
Abstract base class that every search strategy inherits from
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, TypeVar
import random
import time

from ..config import DEFAULT_THINK_TIME_MS
from ..core.position import Co, Position
from ..models import AIConfig, Mark, Move
from .evaluator import ThreatEvaluator, get_default_evaluator
from .move_ordering import CandidateGenerator
from .threats import WIN
from .transposition_store import TranspositionStore, get_default_store

T = TypeVar("T")


class SearchState(str, Enum):
    """Lifecycle of a single select_move call"""
    IDLE = "idle"
    SEARCHING = "searching"
    TIMED_OUT = "timed_out"
    TERMINAL = "terminal"
    COMPLETED = "completed"


def derive_seed(player: Mark) -> int:
    """
    Deterministic fallback RNG seed for callers that do not supply one.

    Mixes the player color into a 32-bit value so that two engines playing
    each other do not share a random stream.
    """
    return int(((int(player) * 97_911) ^ 1_000_003) & 0xFFFFFFFF)


def next_to_move(position: Position) -> Mark:
    """Side to move, assuming BLACK opened and colors alternated."""
    last = position.last_move
    if last is None:
        return Mark.BLACK
    return Mark(position.grid[last[0]][last[1]]).opponent


class BaseAI(ABC):
    """Abstract base class for all search strategies.

    Every strategy shares the same capabilities: candidate generation,
    cached heuristic evaluation, the greedy basic policy used as a fallback
    and as a playout policy, and a cooperative time budget.
    """

    def __init__(
        self,
        player: Mark,
        config: Optional[AIConfig] = None,
        evaluator: Optional[ThreatEvaluator] = None,
        store: Optional[TranspositionStore] = None,
    ):
        """
        Initialize AI player

        Args:
            player: The color this AI searches for
            config: AI configuration settings
            evaluator: Threat evaluator; the process-wide one by default
            store: Transposition caches; the process-wide ones by default
        """
        self.player = player
        self.config = config or AIConfig()
        self.params = self.config.params
        self.evaluator = evaluator or get_default_evaluator()
        self.store = store or get_default_store()
        self.candidates = CandidateGenerator(self.evaluator, self.store)

        if self.config.rng_seed is not None:
            self.rng_seed: int = int(self.config.rng_seed)
        else:
            self.rng_seed = derive_seed(player)
        self.rng: random.Random = random.Random(self.rng_seed)

        think_time = self.config.think_time
        if think_time is None:
            think_time = DEFAULT_THINK_TIME_MS
        self.time_limit: float = think_time / 1000.0
        self.start_time: float = 0.0
        self.nodes_visited: int = 0
        self.state: SearchState = SearchState.IDLE

    @abstractmethod
    def select_move(self, position: Position) -> Optional[Move]:
        """
        Select the best move for ``self.player``

        The position is borrowed: marks may be placed and removed during the
        search, but it is returned unchanged.

        Returns:
            Selected move, or None only when the board is full
        """

    def evaluate_position(self, position: Position) -> int:
        """Heuristic value from this AI's perspective (positive is good)."""
        return self.heuristic_value(position)

    # ------------------------------------------------------------------
    # Budget
    # ------------------------------------------------------------------

    def begin_search(self) -> None:
        self.start_time = time.time()
        self.nodes_visited = 0
        self.state = SearchState.SEARCHING

    def elapsed(self) -> float:
        return time.time() - self.start_time

    def is_timed_out(self) -> bool:
        return self.elapsed() > self.time_limit

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def heuristic_value(self, position: Position, perspective: Optional[Mark] = None) -> int:
        """Black score minus white score, signed for ``perspective``."""
        key = self.store.key(position)
        score = self.store.get_heuristic(key)
        if score is None:
            black = self.evaluator.evaluate_board(position, Mark.BLACK)
            white = self.evaluator.evaluate_board(position, Mark.WHITE)
            score = black - white
            self.store.put_heuristic(key, score)
        if (perspective or self.player) is Mark.BLACK:
            return score
        return -score

    def has_winner(self, position: Position) -> Optional[Mark]:
        black = self.evaluator.evaluate_board(position, Mark.BLACK)
        white = self.evaluator.evaluate_board(position, Mark.WHITE)
        if black >= WIN or white >= WIN:
            return Mark.BLACK if black > white else Mark.WHITE
        return None

    def winner_at(self, position: Position, co: Co) -> Optional[Mark]:
        """Color that completed a five with the mark at ``co``, if any."""
        mark = Mark(position.grid[co[0]][co[1]])
        if mark is Mark.EMPTY:
            return None
        if self.evaluator.evaluate(position, mark, co) >= WIN:
            return mark
        return None

    # ------------------------------------------------------------------
    # Basic policy
    # ------------------------------------------------------------------

    def basic_move(self, position: Position, player: Mark) -> Optional[Move]:
        """
        Greedy one-ply choice for ``player``.

        Complete a five if possible, otherwise block the opponent's five,
        otherwise take whichever of the best attacking and best defending
        cells scores higher (defending on ties).
        """
        offensive = self.candidates.sorted_moves(position, player, 1)
        defensive = self.candidates.sorted_moves(position, player.opponent, 1)
        if not offensive or not defensive:
            return self._any_move(position)
        attack, defend = offensive[0], defensive[0]
        if attack.score >= WIN:
            return attack
        if defend.score >= WIN:
            return defend
        return attack if attack.score > defend.score else defend

    def _any_move(self, position: Position) -> Optional[Move]:
        if position.is_empty_board():
            return Move(position.center(), 0)
        for co in position.empty_cells():
            return Move(co, 0)
        return None

    def rollout(self, position: Position, depth: int, player: Optional[Mark] = None) -> int:
        """
        Play up to ``depth`` basic-policy moves and return the resulting
        heuristic value. Every move is undone before returning.
        """
        to_move = player or next_to_move(position)
        placed: List[Co] = []
        try:
            for _ in range(depth):
                move = self.basic_move(position, to_move)
                if move is None:
                    break
                position.place(move.co, to_move)
                placed.append(move.co)
                if self.winner_at(position, move.co) is not None:
                    break
                to_move = to_move.opponent
            return self.heuristic_value(position)
        finally:
            for co in reversed(placed):
                position.remove(co)

    # ------------------------------------------------------------------
    # Randomness helpers
    # ------------------------------------------------------------------

    def get_random_element(self, items: List[T]) -> Optional[T]:
        if not items:
            return None
        return self.rng.choice(items)

    def shuffle_array(self, items: List[T]) -> List[T]:
        shuffled = list(items)
        self.rng.shuffle(shuffled)
        return shuffled

    def should_roll(self, percent: int) -> bool:
        """True with probability ``percent``/100."""
        return percent > 0 and self.rng.randrange(100) < percent

    def search_stats(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "nodes_visited": self.nodes_visited,
            "elapsed_ms": int(self.elapsed() * 1000) if self.start_time else 0,
            "candidates": self.candidates.stats(),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(player={self.player.name}, time_limit={self.time_limit}s)"
