"""
Shared pytest fixtures for gomoku_zero tests.

Every test gets its own evaluator and transposition store so cached entries
never leak between tests. Positions are built from plain (row, col, mark)
triples.
"""

from typing import Callable, Iterable, Tuple

import pytest

from gomoku_zero.ai.bounded_transposition_table import BoundedTranspositionTable
from gomoku_zero.ai.evaluator import ThreatEvaluator
from gomoku_zero.ai.move_ordering import CandidateGenerator
from gomoku_zero.ai.transposition_store import TranspositionStore
from gomoku_zero.core.position import Position
from gomoku_zero.models import AIConfig, Mark, SearchParams

Stone = Tuple[int, int, Mark]

B = Mark.BLACK
W = Mark.WHITE

# A full 5x5 board without five in a row anywhere.
FULL_5X5 = [
    [1, 1, 2, 2, 1],
    [2, 2, 1, 1, 2],
    [1, 1, 2, 2, 1],
    [2, 2, 1, 1, 2],
    [1, 1, 2, 2, 1],
]


@pytest.fixture
def evaluator() -> ThreatEvaluator:
    return ThreatEvaluator(BoundedTranspositionTable(100_000, name="patterns"))


@pytest.fixture
def store() -> TranspositionStore:
    return TranspositionStore(max_entries=100_000, strict=False)


@pytest.fixture
def candidates(evaluator, store) -> CandidateGenerator:
    return CandidateGenerator(evaluator, store)


@pytest.fixture
def make_position() -> Callable[..., Position]:
    """Factory: make_position([(r, c, Mark), ...], dim=15)."""

    def _make(stones: Iterable[Stone] = (), dim: int = 15, radius: int = 2) -> Position:
        position = Position(dim, radius=radius)
        for r, c, mark in stones:
            position.place((r, c), mark)
        return position

    return _make


@pytest.fixture
def make_config() -> Callable[..., AIConfig]:
    """Factory for AIConfig with search parameters as keyword arguments."""

    def _make(think_time: int = 10_000, seed: int = 7, **params) -> AIConfig:
        return AIConfig(
            think_time=think_time,
            rng_seed=seed,
            params=SearchParams(**params),
        )

    return _make


@pytest.fixture
def full_board() -> Position:
    return Position.from_grid(FULL_5X5)
