"""Zobrist hashing for square boards.

Each board dimension gets one table of ``dim * dim * 2`` random 64-bit keys,
built on first use and shared by every Position of that size. The hash of a
position is the XOR of the keys of its occupied cells, so placing and
removing the same mark are the same XOR.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

import numpy as np

from ..models import Mark


class ZobristHash:
    """Per-dimension key tables.

    ``ZobristHash(dim)`` is cheap; the table itself is built once per
    dimension under a lock and reused afterwards.
    """

    _tables: Dict[int, List[List[List[int]]]] = {}
    _lock = threading.Lock()
    _seed: Optional[int] = None

    def __init__(self, dim: int):
        self.dim = dim
        self.keys = self._table_for(dim)

    @classmethod
    def _table_for(cls, dim: int) -> List[List[List[int]]]:
        table = cls._tables.get(dim)
        if table is not None:
            return table
        with cls._lock:
            table = cls._tables.get(dim)
            if table is None:
                seed = None if cls._seed is None else cls._seed + dim
                rng = np.random.default_rng(seed)
                raw = rng.integers(
                    0,
                    np.iinfo(np.uint64).max,
                    size=(dim, dim, 2),
                    dtype=np.uint64,
                    endpoint=True,
                )
                table = raw.tolist()
                cls._tables[dim] = table
        return table

    @classmethod
    def reset(cls, seed: Optional[int] = None) -> None:
        """Drop every table; later tables derive from ``seed`` when given."""
        with cls._lock:
            cls._tables.clear()
            cls._seed = seed

    def key(self, row: int, col: int, mark: Mark) -> int:
        return self.keys[row][col][mark - 1]

    def compute(self, grid: List[List[int]]) -> int:
        """Full recomputation from a grid of marks."""
        h = 0
        for r, line in enumerate(grid):
            for c, cell in enumerate(line):
                if cell:
                    h ^= self.keys[r][c][cell - 1]
        return h
