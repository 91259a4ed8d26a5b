"""
Mutable board position with incremental hashing.

A Position is owned by one caller at a time. Searches borrow it and use
``place``/``remove`` as a stack, undoing every mark they add before they
return. The Zobrist hash, the occupancy count and the active-cell map are all
maintained incrementally so that each make/unmake is O(1) apart from the
small neighbourhood update.
"""

from __future__ import annotations

from contextlib import contextmanager
from itertools import chain
from typing import Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from ..config import ACTIVE_RADIUS
from ..errors import InvalidCoordinateError, InvalidStateError
from ..models import HistoryEntry, Mark
from .zobrist import ZobristHash

Co = Tuple[int, int]

MIN_DIM = 5

# Horizontal, vertical, diagonal, anti-diagonal.
AXES: Tuple[Co, ...] = ((0, 1), (1, 0), (1, 1), (1, -1))


class PositionKey(NamedTuple):
    """Immutable value snapshot of a position.

    Used as a cache key when exact equality is required; two keys are equal
    only when every cell matches.
    """
    dim: int
    zobrist_hash: int
    cells: bytes

    def matches(self, other: "PositionKey", strict: bool = True) -> bool:
        if self.dim != other.dim or self.zobrist_hash != other.zobrist_hash:
            return False
        return not strict or self.cells == other.cells


class Position:
    """N x N grid of marks plus the bookkeeping searches rely on."""

    def __init__(self, dim: int = 15, radius: int = ACTIVE_RADIUS):
        if dim < MIN_DIM:
            raise InvalidStateError(
                f"Board dimension must be at least {MIN_DIM}",
                context={"dim": dim},
            )
        if radius < 1:
            raise InvalidStateError(
                "Active radius must be positive", context={"radius": radius}
            )
        self.dim = dim
        self.radius = radius
        self.grid: List[List[int]] = [[0] * dim for _ in range(dim)]
        self._zobrist = ZobristHash(dim)
        self._hash = 0
        self._occupied = 0
        # Number of marks within ``radius`` of each cell (Chebyshev).
        self._neighbors: List[List[int]] = [[0] * dim for _ in range(dim)]
        self.history: List[Co] = []

    # ------------------------------------------------------------------
    # Construction / serialization
    # ------------------------------------------------------------------

    @classmethod
    def from_grid(
        cls, grid: Sequence[Sequence[int]], radius: int = ACTIVE_RADIUS
    ) -> "Position":
        """Load a square grid of marks.

        The resulting history lists the marks in row-major order, which is
        enough for the last-move bookkeeping but not a real game record.
        """
        dim = len(grid)
        if any(len(line) != dim for line in grid):
            raise InvalidStateError(
                "Grid must be square", context={"rows": dim}
            )
        position = cls(dim, radius=radius)
        for r, line in enumerate(grid):
            for c, cell in enumerate(line):
                try:
                    mark = Mark(cell)
                except ValueError as e:
                    raise InvalidStateError(
                        f"Unknown mark {cell!r}", context={"row": r, "col": c}
                    ) from e
                if mark is not Mark.EMPTY:
                    position.place((r, c), mark)
        return position

    @classmethod
    def from_history(
        cls,
        dim: int,
        entries: Iterable[HistoryEntry],
        radius: int = ACTIVE_RADIUS,
    ) -> "Position":
        position = cls(dim, radius=radius)
        for entry in entries:
            position.place((entry.row, entry.col), entry.mark)
        return position

    def to_history(self) -> List[HistoryEntry]:
        """Ordered placements that rebuild this position."""
        return [
            HistoryEntry(row=r, col=c, mark=Mark(self.grid[r][c]))
            for r, c in self.history
        ]

    def copy(self) -> "Position":
        clone = Position(self.dim, radius=self.radius)
        clone.grid = [list(line) for line in self.grid]
        clone._neighbors = [list(line) for line in self._neighbors]
        clone._hash = self._hash
        clone._occupied = self._occupied
        clone.history = list(self.history)
        return clone

    def snapshot(self) -> PositionKey:
        return PositionKey(
            self.dim, self._hash, bytes(chain.from_iterable(self.grid))
        )

    def to_numpy(self) -> np.ndarray:
        return np.array(self.grid, dtype=np.int8)

    def active_map(self) -> np.ndarray:
        """Boolean map of the cells candidate generation looks at."""
        occupied = self.to_numpy() != 0
        near = np.array(self._neighbors, dtype=np.int32) > 0
        return near & ~occupied

    # ------------------------------------------------------------------
    # Make / unmake
    # ------------------------------------------------------------------

    def _check_bounds(self, co: Co) -> None:
        r, c = co
        if not (0 <= r < self.dim and 0 <= c < self.dim):
            raise InvalidCoordinateError(
                "Coordinate outside the board", row=r, col=c, dim=self.dim
            )

    def place(self, co: Co, mark: Mark) -> None:
        self._check_bounds(co)
        r, c = co
        if mark == Mark.EMPTY:
            raise InvalidCoordinateError(
                "Cannot place an empty mark", row=r, col=c, dim=self.dim
            )
        if self.grid[r][c]:
            raise InvalidCoordinateError(
                "Cell already occupied", row=r, col=c, dim=self.dim
            )
        self.grid[r][c] = int(mark)
        self._hash ^= self._zobrist.keys[r][c][mark - 1]
        self._occupied += 1
        self.history.append(co)
        self._bump_neighbors(r, c, 1)

    def remove(self, co: Co) -> Mark:
        """Clear a cell and return the mark it held."""
        self._check_bounds(co)
        r, c = co
        cell = self.grid[r][c]
        if not cell:
            raise InvalidCoordinateError(
                "Cell already empty", row=r, col=c, dim=self.dim
            )
        self.grid[r][c] = 0
        self._hash ^= self._zobrist.keys[r][c][cell - 1]
        self._occupied -= 1
        if self.history and self.history[-1] == co:
            self.history.pop()
        else:
            self.history.remove(co)
        self._bump_neighbors(r, c, -1)
        return Mark(cell)

    @contextmanager
    def placed(self, co: Co, mark: Mark) -> Iterator["Position"]:
        """Place ``mark`` for the duration of the block."""
        self.place(co, mark)
        try:
            yield self
        finally:
            self.remove(co)

    def _bump_neighbors(self, r: int, c: int, delta: int) -> None:
        rad = self.radius
        lo_r, hi_r = max(0, r - rad), min(self.dim - 1, r + rad)
        lo_c, hi_c = max(0, c - rad), min(self.dim - 1, c + rad)
        for rr in range(lo_r, hi_r + 1):
            line = self._neighbors[rr]
            for cc in range(lo_c, hi_c + 1):
                line[cc] += delta

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def zobrist_hash(self) -> int:
        return self._hash

    @property
    def last_move(self) -> Optional[Co]:
        return self.history[-1] if self.history else None

    @property
    def occupied(self) -> int:
        return self._occupied

    def __getitem__(self, co: Co) -> Mark:
        self._check_bounds(co)
        return Mark(self.grid[co[0]][co[1]])

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.dim and 0 <= c < self.dim

    def is_empty_board(self) -> bool:
        return self._occupied == 0

    def is_full(self) -> bool:
        return self._occupied == self.dim * self.dim

    def is_active(self, r: int, c: int) -> bool:
        return not self.grid[r][c] and self._neighbors[r][c] > 0

    def active_cells(self) -> Iterator[Co]:
        """Empty cells near a mark, row-major."""
        for r in range(self.dim):
            grid_line = self.grid[r]
            near_line = self._neighbors[r]
            for c in range(self.dim):
                if near_line[c] and not grid_line[c]:
                    yield (r, c)

    def empty_cells(self) -> Iterator[Co]:
        for r in range(self.dim):
            for c in range(self.dim):
                if not self.grid[r][c]:
                    yield (r, c)

    def center(self) -> Co:
        return (self.dim // 2, self.dim // 2)

    def has_five(self, co: Co) -> bool:
        """True if the mark at ``co`` is part of five or more in a row."""
        r, c = co
        mark = self.grid[r][c]
        if not mark:
            return False
        for dr, dc in AXES:
            count = 1
            for sign in (1, -1):
                rr, cc = r + sign * dr, c + sign * dc
                while self.in_bounds(rr, cc) and self.grid[rr][cc] == mark:
                    count += 1
                    rr += sign * dr
                    cc += sign * dc
            if count >= 5:
                return True
        return False

    def winner(self) -> Optional[Mark]:
        """Color owning a five anywhere on the board, if any."""
        for co in self.history:
            if self.has_five(co):
                return Mark(self.grid[co[0]][co[1]])
        return None

    def __str__(self) -> str:
        return "\n".join(
            " ".join(Mark(cell).symbol for cell in line) for line in self.grid
        )

    def __repr__(self) -> str:
        return (
            f"Position(dim={self.dim}, occupied={self._occupied}, "
            f"hash={self._hash:#018x})"
        )
