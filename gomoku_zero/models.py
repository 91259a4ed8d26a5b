"""
Data models for Gomoku Zero
Board marks, request parameters and the serialized move history
"""

from enum import Enum, IntEnum
from typing import NamedTuple, Optional, Tuple

from pydantic import BaseModel, Field

from .errors import InvalidStateError


class Mark(IntEnum):
    """Content of a board cell. BLACK moves first."""
    EMPTY = 0
    BLACK = 1
    WHITE = 2

    @property
    def opponent(self) -> "Mark":
        if self is Mark.EMPTY:
            raise InvalidStateError("EMPTY has no opponent")
        return Mark.WHITE if self is Mark.BLACK else Mark.BLACK

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {Mark.EMPTY: '-', Mark.BLACK: '*', Mark.WHITE: 'o'}


class SearchKind(str, Enum):
    """Available move-selection strategies"""
    BASIC = "basic"
    ALPHA_BETA = "alpha_beta"
    ALPHA_BETA_HORIZON = "alpha_beta_horizon"
    MONTE_CARLO = "monte_carlo"


class Move(NamedTuple):
    """A coordinate and its score from the mover's perspective.

    ``co`` is ``None`` only for leaf values produced inside a search; moves
    returned to callers always carry a coordinate.
    """
    co: Optional[Tuple[int, int]]
    score: int


class Coordinate(BaseModel):
    """Board coordinate, 0-indexed"""
    row: int = Field(ge=0)
    col: int = Field(ge=0)

    class Config:
        frozen = True

    def to_tuple(self) -> Tuple[int, int]:
        return (self.row, self.col)

    def to_key(self) -> str:
        """Convert coordinate to string key"""
        return f"{self.row},{self.col}"


class HistoryEntry(BaseModel):
    """One placement in an ordered move history"""
    row: int = Field(ge=0)
    col: int = Field(ge=0)
    mark: Mark

    class Config:
        frozen = True


class SearchParams(BaseModel):
    """Per-request search knobs.

    ``rollout_probability`` is a percentage. ``rollout_threshold`` defaults
    to the blocked-three weight, the smallest threat worth a deep look.
    """
    depth: int = Field(4, ge=1, le=20)
    breadth: int = Field(6, ge=1, le=225)
    rollout_probability: int = Field(
        20, ge=0, le=100, alias="rolloutProbability"
    )
    rollout_threshold: int = Field(1670, ge=0, alias="rolloutThreshold")
    rollout_depth: int = Field(10, ge=1, le=30, alias="rolloutDepth")
    mc_breadth: int = Field(8, ge=1, le=225, alias="mcBreadth")
    mc_simulation_depth: int = Field(5, ge=0, le=225, alias="mcSimulationDepth")
    mc_random_expansion: bool = Field(False, alias="mcRandomExpansion")
    randomized_selection: bool = Field(False, alias="randomizedSelection")

    class Config:
        populate_by_name = True


class AIConfig(BaseModel):
    """AI configuration"""
    think_time: Optional[int] = Field(None, ge=0, alias="thinkTime")
    rng_seed: Optional[int] = Field(None, alias="rngSeed")
    params: SearchParams = Field(default_factory=SearchParams)

    class Config:
        populate_by_name = True
