"""Threat taxonomy and line-pattern classification.

A cell is scored by reading the four lines through it (``linearize``) and
naming the runs of the player's marks found on each line (``classify``).
Each threat has a fixed weight; a five outweighs any sum of lesser threats,
so ``WIN`` doubles as the proven-win sentinel for every search.

Line windows:
    From the centre cell, walk up to five steps in each direction. The walk
    appends what it sees and stops after an opponent mark, after the second
    empty cell on that side, or at the board edge (recorded as an opponent
    mark). The centre always holds the player's mark, whatever the board has
    there.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Sequence, Tuple

from ..core.position import AXES, Co, Position
from ..models import Mark

LineSeq = Tuple[int, ...]

MAX_REACH = 5


class Threat(str, Enum):
    """Named patterns, most severe first."""
    FIVE = "five"
    STRAIGHT_FOUR = "straight_four"
    STRAIGHT_POKED_FOUR = "straight_poked_four"
    BLOCKED_FOUR = "blocked_four"
    BLOCKED_POKED_FOUR = "blocked_poked_four"
    STRAIGHT_THREE = "straight_three"
    STRAIGHT_POKED_THREE = "straight_poked_three"
    BLOCKED_THREE = "blocked_three"
    BLOCKED_POKED_THREE = "blocked_poked_three"
    STRAIGHT_TWO = "straight_two"
    STRAIGHT_POKED_TWO = "straight_poked_two"
    BLOCKED_TWO = "blocked_two"
    BLOCKED_POKED_TWO = "blocked_poked_two"
    NONE = "none"


THREAT_WEIGHTS: Dict[Threat, int] = {
    Threat.FIVE: 10**15,
    Threat.STRAIGHT_FOUR: 100_000,
    Threat.STRAIGHT_POKED_FOUR: 10_000,
    Threat.BLOCKED_FOUR: 10_000,
    Threat.BLOCKED_POKED_FOUR: 10_000,
    Threat.STRAIGHT_THREE: 5_000,
    Threat.STRAIGHT_POKED_THREE: 5_000,
    Threat.BLOCKED_THREE: 1_670,
    Threat.BLOCKED_POKED_THREE: 1_670,
    Threat.STRAIGHT_TWO: 1_500,
    Threat.STRAIGHT_POKED_TWO: 1_500,
    Threat.BLOCKED_TWO: 500,
    Threat.BLOCKED_POKED_TWO: 300,
    Threat.NONE: 0,
}

WIN: int = THREAT_WEIGHTS[Threat.FIVE]

# Smallest threat worth a deep look from the horizon extension.
INTERESTING_THRESHOLD: int = THREAT_WEIGHTS[Threat.BLOCKED_THREE]

# (blocked, poked, stones) -> threat
_BY_SHAPE: Dict[Tuple[bool, bool, int], Threat] = {
    (False, False, 4): Threat.STRAIGHT_FOUR,
    (False, True, 4): Threat.STRAIGHT_POKED_FOUR,
    (True, False, 4): Threat.BLOCKED_FOUR,
    (True, True, 4): Threat.BLOCKED_POKED_FOUR,
    (False, False, 3): Threat.STRAIGHT_THREE,
    (False, True, 3): Threat.STRAIGHT_POKED_THREE,
    (True, False, 3): Threat.BLOCKED_THREE,
    (True, True, 3): Threat.BLOCKED_POKED_THREE,
    (False, False, 2): Threat.STRAIGHT_TWO,
    (False, True, 2): Threat.STRAIGHT_POKED_TWO,
    (True, False, 2): Threat.BLOCKED_TWO,
    (True, True, 2): Threat.BLOCKED_POKED_TWO,
}


def weight(threat: Threat) -> int:
    return THREAT_WEIGHTS[threat]


def _explore(
    grid: List[List[int]], dim: int, r: int, c: int, dr: int, dc: int,
    opponent: int,
) -> List[int]:
    seq: List[int] = []
    empties = 0
    for step in range(1, MAX_REACH + 1):
        rr, cc = r + dr * step, c + dc * step
        if not (0 <= rr < dim and 0 <= cc < dim):
            seq.append(opponent)
            break
        cell = grid[rr][cc]
        seq.append(cell)
        if cell == 0:
            if empties:
                break
            empties += 1
        elif cell == opponent:
            break
    return seq


def linearize(position: Position, player: Mark, co: Co) -> List[LineSeq]:
    """The four line windows through ``co``, one per axis."""
    r, c = co
    opponent = int(player.opponent)
    grid, dim = position.grid, position.dim
    lines: List[LineSeq] = []
    for dr, dc in AXES:
        back = _explore(grid, dim, r, c, -dr, -dc, opponent)
        forth = _explore(grid, dim, r, c, dr, dc, opponent)
        back.reverse()
        back.append(int(player))
        back.extend(forth)
        lines.append(tuple(back))
    return lines


def _blocks(seq: Sequence[int], lo: int, hi: int, player: int) -> List[Tuple[int, int]]:
    """Inclusive (start, end) spans of consecutive player marks in seq[lo..hi]."""
    spans: List[Tuple[int, int]] = []
    start = -1
    for i in range(lo, hi + 1):
        if seq[i] == player:
            if start < 0:
                start = i
        elif start >= 0:
            spans.append((start, i - 1))
            start = -1
    if start >= 0:
        spans.append((start, hi))
    return spans


def _resolve(stones: int, poked: bool, blocked: bool) -> Threat | None:
    if stones >= 5:
        return None if poked else Threat.FIVE
    if stones < 2:
        return None
    return _BY_SHAPE[(blocked, poked, stones)]


def classify(seq: Sequence[int], player: Mark) -> Tuple[Threat, ...]:
    """Name the runs of ``player`` marks in one line window.

    A run is a block of consecutive marks, or two blocks separated by a
    single empty cell (a poked run). Neighbouring pairs may share a block.
    A run is blocked when it touches an opponent mark or the board edge.
    Runs of five or more with a gap are not threats in themselves; the
    longest block inside them is scored instead.
    """
    me = int(player)
    opponent = int(player.opponent)
    last = len(seq) - 1
    left_blocked = seq[0] == opponent
    right_blocked = seq[last] == opponent
    lo = 1 if left_blocked else 0
    hi = last - 1 if right_blocked else last

    if left_blocked and right_blocked and hi - lo + 1 < 5:
        return (Threat.NONE,)

    def is_blocked(start: int, end: int) -> bool:
        return (left_blocked and start == lo) or (right_blocked and end == hi)

    blocks = _blocks(seq, lo, hi, me)
    threats: List[Threat] = []
    joined = [False] * len(blocks)
    for i in range(len(blocks) - 1):
        (s1, e1), (s2, e2) = blocks[i], blocks[i + 1]
        if s2 - e1 != 2:
            continue
        joined[i] = joined[i + 1] = True
        stones = (e1 - s1 + 1) + (e2 - s2 + 1)
        threat = _resolve(stones, True, is_blocked(s1, e2))
        if threat is None and stones >= 5:
            s, e = max(blocks[i], blocks[i + 1], key=lambda b: b[1] - b[0])
            threat = _resolve(e - s + 1, False, is_blocked(s, e))
        if threat is not None:
            threats.append(threat)

    for (s, e), used in zip(blocks, joined):
        if used:
            continue
        threat = _resolve(e - s + 1, False, is_blocked(s, e))
        if threat is not None:
            threats.append(threat)

    return tuple(threats) if threats else (Threat.NONE,)
