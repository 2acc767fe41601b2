"""Pattern detection: bent triples and 2x2 cores.

All functions are pure reads of a ``BoardState``; empty results are valid
and nothing here raises for a well-formed board.
"""
from __future__ import annotations

from itertools import combinations
from typing import List, Sequence

from ..board_manager import BoardManager
from ..models import (
    BOARD_SIZE,
    BentTriple,
    BentTripleShape,
    BoardState,
    Core,
    Player,
    Position,
)
from .core import are_adjacent, manhattan_distance

__all__ = [
    "classify_bent_triple",
    "convertible_positions",
    "detect_bent_triples",
    "detect_cores",
    "detect_cores_touching",
    "is_bent_triple",
    "is_core_at",
]

# Every pair inside a bent triple is at most two steps apart.
_MAX_TRIPLE_SPAN = 2


def is_bent_triple(stones: Sequence[Position]) -> bool:
    """True iff exactly two of the three pairwise relations are adjacent.

    Three stones in a straight line qualify as well as the ㄱ/ㄴ shapes.
    """
    if len(stones) != 3 or len(set(stones)) != 3:
        return False
    first, second, third = stones
    adjacent_pairs = (
        are_adjacent(first, second)
        + are_adjacent(second, third)
        + are_adjacent(first, third)
    )
    return adjacent_pairs == 2


def classify_bent_triple(stones: Sequence[Position]) -> BentTripleShape:
    """Cosmetic shape label for a bent triple.

    The corner is the stone adjacent to both others. Collinear triples are
    ``STRAIGHT``; otherwise the triple is ``L`` (ㄱ family) when its
    vertical arm leaves the corner downwards and ``REVERSE_L`` (ㄴ family)
    when it leaves upwards.
    """
    for corner in stones:
        others = [stone for stone in stones if stone != corner]
        if len(others) == 2 and all(are_adjacent(corner, o) for o in others):
            arm_a, arm_b = others
            if arm_a.row == arm_b.row or arm_a.col == arm_b.col:
                return BentTripleShape.STRAIGHT
            vertical = arm_a if arm_a.col == corner.col else arm_b
            if vertical.row > corner.row:
                return BentTripleShape.L
            return BentTripleShape.REVERSE_L
    return BentTripleShape.STRAIGHT


def detect_bent_triples(board: BoardState, owner: Player) -> List[BentTriple]:
    """All bent triples among ``owner``'s conductors.

    Keystones never take part. Pairs further than two steps apart are
    pruned before the third stone is tried, which keeps the scan well below
    the full cubic enumeration on crowded boards without changing the
    result.
    """
    conductors = BoardManager.get_conductors(board, owner)
    triples: List[BentTriple] = []
    for i, j in combinations(range(len(conductors)), 2):
        a, b = conductors[i], conductors[j]
        if manhattan_distance(a, b) > _MAX_TRIPLE_SPAN:
            continue
        for k in range(j + 1, len(conductors)):
            c = conductors[k]
            if (
                manhattan_distance(a, c) > _MAX_TRIPLE_SPAN
                or manhattan_distance(b, c) > _MAX_TRIPLE_SPAN
            ):
                continue
            stones = (a, b, c)
            if is_bent_triple(stones):
                triples.append(
                    BentTriple(stones=stones, shape=classify_bent_triple(stones))
                )
    return triples


def convertible_positions(board: BoardState, owner: Player) -> List[Position]:
    """Unique stones belonging to any of ``owner``'s bent triples, row-major."""
    seen = set()
    for triple in detect_bent_triples(board, owner):
        seen.update(triple.stones)
    return sorted(seen, key=lambda p: (p.row, p.col))


def is_core_at(board: BoardState, owner: Player, row: int, col: int) -> bool:
    """True if the 2x2 square anchored at (row, col) is all ``owner``'s stones.

    Conductors and keystones both count.
    """
    if not (0 <= row < BOARD_SIZE - 1 and 0 <= col < BOARD_SIZE - 1):
        return False
    cells = board.cells
    return all(
        cells[r][c].owner is owner
        for r in (row, row + 1)
        for c in (col, col + 1)
    )


def detect_cores(board: BoardState, owner: Player) -> List[Core]:
    """Every core of ``owner`` on the board, ordered by anchor (row-major)."""
    return [
        Core.at(row, col)
        for row in range(BOARD_SIZE - 1)
        for col in range(BOARD_SIZE - 1)
        if is_core_at(board, owner, row, col)
    ]


def detect_cores_touching(
    board: BoardState, owner: Player, position: Position
) -> List[Core]:
    """Cores of ``owner`` that include ``position``.

    Only the (at most four) anchors whose square contains ``position`` are
    examined. Results are ordered by anchor, matching ``detect_cores``.
    """
    anchors = sorted(
        {
            (position.row - d_row, position.col - d_col)
            for d_row in (1, 0)
            for d_col in (1, 0)
        }
    )
    return [
        Core.at(row, col)
        for row, col in anchors
        if is_core_at(board, owner, row, col)
    ]
