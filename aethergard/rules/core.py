"""Rule constants and geometric primitives shared by the rules modules."""
from __future__ import annotations

from typing import Dict, Tuple

from ..models import BOARD_SIZE, Direction, Position

__all__ = [
    "BOARD_SIZE",
    "RESONANCE_RANGE",
    "WIN_LENGTH",
    "DIRECTION_ORDER",
    "DIRECTION_VECTORS",
    "LINE_ORIENTATIONS",
    "are_adjacent",
    "manhattan_distance",
]

# Maximum number of steps a resonance ray travels from the focal cell.
RESONANCE_RANGE = 5

# Exact keystone run length that wins; longer runs are void.
WIN_LENGTH = 5

DIRECTION_ORDER: Tuple[Direction, ...] = (
    Direction.UP,
    Direction.DOWN,
    Direction.LEFT,
    Direction.RIGHT,
)

DIRECTION_VECTORS: Dict[Direction, Tuple[int, int]] = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}

# (d_row, d_col) steps for row, column, diagonal and anti-diagonal lines.
LINE_ORIENTATIONS: Tuple[Tuple[int, int], ...] = (
    (0, 1),
    (1, 0),
    (1, 1),
    (1, -1),
)


def manhattan_distance(a: Position, b: Position) -> int:
    return abs(a.row - b.row) + abs(a.col - b.col)


def are_adjacent(a: Position, b: Position) -> bool:
    """Orthogonal neighbours only; diagonal cells are not adjacent."""
    return manhattan_distance(a, b) == 1
