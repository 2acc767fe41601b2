"""Resonance propagation from a focal stone of a completed core.

Activation converts the focal stone, then casts one ray in each cardinal
direction. A ray travels at most ``RESONANCE_RANGE`` steps and:

- stops, unrecorded, when it would leave the board;
- passes through cells of the activating core without recording or
  converting them;
- records and converts the first of the owner's conductors it meets, then
  stops;
- stops, unrecorded, at any other stone (opponent stones and the owner's
  own keystones);
- records empty cells and keeps going.

So an activation converts at most one stone per direction plus the focal
stone.
"""
from __future__ import annotations

import logging
from typing import List, Tuple

from ..board_manager import BoardManager
from ..errors import RulesViolationError
from ..models import BoardState, Core, Direction, Player, Position, StoneType
from .core import DIRECTION_ORDER, DIRECTION_VECTORS, RESONANCE_RANGE

logger = logging.getLogger(__name__)

__all__ = ["activate_resonance", "core_owner", "propagate_resonance"]


def core_owner(board: BoardState, core: Core) -> Player:
    """Owner of ``core``, taken from its first stone.

    Raises:
        RulesViolationError: if the four cells are not one owner's stones.
    """
    owner = BoardManager.get_stone(board, core.positions[0]).owner
    if owner is None or any(
        BoardManager.get_stone(board, pos).owner is not owner
        for pos in core.positions
    ):
        raise RulesViolationError(
            "Core cells are not all stones of a single player",
            rule_ref="core-same-owner",
            context={"anchor": core.anchor.to_key()},
        )
    return owner


def propagate_resonance(
    board: BoardState,
    start: Position,
    direction: Direction,
    core: Core,
    owner: Player,
) -> List[Position]:
    """Walk one ray from ``start`` and return the positions it records.

    ``board`` is only read; conversion of the final conductor is left to
    the caller.
    """
    d_row, d_col = DIRECTION_VECTORS[direction]
    conductor = StoneType.conductor_for(owner)
    path: List[Position] = []
    current = start
    for _ in range(RESONANCE_RANGE):
        current = current.offset(d_row, d_col)
        if not BoardManager.is_valid_position(current):
            break
        if core.contains(current):
            continue
        stone = board.cells[current.row][current.col]
        if stone is conductor:
            path.append(current)
            break
        if stone is not StoneType.EMPTY:
            break
        path.append(current)
    return path


def activate_resonance(
    board: BoardState, core: Core, focus_position: Position
) -> Tuple[BoardState, List[List[Position]]]:
    """Run a resonance from ``focus_position`` of ``core``.

    Returns a new board (``board`` itself is untouched) and the four ray
    paths in up, down, left, right order.

    Raises:
        RulesViolationError: if the focus is not one of the core's cells or
            the core is not a single owner's 2x2 square.
    """
    if not core.contains(focus_position):
        raise RulesViolationError(
            "Focus position must be one of the core's cells",
            rule_ref="focus-in-core",
            context={"focus": focus_position.to_key()},
        )
    owner = core_owner(board, core)
    conductor = StoneType.conductor_for(owner)
    keystone = StoneType.keystone_for(owner)

    new_board = BoardManager.clone(board)
    cells = new_board.cells
    if cells[focus_position.row][focus_position.col] is conductor:
        cells[focus_position.row][focus_position.col] = keystone

    paths: List[List[Position]] = []
    for direction in DIRECTION_ORDER:
        path = propagate_resonance(new_board, focus_position, direction, core, owner)
        if path:
            end = path[-1]
            if cells[end.row][end.col] is conductor:
                cells[end.row][end.col] = keystone
        paths.append(path)

    logger.debug(
        "Resonance from %s (%s): path lengths %s",
        focus_position.to_key(),
        owner.value,
        [len(p) for p in paths],
    )
    return new_board, paths
