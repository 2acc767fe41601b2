"""Board-level helpers for the Aethergard rules engine.

All helpers are static and side-effect free towards their inputs: boards
handed in are never mutated, and every mutation happens on a fresh clone
that the caller owns exclusively. Snapshots already stored in the move
history therefore stay valid forever.
"""
from __future__ import annotations

import hashlib
from typing import Dict, Iterator, List, Mapping

from .errors import OutOfBoundsError
from .models import (
    BOARD_SIZE,
    BoardState,
    Player,
    Position,
    StoneCounts,
    StoneType,
)

__all__ = ["BoardManager"]


class BoardManager:
    """Helper for board-level operations.

    Provides:

    - creation, bounds checks and cell lookup,
    - stone enumeration by owner and kind,
    - clone-then-mutate updates used by every rules transition, and
    - diffing and hashing for event reporting and determinism checks.
    """

    @staticmethod
    def create_empty_board() -> BoardState:
        return BoardState(
            cells=[
                [StoneType.EMPTY for _ in range(BOARD_SIZE)]
                for _ in range(BOARD_SIZE)
            ]
        )

    @staticmethod
    def is_valid_position(position: Position) -> bool:
        """Return True if ``position`` lies inside the 17x17 board."""
        return 0 <= position.row < BOARD_SIZE and 0 <= position.col < BOARD_SIZE

    @staticmethod
    def require_valid_position(position: Position) -> None:
        if not BoardManager.is_valid_position(position):
            raise OutOfBoundsError(
                f"Position {position.to_key()} is outside the "
                f"{BOARD_SIZE}x{BOARD_SIZE} board",
                row=position.row,
                col=position.col,
            )

    @staticmethod
    def get_stone(board: BoardState, position: Position) -> StoneType:
        """Return the stone at ``position``.

        Raises:
            OutOfBoundsError: if ``position`` is off the board.
        """
        BoardManager.require_valid_position(position)
        return board.cells[position.row][position.col]

    @staticmethod
    def is_empty(board: BoardState, position: Position) -> bool:
        return BoardManager.get_stone(board, position) is StoneType.EMPTY

    @staticmethod
    def iter_positions() -> Iterator[Position]:
        """All board positions in row-major order."""
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                yield Position(row=row, col=col)

    @staticmethod
    def get_positions(board: BoardState, stone_type: StoneType) -> List[Position]:
        """Every position holding ``stone_type``, row-major."""
        return [
            Position(row=row, col=col)
            for row, cells in enumerate(board.cells)
            for col, stone in enumerate(cells)
            if stone is stone_type
        ]

    @staticmethod
    def get_conductors(board: BoardState, player: Player) -> List[Position]:
        return BoardManager.get_positions(board, StoneType.conductor_for(player))

    @staticmethod
    def get_keystones(board: BoardState, player: Player) -> List[Position]:
        return BoardManager.get_positions(board, StoneType.keystone_for(player))

    @staticmethod
    def get_empty_positions(board: BoardState) -> List[Position]:
        return BoardManager.get_positions(board, StoneType.EMPTY)

    @staticmethod
    def clone(board: BoardState) -> BoardState:
        """Deep copy of ``board``; rows are copied, never shared."""
        return BoardState.model_construct(
            cells=[list(cells) for cells in board.cells]
        )

    @staticmethod
    def with_stones(
        board: BoardState, changes: Mapping[Position, StoneType]
    ) -> BoardState:
        """Return a clone of ``board`` with ``changes`` applied.

        All positions are bounds-checked before the clone is touched.
        """
        for position in changes:
            BoardManager.require_valid_position(position)
        new_board = BoardManager.clone(board)
        for position, stone in changes.items():
            new_board.cells[position.row][position.col] = stone
        return new_board

    @staticmethod
    def changed_positions(before: BoardState, after: BoardState) -> List[Position]:
        """Positions whose stone differs between two boards, row-major."""
        return [
            Position(row=row, col=col)
            for row in range(BOARD_SIZE)
            for col in range(BOARD_SIZE)
            if before.cells[row][col] is not after.cells[row][col]
        ]

    @staticmethod
    def count_stones(board: BoardState) -> StoneCounts:
        counts: Dict[StoneType, int] = {stone: 0 for stone in StoneType}
        for cells in board.cells:
            for stone in cells:
                counts[stone] += 1
        return counts

    @staticmethod
    def hash_board(board: BoardState) -> str:
        """Canonical digest of the stones on ``board``.

        Used by determinism tests and debug logging to compare snapshots
        without dumping the whole grid.
        """
        encoded = "/".join(
            "".join(_STONE_CODES[stone] for stone in cells)
            for cells in board.cells
        )
        return hashlib.sha256(encoded.encode("ascii")).hexdigest()[:16]


_STONE_CODES = {
    StoneType.EMPTY: ".",
    StoneType.BLACK_CONDUCTOR: "b",
    StoneType.WHITE_CONDUCTOR: "w",
    StoneType.BLACK_KEYSTONE: "B",
    StoneType.WHITE_KEYSTONE: "W",
}
