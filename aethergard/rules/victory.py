"""Win detection: an exact run of five keystones.

A run is a maximal straight, gap-free line of one player's keystones along
a row, column, diagonal or anti-diagonal. Only a run of exactly
``WIN_LENGTH`` wins; six or more in a line is void, even though it contains
five consecutive keystones.
"""
from __future__ import annotations

from typing import List, Optional, Set

from ..board_manager import BoardManager
from ..models import BoardState, Player, Position
from .core import LINE_ORIENTATIONS, WIN_LENGTH

__all__ = ["check_win", "find_runs", "find_winning_line"]


def find_runs(board: BoardState, player: Player) -> List[List[Position]]:
    """Every maximal keystone run of length >= 2 for ``player``.

    Runs are reported once, starting from their first cell, ordered by
    start position (row-major) then orientation.
    """
    keystones = BoardManager.get_keystones(board, player)
    occupied: Set[Position] = set(keystones)
    runs: List[List[Position]] = []
    for start in keystones:
        for d_row, d_col in LINE_ORIENTATIONS:
            if start.offset(-d_row, -d_col) in occupied:
                continue
            run = [start]
            nxt = start.offset(d_row, d_col)
            while nxt in occupied:
                run.append(nxt)
                nxt = nxt.offset(d_row, d_col)
            if len(run) >= 2:
                runs.append(run)
    return runs


def find_winning_line(board: BoardState, player: Player) -> Optional[List[Position]]:
    """The first exact five-keystone run of ``player``, or None."""
    if len(BoardManager.get_keystones(board, player)) < WIN_LENGTH:
        return None
    for run in find_runs(board, player):
        if len(run) == WIN_LENGTH:
            return run
    return None


def check_win(board: BoardState, player: Player) -> bool:
    return find_winning_line(board, player) is not None
