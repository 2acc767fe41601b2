"""Move history: append-with-truncation and snapshot restoration.

The cursor (``EngineState.history_index``) is the index of the last applied
move, ``-1`` when no move is applied. The position shown at cursor ``k`` is
``move_history[k].current_board``, which is also the
``previous_board`` of move ``k + 1``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

from .board_manager import BoardManager
from .models import GamePhase, GameStatus, Move, MoveType, Player

__all__ = ["append_move", "opens_resonance", "restore_fields"]


def append_move(
    history: Sequence[Move], cursor: int, move: Move
) -> Tuple[List[Move], int]:
    """Append ``move`` after ``cursor``, discarding any redo branch."""
    new_history = list(history[: cursor + 1])
    new_history.append(move)
    return new_history, len(new_history) - 1


def opens_resonance(move: Move) -> bool:
    """True for a placement that completed a core and awaits resonance."""
    return move.move_type is MoveType.PLACE and bool(move.formed_cores)


def restore_fields(history: Sequence[Move], cursor: int) -> Dict[str, Any]:
    """EngineState field values for the position at ``cursor``.

    Restoring the result of a core-completing placement reopens the
    resonance sub-phase for the same player; any other move hands the turn
    to the opponent unless it won the game.
    """
    if cursor < 0:
        return {
            "board": BoardManager.create_empty_board(),
            "current_player": Player.BLACK,
            "game_phase": GamePhase.PLACING,
            "game_status": GameStatus.PLAYING,
            "pending_cores": [],
            "selected_core": None,
            "core_player": None,
        }

    move = history[cursor]
    fields: Dict[str, Any] = {
        "board": move.current_board,
        "game_status": move.game_status,
        "selected_core": None,
    }
    if opens_resonance(move):
        fields.update(
            current_player=move.player,
            game_phase=GamePhase.RESONATING,
            pending_cores=list(move.formed_cores),
            core_player=move.player,
        )
    else:
        won = move.game_status is not GameStatus.PLAYING
        fields.update(
            current_player=move.player if won else move.player.opponent,
            game_phase=GamePhase.PLACING,
            pending_cores=[],
            core_player=None,
        )
    return fields
