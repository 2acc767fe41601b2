"""Aethergard rules engine.

Board model, pattern detection, resonance, win checking and the
turn/history engine for the 17x17 conductor/keystone game.
"""

from .board_manager import BoardManager
from .game_engine import GameEngine
from .models import (
    BentTriple,
    BoardState,
    Core,
    EngineState,
    GamePhase,
    GameStatus,
    Move,
    MoveType,
    Player,
    Position,
    StoneType,
)
from .session import GameSession

__all__ = [
    "BentTriple",
    "BoardManager",
    "BoardState",
    "Core",
    "EngineState",
    "GameEngine",
    "GamePhase",
    "GameSession",
    "GameStatus",
    "Move",
    "MoveType",
    "Player",
    "Position",
    "StoneType",
]
