"""
Shared pytest fixtures for the Aethergard engine tests.

Boards are built either from a ``{(row, col): StoneType}`` mapping or from
a small text diagram placed at an origin on the 17x17 grid:

    .  empty            b  black conductor    B  black keystone
                        w  white conductor    W  white keystone
"""

from pathlib import Path
import sys
from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple

import pytest

# Make `import aethergard` work when pytest runs from a checkout without an
# editable install.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from aethergard.board_manager import BoardManager  # noqa: E402
from aethergard.game_engine import GameEngine  # noqa: E402
from aethergard.models import (  # noqa: E402
    BentTriple,
    BoardState,
    Core,
    EngineState,
    GamePhase,
    Player,
    Position,
    StoneType,
)


DIAGRAM_CODES = {
    ".": StoneType.EMPTY,
    "b": StoneType.BLACK_CONDUCTOR,
    "w": StoneType.WHITE_CONDUCTOR,
    "B": StoneType.BLACK_KEYSTONE,
    "W": StoneType.WHITE_KEYSTONE,
}


def P(row: int, col: int) -> Position:
    """Short position constructor for test tables."""
    return Position(row=row, col=col)


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def board_factory() -> Callable[..., BoardState]:
    """Factory for boards from a ``{(row, col): StoneType}`` mapping."""

    def _create_board(
        stones: Optional[Dict[Tuple[int, int], StoneType]] = None,
    ) -> BoardState:
        changes = {P(r, c): stone for (r, c), stone in (stones or {}).items()}
        return BoardManager.with_stones(BoardManager.create_empty_board(), changes)

    return _create_board


@pytest.fixture
def diagram_board() -> Callable[..., BoardState]:
    """Factory for boards drawn as text rows starting at ``origin``."""

    def _create_board(
        rows: Sequence[str], origin: Tuple[int, int] = (0, 0)
    ) -> BoardState:
        top, left = origin
        changes = {}
        for d_row, line in enumerate(rows):
            for d_col, code in enumerate(line.replace(" ", "")):
                stone = DIAGRAM_CODES[code]
                if stone is not StoneType.EMPTY:
                    changes[P(top + d_row, left + d_col)] = stone
        return BoardManager.with_stones(BoardManager.create_empty_board(), changes)

    return _create_board


@pytest.fixture
def state_factory() -> Callable[..., EngineState]:
    """Factory for EngineState instances around a prepared board."""

    def _create_state(
        board: Optional[BoardState] = None,
        current_player: Player = Player.BLACK,
        game_phase: GamePhase = GamePhase.PLACING,
    ) -> EngineState:
        state = GameEngine.reset()
        return state.model_copy(
            update={
                "board": board or BoardManager.create_empty_board(),
                "current_player": current_player,
                "game_phase": game_phase,
            }
        )

    return _create_state


@pytest.fixture
def play() -> Callable[..., EngineState]:
    """Apply a sequence of placements, one per turn, starting from ``state``."""

    def _play(state: EngineState, positions: Iterable[Tuple[int, int]]) -> EngineState:
        for row, col in positions:
            state = GameEngine.place_stone(state, P(row, col))
        return state

    return _play


# A complete game won by Black on move 22. Black builds keystones at
# (8,4), (8,5) and (8,6) with conversions, completes a core at (7,7) and
# resonates from (8,8), then converts (8,7) for an exact five on row 8.
# White only drops isolated stones along the bottom edge.
WINNING_SCRIPT = [
    ("place", (8, 4)),
    ("place", (16, 0)),
    ("place", (8, 5)),
    ("place", (16, 2)),
    ("place", (8, 6)),
    ("place", (16, 4)),
    ("convert", [(8, 4), (8, 5), (8, 6)], 0),
    ("place", (16, 6)),
    ("place", (8, 7)),
    ("place", (16, 8)),
    ("convert", [(8, 5), (8, 6), (8, 7)], 0),
    ("place", (16, 10)),
    ("place", (7, 7)),
    ("place", (16, 12)),
    ("convert", [(7, 7), (8, 6), (8, 7)], 1),
    ("place", (16, 14)),
    ("place", (7, 8)),
    ("place", (16, 16)),
    ("place", (8, 8)),
    ("resonate", (7, 7), (8, 8)),
    ("place", (14, 0)),
    ("convert", [(7, 7), (7, 8), (8, 7)], 2),
]


def run_script(state: EngineState, script) -> EngineState:
    """Drive the public command surface through a scripted game."""
    for step in script:
        kind = step[0]
        if kind == "place":
            state = GameEngine.place_stone(state, P(*step[1]))
        elif kind == "convert":
            stones = tuple(P(r, c) for r, c in step[1])
            state = GameEngine.convert_bent_triple(
                state, BentTriple(stones=stones), step[2]
            )
        elif kind == "resonate":
            state = GameEngine.select_core(state, Core.at(*step[1]))
            state = GameEngine.select_focus_position(state, P(*step[2]))
        else:
            raise ValueError(f"unknown script step {kind!r}")
    return state


# =============================================================================
# COMMON STATE FIXTURES
# =============================================================================


@pytest.fixture
def won_game(strict_actions) -> EngineState:
    """The finished WINNING_SCRIPT game; strict so no step is skipped."""
    return run_script(GameEngine.reset(), WINNING_SCRIPT)


@pytest.fixture
def new_game() -> EngineState:
    """A fresh game with Black to place."""
    return GameEngine.reset()


@pytest.fixture
def strict_actions(monkeypatch):
    """Make invalid commands raise instead of being ignored."""
    monkeypatch.setenv("AETHERGARD_STRICT_ACTIONS", "1")
    yield
