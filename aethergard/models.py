"""
Pydantic Models for Aethergard Game State

Value objects shared by the board, rules and engine layers. Multi-word
fields carry camelCase aliases so snapshots serialise the same way the
presentation layer expects them.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


BOARD_SIZE = 17


class Player(str, Enum):
    """Player enumeration. Black always moves first."""
    BLACK = "black"
    WHITE = "white"

    @property
    def opponent(self) -> "Player":
        return Player.WHITE if self is Player.BLACK else Player.BLACK


class StoneType(str, Enum):
    """Closed set of cell states."""
    EMPTY = "empty"
    BLACK_CONDUCTOR = "black_conductor"
    WHITE_CONDUCTOR = "white_conductor"
    BLACK_KEYSTONE = "black_keystone"
    WHITE_KEYSTONE = "white_keystone"

    @property
    def owner(self) -> Optional[Player]:
        if self in (StoneType.BLACK_CONDUCTOR, StoneType.BLACK_KEYSTONE):
            return Player.BLACK
        if self in (StoneType.WHITE_CONDUCTOR, StoneType.WHITE_KEYSTONE):
            return Player.WHITE
        return None

    @property
    def is_conductor(self) -> bool:
        return self in (StoneType.BLACK_CONDUCTOR, StoneType.WHITE_CONDUCTOR)

    @property
    def is_keystone(self) -> bool:
        return self in (StoneType.BLACK_KEYSTONE, StoneType.WHITE_KEYSTONE)

    @staticmethod
    def conductor_for(player: Player) -> "StoneType":
        if player is Player.BLACK:
            return StoneType.BLACK_CONDUCTOR
        return StoneType.WHITE_CONDUCTOR

    @staticmethod
    def keystone_for(player: Player) -> "StoneType":
        if player is Player.BLACK:
            return StoneType.BLACK_KEYSTONE
        return StoneType.WHITE_KEYSTONE


class GamePhase(str, Enum):
    """Game phase enumeration"""
    PLACING = "placing"
    RESONATING = "resonating"
    SELECTING_FOCUS = "selecting_focus"


class GameStatus(str, Enum):
    """Game status enumeration"""
    PLAYING = "playing"
    BLACK_WIN = "black_win"
    WHITE_WIN = "white_win"

    @staticmethod
    def win_for(player: Player) -> "GameStatus":
        if player is Player.BLACK:
            return GameStatus.BLACK_WIN
        return GameStatus.WHITE_WIN

    @property
    def winner(self) -> Optional[Player]:
        if self is GameStatus.BLACK_WIN:
            return Player.BLACK
        if self is GameStatus.WHITE_WIN:
            return Player.WHITE
        return None


class MoveType(str, Enum):
    """Kinds of recorded turns."""
    PLACE = "place"
    CONVERT = "convert"
    RESONANCE = "resonance"


class Direction(str, Enum):
    """Resonance ray directions, in propagation order."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class BentTripleShape(str, Enum):
    """Cosmetic classification of a bent triple; never rule-relevant."""
    L = "L"
    REVERSE_L = "reverse_L"
    STRAIGHT = "straight"


class GameEventType(str, Enum):
    STONE_PLACED = "stone_placed"
    BENT_TRIPLE_DETECTED = "bent_triple_detected"
    CORE_FORMED = "core_formed"
    RESONANCE_ACTIVATED = "resonance_activated"
    STONE_CONVERTED = "stone_converted"
    TURN_STARTED = "turn_started"
    GAME_WON = "game_won"


class Position(BaseModel):
    """Board position (row from the top, column from the left)."""
    model_config = ConfigDict(frozen=True)

    row: int
    col: int

    def to_key(self) -> str:
        """Convert position to string key"""
        return f"{self.row},{self.col}"

    def offset(self, d_row: int, d_col: int) -> "Position":
        return Position(row=self.row + d_row, col=self.col + d_col)

    def __repr__(self) -> str:
        return f"Position({self.row}, {self.col})"


class BoardState(BaseModel):
    """The 17x17 grid. ``cells[row][col]`` holds the stone at that cell."""
    cells: List[List[StoneType]]

    @field_validator("cells")
    @classmethod
    def check_shape(cls, cells: List[List[StoneType]]) -> List[List[StoneType]]:
        """Reject any grid that is not BOARD_SIZE x BOARD_SIZE."""
        if len(cells) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in cells):
            raise ValueError(
                f"board must be {BOARD_SIZE}x{BOARD_SIZE}, got {len(cells)} rows"
            )
        return cells

    @property
    def size(self) -> int:
        return len(self.cells)


class CellView(BaseModel):
    """Display projection of one cell.

    The flags are derived for presentation only; no rule reads them.
    """
    model_config = ConfigDict(populate_by_name=True)

    position: Position
    stone_type: StoneType = Field(alias="stoneType")
    is_highlighted: bool = Field(False, alias="isHighlighted")
    is_convertible: bool = Field(False, alias="isConvertible")
    is_resonating: bool = Field(False, alias="isResonating")


class BentTriple(BaseModel):
    """Three same-owner conductors with exactly two adjacent pairs."""
    model_config = ConfigDict(frozen=True)

    stones: Tuple[Position, Position, Position]
    shape: BentTripleShape = BentTripleShape.L


class Core(BaseModel):
    """A 2x2 square of one owner's stones.

    ``positions`` are ordered top-left, top-right, bottom-left, bottom-right.
    """
    model_config = ConfigDict(frozen=True)

    anchor: Position
    positions: Tuple[Position, Position, Position, Position]

    @classmethod
    def at(cls, row: int, col: int) -> "Core":
        return cls(
            anchor=Position(row=row, col=col),
            positions=(
                Position(row=row, col=col),
                Position(row=row, col=col + 1),
                Position(row=row + 1, col=col),
                Position(row=row + 1, col=col + 1),
            ),
        )

    def contains(self, position: Position) -> bool:
        return position in self.positions


class Move(BaseModel):
    """One completed turn (or the placement that opened a resonance).

    Snapshots are full boards so undo/redo never has to re-derive state.
    Kind-specific fields are ``None`` for the other move types.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    move_number: int = Field(alias="moveNumber")
    player: Player
    move_type: MoveType = Field(alias="moveType")
    position: Position
    previous_board: BoardState = Field(alias="previousBoard")
    current_board: BoardState = Field(alias="currentBoard")
    # convert
    bent_triple: Optional[BentTriple] = Field(None, alias="bentTriple")
    converted_stone_index: Optional[int] = Field(
        None, alias="convertedStoneIndex"
    )
    # resonance
    core: Optional[Core] = None
    focus_position: Optional[Position] = Field(None, alias="focusPosition")
    resonance_paths: Optional[List[List[Position]]] = Field(
        None, alias="resonancePaths"
    )
    # place that completed one or more cores
    formed_cores: List[Core] = Field(default_factory=list, alias="formedCores")
    converted_stones: List[Position] = Field(
        default_factory=list, alias="convertedStones"
    )
    game_status: GameStatus = Field(GameStatus.PLAYING, alias="gameStatus")


class EventDetails(BaseModel):
    """Structured payload for a game event."""
    model_config = ConfigDict(populate_by_name=True)

    position: Optional[Position] = None
    core: Optional[Core] = None
    cores: List[Core] = Field(default_factory=list)
    resonance_paths: Optional[List[List[Position]]] = Field(
        None, alias="resonancePaths"
    )
    converted_stones: List[Position] = Field(
        default_factory=list, alias="convertedStones"
    )
    bent_triple: Optional[BentTriple] = Field(None, alias="bentTriple")
    bent_triples: List[BentTriple] = Field(
        default_factory=list, alias="bentTriples"
    )
    winning_line: List[Position] = Field(
        default_factory=list, alias="winningLine"
    )


class GameEvent(BaseModel):
    """An entry in the append-only event log."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    timestamp: datetime
    event_type: GameEventType = Field(alias="eventType")
    player: Player
    message: str
    details: EventDetails = Field(default_factory=EventDetails)


class EngineState(BaseModel):
    """Complete engine state threaded through ``GameEngine`` transitions."""
    model_config = ConfigDict(populate_by_name=True)

    board: BoardState
    current_player: Player = Field(Player.BLACK, alias="currentPlayer")
    game_phase: GamePhase = Field(GamePhase.PLACING, alias="gamePhase")
    game_status: GameStatus = Field(GameStatus.PLAYING, alias="gameStatus")

    # resonance sub-phase
    pending_cores: List[Core] = Field(
        default_factory=list, alias="pendingCores"
    )
    selected_core: Optional[Core] = Field(None, alias="selectedCore")
    core_player: Optional[Player] = Field(None, alias="corePlayer")

    # history
    move_history: List[Move] = Field(default_factory=list, alias="moveHistory")
    history_index: int = Field(-1, alias="historyIndex")
    is_history_mode: bool = Field(False, alias="isHistoryMode")

    event_log: List[GameEvent] = Field(default_factory=list, alias="eventLog")
    next_event_id: int = Field(1, alias="nextEventId")

    @property
    def winner(self) -> Optional[Player]:
        return self.game_status.winner


StoneCounts = Dict[StoneType, int]
