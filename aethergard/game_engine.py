"""Turn and history engine for Aethergard.

``GameEngine`` owns no state of its own. Every command takes an
``EngineState`` and returns a new one; the input is never mutated, so a
state handed to a renderer stays a complete, consistent snapshot.

Phases::

    placing --place (no core)--------------------------> placing (other player)
    placing --place (completes cores)------------------> resonating
    resonating --select_core---------------------------> selecting_focus
    selecting_focus --select_core----------------------> selecting_focus
    selecting_focus --select_focus_position------------> placing (other player)
    any phase --convert_bent_triple--------------------> placing (other player)

A winning move leaves the player and phase as they are and sets the status.

Commands that are not legal for the current phase, status or history mode
are ignored and the input state is returned, unless
``AETHERGARD_STRICT_ACTIONS`` is set, in which case the underlying
``InvalidActionError`` propagates. ``OutOfBoundsError`` always propagates.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence

from .board_manager import BoardManager
from .config import debug_engine_enabled, strict_actions_enabled
from .errors import (
    EmptyHistoryUndoError,
    HistoryBoundsRedoError,
    InvalidActionError,
    InvalidPhaseActionError,
    InvalidStateError,
)
from .events import PendingEvent, commit_events, describe_player
from .history import append_move, restore_fields
from .models import (
    BentTriple,
    BoardState,
    CellView,
    Core,
    EngineState,
    EventDetails,
    GameEventType,
    GamePhase,
    GameStatus,
    Move,
    MoveType,
    Position,
    StoneType,
)
from .rules.patterns import (
    classify_bent_triple,
    convertible_positions,
    detect_bent_triples,
    detect_cores_touching,
    is_bent_triple,
)
from .rules.resonance import activate_resonance
from .rules.victory import find_winning_line

logger = logging.getLogger(__name__)

__all__ = ["GameEngine"]


class GameEngine:
    """Pure transitions over ``EngineState`` plus the query surface."""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @staticmethod
    def reset() -> EngineState:
        """A fresh game: empty board, Black to place."""
        state = EngineState(board=BoardManager.create_empty_board())
        return GameEngine._commit(
            state,
            [
                PendingEvent(
                    GameEventType.TURN_STARTED,
                    state.current_player,
                    "New game started. Black moves first.",
                )
            ],
        )

    @staticmethod
    def replay(moves: Sequence[Move]) -> EngineState:
        """Re-issue the commands behind ``moves`` on a fresh game.

        Unlike the public commands, replay is strict: a move that cannot be
        re-applied raises ``InvalidActionError``.
        """
        state = GameEngine.reset()
        for move in moves:
            if move.move_type is MoveType.PLACE:
                state = GameEngine._apply_place_stone(state, move.position)
            elif move.move_type is MoveType.CONVERT:
                if move.bent_triple is None or move.converted_stone_index is None:
                    raise InvalidStateError(
                        "Convert move is missing its bent triple",
                        context={"move_number": move.move_number},
                    )
                state = GameEngine._apply_convert_bent_triple(
                    state, move.bent_triple, move.converted_stone_index
                )
            else:
                if move.core is None or move.focus_position is None:
                    raise InvalidStateError(
                        "Resonance move is missing its core or focus",
                        context={"move_number": move.move_number},
                    )
                if state.game_phase is GamePhase.RESONATING:
                    state = GameEngine._apply_select_core(state, move.core)
                state = GameEngine._apply_select_focus_position(
                    state, move.focus_position
                )
        return state

    # ------------------------------------------------------------------
    # Command surface
    # ------------------------------------------------------------------

    @staticmethod
    def place_stone(state: EngineState, position: Position) -> EngineState:
        return GameEngine._run_command(
            "place_stone", GameEngine._apply_place_stone, state, position
        )

    @staticmethod
    def convert_bent_triple(
        state: EngineState, triple: BentTriple, stone_index: int
    ) -> EngineState:
        return GameEngine._run_command(
            "convert_bent_triple",
            GameEngine._apply_convert_bent_triple,
            state,
            triple,
            stone_index,
        )

    @staticmethod
    def select_core(state: EngineState, core: Core) -> EngineState:
        return GameEngine._run_command(
            "select_core", GameEngine._apply_select_core, state, core
        )

    @staticmethod
    def select_focus_position(
        state: EngineState, position: Position
    ) -> EngineState:
        return GameEngine._run_command(
            "select_focus_position",
            GameEngine._apply_select_focus_position,
            state,
            position,
        )

    @staticmethod
    def undo(state: EngineState) -> EngineState:
        return GameEngine._run_command("undo", GameEngine._apply_undo, state)

    @staticmethod
    def redo(state: EngineState) -> EngineState:
        return GameEngine._run_command("redo", GameEngine._apply_redo, state)

    @staticmethod
    def confirm_undo(state: EngineState) -> EngineState:
        return GameEngine._run_command(
            "confirm_undo", GameEngine._apply_confirm_undo, state
        )

    # ------------------------------------------------------------------
    # Query surface
    # ------------------------------------------------------------------

    @staticmethod
    def is_live(state: EngineState) -> bool:
        """True when forward moves are accepted."""
        return (
            state.game_status is GameStatus.PLAYING
            and not state.is_history_mode
        )

    @staticmethod
    def get_board(state: EngineState) -> BoardState:
        """A private copy of the current board."""
        return BoardManager.clone(state.board)

    @staticmethod
    def get_legal_placements(state: EngineState) -> List[Position]:
        if not GameEngine.is_live(state) or state.game_phase is not GamePhase.PLACING:
            return []
        return BoardManager.get_empty_positions(state.board)

    @staticmethod
    def get_bent_triples(state: EngineState) -> List[BentTriple]:
        if not GameEngine.is_live(state):
            return []
        return detect_bent_triples(state.board, state.current_player)

    @staticmethod
    def get_convertible_stones(state: EngineState) -> List[Position]:
        if not GameEngine.is_live(state):
            return []
        return convertible_positions(state.board, state.current_player)

    @staticmethod
    def get_pending_cores(state: EngineState) -> List[Core]:
        return list(state.pending_cores)

    @staticmethod
    def get_selected_core(state: EngineState) -> Optional[Core]:
        return state.selected_core

    @staticmethod
    def get_last_move(state: EngineState) -> Optional[Move]:
        """The move that produced the position currently shown."""
        if state.history_index < 0:
            return None
        return state.move_history[state.history_index]

    @staticmethod
    def get_cell_views(state: EngineState) -> List[List[CellView]]:
        """Board projection with display flags for the presentation layer.

        Highlighted cells belong to the selected core (or to every offered
        core before one is chosen); resonating cells are the focus and ray
        paths of the last applied resonance.
        """
        if state.selected_core is not None:
            highlighted = set(state.selected_core.positions)
        else:
            highlighted = {p for core in state.pending_cores for p in core.positions}
        convertible = set(GameEngine.get_convertible_stones(state))
        resonating = set()
        last = GameEngine.get_last_move(state)
        if last is not None and last.move_type is MoveType.RESONANCE:
            if last.focus_position is not None:
                resonating.add(last.focus_position)
            for path in last.resonance_paths or []:
                resonating.update(path)

        views: List[List[CellView]] = []
        for row, cells in enumerate(state.board.cells):
            row_views = []
            for col, stone in enumerate(cells):
                position = Position(row=row, col=col)
                row_views.append(
                    CellView(
                        position=position,
                        stone_type=stone,
                        is_highlighted=position in highlighted,
                        is_convertible=position in convertible,
                        is_resonating=position in resonating,
                    )
                )
            views.append(row_views)
        return views

    # ------------------------------------------------------------------
    # Transitions (raise InvalidActionError when not applicable)
    # ------------------------------------------------------------------

    @staticmethod
    def _apply_place_stone(state: EngineState, position: Position) -> EngineState:
        GameEngine._require_live(state, "place_stone")
        if state.game_phase is not GamePhase.PLACING:
            raise InvalidPhaseActionError(
                "Stones can only be placed in the placing phase",
                action="place_stone",
                phase=state.game_phase.value,
            )
        if not BoardManager.is_empty(state.board, position):
            raise InvalidActionError(
                f"Cell {position.to_key()} is already occupied",
                code="CELL_OCCUPIED",
            )

        player = state.current_player
        new_board = BoardManager.with_stones(
            state.board, {position: StoneType.conductor_for(player)}
        )
        events = [
            PendingEvent(
                GameEventType.STONE_PLACED,
                player,
                f"{describe_player(player)} placed a conductor at "
                f"({position.row}, {position.col}).",
                EventDetails(position=position),
            )
        ]
        move_fields = dict(
            move_number=state.history_index + 2,
            player=player,
            move_type=MoveType.PLACE,
            position=position,
            previous_board=state.board,
            current_board=new_board,
        )

        cores = detect_cores_touching(new_board, player, position)
        if not cores:
            return GameEngine._finalize(state, move_fields, events)

        events.append(
            PendingEvent(
                GameEventType.CORE_FORMED,
                player,
                f"{len(cores)} core(s) completed.",
                EventDetails(position=position, core=cores[0], cores=cores),
            )
        )
        move = Move(formed_cores=cores, **move_fields)
        history, cursor = append_move(state.move_history, state.history_index, move)
        return GameEngine._commit(
            state,
            events,
            board=new_board,
            game_phase=GamePhase.RESONATING,
            pending_cores=cores,
            selected_core=None,
            core_player=player,
            move_history=history,
            history_index=cursor,
        )

    @staticmethod
    def _apply_convert_bent_triple(
        state: EngineState, triple: BentTriple, stone_index: int
    ) -> EngineState:
        GameEngine._require_live(state, "convert_bent_triple")
        if not 0 <= stone_index < 3:
            raise InvalidActionError(
                "Stone index must be 0, 1 or 2",
                code="BAD_STONE_INDEX",
                context={"stone_index": stone_index},
            )
        player = state.current_player
        conductor = StoneType.conductor_for(player)
        owned = all(
            BoardManager.get_stone(state.board, stone) is conductor
            for stone in triple.stones
        )
        if not owned or not is_bent_triple(triple.stones):
            raise InvalidActionError(
                "Not a bent triple of the active player's conductors",
                code="NOT_A_BENT_TRIPLE",
                context={"stones": [s.to_key() for s in triple.stones]},
            )

        triple = triple.model_copy(
            update={"shape": classify_bent_triple(triple.stones)}
        )
        target = triple.stones[stone_index]
        new_board = BoardManager.with_stones(
            state.board, {target: StoneType.keystone_for(player)}
        )
        events = [
            PendingEvent(
                GameEventType.STONE_CONVERTED,
                player,
                f"{describe_player(player)} converted the stone at "
                f"({target.row}, {target.col}) into a keystone.",
                EventDetails(
                    position=target,
                    bent_triple=triple,
                    converted_stones=[target],
                ),
            )
        ]
        return GameEngine._finalize(
            state,
            dict(
                move_number=state.history_index + 2,
                player=player,
                move_type=MoveType.CONVERT,
                position=target,
                previous_board=state.board,
                current_board=new_board,
                bent_triple=triple,
                converted_stone_index=stone_index,
                converted_stones=[target],
            ),
            events,
        )

    @staticmethod
    def _apply_select_core(state: EngineState, core: Core) -> EngineState:
        GameEngine._require_live(state, "select_core")
        if state.game_phase not in (GamePhase.RESONATING, GamePhase.SELECTING_FOCUS):
            raise InvalidPhaseActionError(
                "No cores are awaiting selection",
                action="select_core",
                phase=state.game_phase.value,
            )
        if core not in state.pending_cores:
            raise InvalidActionError(
                "Core is not one of the offered cores",
                code="UNKNOWN_CORE",
                context={"anchor": core.anchor.to_key()},
            )
        return GameEngine._commit(
            state, [], selected_core=core, game_phase=GamePhase.SELECTING_FOCUS
        )

    @staticmethod
    def _apply_select_focus_position(
        state: EngineState, position: Position
    ) -> EngineState:
        GameEngine._require_live(state, "select_focus_position")
        if state.game_phase is not GamePhase.SELECTING_FOCUS:
            raise InvalidPhaseActionError(
                "A core must be selected before its focus",
                action="select_focus_position",
                phase=state.game_phase.value,
            )
        core = state.selected_core
        player = state.core_player
        if core is None or player is None:
            raise InvalidStateError(
                "Focus selection without a selected core or core player"
            )
        if not core.contains(position):
            raise InvalidActionError(
                "Focus position must be one of the selected core's cells",
                code="FOCUS_OUTSIDE_CORE",
                context={"focus": position.to_key()},
            )

        new_board, paths = activate_resonance(state.board, core, position)
        converted = BoardManager.changed_positions(state.board, new_board)
        events = [
            PendingEvent(
                GameEventType.RESONANCE_ACTIVATED,
                player,
                f"{describe_player(player)} activated a resonance.",
                EventDetails(position=position, core=core, resonance_paths=paths),
            )
        ]
        if converted:
            events.append(
                PendingEvent(
                    GameEventType.STONE_CONVERTED,
                    player,
                    f"{len(converted)} stone(s) became keystones.",
                    EventDetails(converted_stones=converted),
                )
            )
        return GameEngine._finalize(
            state,
            dict(
                move_number=state.history_index + 2,
                player=player,
                move_type=MoveType.RESONANCE,
                position=position,
                previous_board=state.board,
                current_board=new_board,
                core=core,
                focus_position=position,
                resonance_paths=paths,
                converted_stones=converted,
            ),
            events,
        )

    @staticmethod
    def _apply_undo(state: EngineState) -> EngineState:
        if state.is_history_mode:
            current = state.history_index
        else:
            current = len(state.move_history) - 1
        if current < 0:
            raise EmptyHistoryUndoError("No move left to undo")
        target = current - 1
        return GameEngine._commit(
            state,
            [],
            is_history_mode=True,
            history_index=target,
            **restore_fields(state.move_history, target),
        )

    @staticmethod
    def _apply_redo(state: EngineState) -> EngineState:
        if not state.is_history_mode or (
            state.history_index >= len(state.move_history) - 1
        ):
            raise HistoryBoundsRedoError("No move left to redo")
        target = state.history_index + 1
        return GameEngine._commit(
            state,
            [],
            history_index=target,
            **restore_fields(state.move_history, target),
        )

    @staticmethod
    def _apply_confirm_undo(state: EngineState) -> EngineState:
        if not state.is_history_mode:
            raise InvalidPhaseActionError(
                "Nothing to confirm outside history mode",
                action="confirm_undo",
            )
        cursor = state.history_index
        fields = restore_fields(state.move_history, cursor)
        events = []
        if fields["game_status"] is GameStatus.PLAYING:
            player = fields["current_player"]
            events.append(
                PendingEvent(
                    GameEventType.TURN_STARTED,
                    player,
                    f"Game rewound to move {cursor + 1}. "
                    f"{describe_player(player)} to play.",
                )
            )
        return GameEngine._commit(
            state,
            events,
            move_history=list(state.move_history[: cursor + 1]),
            is_history_mode=False,
            **fields,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _run_command(
        name: str,
        apply: Callable[..., EngineState],
        state: EngineState,
        *args: Any,
    ) -> EngineState:
        try:
            return apply(state, *args)
        except InvalidActionError as exc:
            if strict_actions_enabled():
                raise
            logger.debug("Ignoring %s: %s", name, exc)
            return state

    @staticmethod
    def _require_live(state: EngineState, action: str) -> None:
        if state.is_history_mode:
            raise InvalidPhaseActionError(
                "Forward moves are disabled while browsing history",
                action=action,
                phase=state.game_phase.value,
            )
        if state.game_status is not GameStatus.PLAYING:
            raise InvalidPhaseActionError(
                "The game is over",
                action=action,
                context={"status": state.game_status.value},
            )

    @staticmethod
    def _finalize(
        state: EngineState, move_fields: dict, events: List[PendingEvent]
    ) -> EngineState:
        """Record a completed turn, check the win and hand over the turn."""
        player = move_fields["player"]
        new_board = move_fields["current_board"]
        winning_line = find_winning_line(new_board, player)
        status = GameStatus.win_for(player) if winning_line else GameStatus.PLAYING

        move = Move(game_status=status, **move_fields)
        history, cursor = append_move(state.move_history, state.history_index, move)
        updates: dict = dict(
            board=new_board,
            move_history=history,
            history_index=cursor,
            game_status=status,
        )

        if winning_line:
            logger.info(
                "%s wins on move %d", describe_player(player), move.move_number
            )
            events.append(
                PendingEvent(
                    GameEventType.GAME_WON,
                    player,
                    f"{describe_player(player)} completed five keystones in a line.",
                    EventDetails(winning_line=winning_line),
                )
            )
            return GameEngine._commit(state, events, **updates)

        next_player = player.opponent
        updates.update(
            current_player=next_player,
            game_phase=GamePhase.PLACING,
            pending_cores=[],
            selected_core=None,
            core_player=None,
        )
        events.append(
            PendingEvent(
                GameEventType.TURN_STARTED,
                next_player,
                f"{describe_player(next_player)}'s turn.",
            )
        )
        triples = detect_bent_triples(new_board, next_player)
        if triples:
            events.append(
                PendingEvent(
                    GameEventType.BENT_TRIPLE_DETECTED,
                    next_player,
                    f"{describe_player(next_player)} can convert a bent triple.",
                    EventDetails(bent_triples=triples),
                )
            )
        return GameEngine._commit(state, events, **updates)

    @staticmethod
    def _commit(
        state: EngineState, events: List[PendingEvent], **updates: Any
    ) -> EngineState:
        if events:
            log, next_id = commit_events(state.event_log, state.next_event_id, events)
            updates["event_log"] = log
            updates["next_event_id"] = next_id
        new_state = state.model_copy(update=updates)
        if debug_engine_enabled():
            logger.debug(
                "state: player=%s phase=%s status=%s cursor=%d board=%s",
                new_state.current_player.value,
                new_state.game_phase.value,
                new_state.game_status.value,
                new_state.history_index,
                BoardManager.hash_board(new_state.board),
            )
        return new_state
