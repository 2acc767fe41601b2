"""Stateful wrapper around ``GameEngine`` for interactive hosts.

A ``GameSession`` keeps the current ``EngineState`` and notifies
subscribers after every command that produced a new state. The engine
itself stays free of ambient state; a host may run several sessions side
by side.
"""
from __future__ import annotations

import logging
from typing import Callable, List

from .game_engine import GameEngine
from .models import BentTriple, Core, EngineState, Position

logger = logging.getLogger(__name__)

Listener = Callable[[EngineState], None]


class GameSession:
    def __init__(self, state: EngineState | None = None):
        self._state = state if state is not None else GameEngine.reset()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> EngineState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def place_stone(self, position: Position) -> EngineState:
        return self._update(GameEngine.place_stone(self._state, position))

    def convert_bent_triple(self, triple: BentTriple, stone_index: int) -> EngineState:
        return self._update(
            GameEngine.convert_bent_triple(self._state, triple, stone_index)
        )

    def select_core(self, core: Core) -> EngineState:
        return self._update(GameEngine.select_core(self._state, core))

    def select_focus_position(self, position: Position) -> EngineState:
        return self._update(GameEngine.select_focus_position(self._state, position))

    def undo(self) -> EngineState:
        return self._update(GameEngine.undo(self._state))

    def redo(self) -> EngineState:
        return self._update(GameEngine.redo(self._state))

    def confirm_undo(self) -> EngineState:
        return self._update(GameEngine.confirm_undo(self._state))

    def reset(self) -> EngineState:
        return self._update(GameEngine.reset())

    def _update(self, new_state: EngineState) -> EngineState:
        # Ignored commands hand back the very same object.
        if new_state is self._state:
            return new_state
        self._state = new_state
        logger.debug("Notifying %d session listener(s)", len(self._listeners))
        for listener in list(self._listeners):
            listener(new_state)
        return new_state
