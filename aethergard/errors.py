"""
Aethergard Error Hierarchy

Every engine exception inherits from AethergardError so callers can catch
the whole family in one place.

Usage:
    from aethergard.errors import InvalidPhaseActionError, OutOfBoundsError

    try:
        state = GameEngine.place_stone(state, position)
    except OutOfBoundsError as e:
        logger.warning(f"Bad position: {e.message}")
"""

from typing import Any

__all__ = [
    # Base error
    "AethergardError",
    # Board errors
    "OutOfBoundsError",
    # Action errors
    "InvalidActionError",
    "InvalidPhaseActionError",
    # History errors
    "HistoryError",
    "EmptyHistoryUndoError",
    "HistoryBoundsRedoError",
    # Rules errors
    "RulesViolationError",
    "InvalidStateError",
]


class AethergardError(Exception):
    """Base exception for all Aethergard errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "AETHERGARD_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Board Errors
# =============================================================================


class OutOfBoundsError(AethergardError):
    """A position outside the 17x17 board was queried or mutated.

    Fatal to the calling operation; callers that consult the legal-move
    queries first never see it.
    """
    code: str = "OUT_OF_BOUNDS"

    def __init__(
        self,
        message: str,
        row: int | None = None,
        col: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        if row is not None:
            self.context["row"] = row
        if col is not None:
            self.context["col"] = col


# =============================================================================
# Action Errors
# =============================================================================


class InvalidActionError(AethergardError):
    """Base class for commands the engine declines to apply.

    The public command surface turns these into no-ops unless strict
    actions are enabled (see ``aethergard.config``).
    """
    code: str = "INVALID_ACTION"


class InvalidPhaseActionError(InvalidActionError):
    """Command not legal in the current phase, status or history mode."""
    code: str = "INVALID_PHASE_ACTION"

    def __init__(
        self,
        message: str,
        action: str | None = None,
        phase: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        if action:
            self.context["action"] = action
        if phase:
            self.context["phase"] = phase


class HistoryError(InvalidActionError):
    """Base class for history navigation that cannot move the cursor."""
    code: str = "HISTORY_ERROR"


class EmptyHistoryUndoError(HistoryError):
    """Undo requested with no earlier move to step back over."""
    code: str = "EMPTY_HISTORY_UNDO"


class HistoryBoundsRedoError(HistoryError):
    """Redo requested past the last recorded move."""
    code: str = "HISTORY_BOUNDS_REDO"


# =============================================================================
# Rules Errors
# =============================================================================


class RulesViolationError(AethergardError):
    """A rules primitive was called with inputs breaking its precondition.

    Attributes:
        rule_ref: Short name of the violated rule (e.g. "focus-in-core")
    """
    code: str = "RULES_VIOLATION"

    def __init__(
        self,
        message: str,
        rule_ref: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.rule_ref = rule_ref
        if rule_ref:
            self.context["rule_ref"] = rule_ref


class InvalidStateError(AethergardError):
    """Corrupted or unexpected engine state.

    Raised when the state is in a configuration that should not be
    reachable through the command surface.
    """
    code: str = "INVALID_STATE"
