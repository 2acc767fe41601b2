"""Event log helpers.

Transitions collect ``PendingEvent`` entries while they run and commit them
in one step, so a rejected command never leaves a half-written log.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Sequence, Tuple

from .config import event_log_limit
from .models import EventDetails, GameEvent, GameEventType, Player

__all__ = ["PendingEvent", "commit_events", "describe_player"]


def describe_player(player: Player) -> str:
    return "Black" if player is Player.BLACK else "White"


@dataclass
class PendingEvent:
    """An event built during a transition, before it gets an id."""
    event_type: GameEventType
    player: Player
    message: str
    details: EventDetails = field(default_factory=EventDetails)


def commit_events(
    log: Sequence[GameEvent],
    next_id: int,
    pending: Sequence[PendingEvent],
) -> Tuple[List[GameEvent], int]:
    """Append ``pending`` to ``log`` and return the new log and next id.

    Ids are sequential and never reused. The log only grows unless
    ``AETHERGARD_EVENT_LOG_LIMIT`` is set, in which case it is trimmed from
    the front to that many entries.
    """
    new_log = list(log)
    timestamp = datetime.now(timezone.utc)
    for entry in pending:
        new_log.append(
            GameEvent(
                id=next_id,
                timestamp=timestamp,
                event_type=entry.event_type,
                player=entry.player,
                message=entry.message,
                details=entry.details,
            )
        )
        next_id += 1
    limit = event_log_limit()
    if limit and len(new_log) > limit:
        new_log = new_log[-limit:]
    return new_log, next_id
