"""Environment-driven engine flags.

Flags are read on every call so tests (and embedding hosts) can flip them
with ``monkeypatch.setenv`` without re-importing the engine.

    export AETHERGARD_DEBUG_ENGINE=1      # log every transition at DEBUG
    export AETHERGARD_STRICT_ACTIONS=1    # raise on invalid commands
    export AETHERGARD_EVENT_LOG_LIMIT=500 # keep only the newest 500 events
"""
from __future__ import annotations

import os

_TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_EVENT_LOG_LIMIT = 0


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def debug_engine_enabled() -> bool:
    return _flag("AETHERGARD_DEBUG_ENGINE")


def strict_actions_enabled() -> bool:
    """When set, invalid commands raise instead of being ignored."""
    return _flag("AETHERGARD_STRICT_ACTIONS")


def event_log_limit() -> int:
    """Maximum number of retained events; 0 (the default) means unbounded.

    Unparseable or negative values fall back to the unbounded default.
    """
    raw = os.getenv("AETHERGARD_EVENT_LOG_LIMIT", str(DEFAULT_EVENT_LOG_LIMIT))
    try:
        limit = int(raw)
    except ValueError:
        return DEFAULT_EVENT_LOG_LIMIT
    if limit < 0:
        return DEFAULT_EVENT_LOG_LIMIT
    return limit
