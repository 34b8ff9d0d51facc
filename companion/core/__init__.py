"""
Companion Core - events, filters, history and the event bus.
"""

from companion.core.errors import (
    CharacterNotFound,
    CompanionError,
    HandlerFailure,
    NoHistory,
    StoreFailure,
    ValidationFailed,
)
from companion.core.event_bus import EventBus, EventHandler, Unsubscribe
from companion.core.events import Event, EventKind
from companion.core.filters import EventFilter, matches
from companion.core.history import EventStats, HistoryLedger, HistorySnapshot

__all__ = [
    "CharacterNotFound",
    "CompanionError",
    "HandlerFailure",
    "NoHistory",
    "StoreFailure",
    "ValidationFailed",
    "EventBus",
    "EventHandler",
    "Unsubscribe",
    "Event",
    "EventKind",
    "EventFilter",
    "matches",
    "EventStats",
    "HistoryLedger",
    "HistorySnapshot",
]
