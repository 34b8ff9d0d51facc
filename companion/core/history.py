"""
History Ledger.

Bounded, cursor-addressed event log backing undo/redo. History is linear:
appending while the cursor is behind the end discards the abandoned redo
branch first. When capacity is exceeded the oldest events are evicted and
the cursor shifts down with them.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from companion.core.errors import NoHistory
from companion.core.events.base import Event, EventKind


@dataclass(frozen=True)
class HistorySnapshot:
    """Read-only copy of the ledger state."""
    events: tuple[Event, ...]
    cursor: int
    capacity: int

    @property
    def current(self) -> Event | None:
        return self.events[self.cursor] if self.cursor >= 0 else None


@dataclass(frozen=True)
class EventStats:
    total_events: int
    events_by_kind: dict[EventKind, int] = field(default_factory=dict)
    recent_events: tuple[Event, ...] = ()


class HistoryLedger:
    """Ordered event history with an undo/redo cursor.

    Invariants:
        - ``cursor == -1`` iff the ledger is empty, else ``0 <= cursor < len(events)``
        - ``len(events) <= capacity``
    """

    def __init__(self, capacity: int = 50):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._events: list[Event] = []
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._events)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def cursor(self) -> int:
        return self._cursor

    def append(self, event: Event) -> None:
        if self._cursor < len(self._events) - 1:
            del self._events[self._cursor + 1:]

        self._events.append(event)
        self._cursor = len(self._events) - 1

        overflow = len(self._events) - self._capacity
        if overflow > 0:
            del self._events[:overflow]
            self._cursor = max(self._cursor - overflow, -1)

    def can_undo(self) -> bool:
        return self._cursor > 0

    def can_redo(self) -> bool:
        return 0 <= self._cursor < len(self._events) - 1

    def current(self) -> Event | None:
        """Event under the cursor, or None when empty."""
        return self._events[self._cursor] if self._cursor >= 0 else None

    def upcoming(self) -> Event | None:
        """Event a redo would step onto, or None at the end."""
        return self._events[self._cursor + 1] if self.can_redo() else None

    def undo(self) -> Event:
        """Step the cursor back and return the event now under it.

        Raises:
            NoHistory: if there is nothing to undo
        """
        if not self.can_undo():
            raise NoHistory(f"Cannot undo at cursor {self._cursor}")
        self._cursor -= 1
        return self._events[self._cursor]

    def redo(self) -> Event:
        """Step the cursor forward and return the event now under it.

        Raises:
            NoHistory: if there is nothing to redo
        """
        if not self.can_redo():
            raise NoHistory(f"Cannot redo at cursor {self._cursor} of {len(self._events)}")
        self._cursor += 1
        return self._events[self._cursor]

    def snapshot(self) -> HistorySnapshot:
        return HistorySnapshot(
            events=tuple(self._events),
            cursor=self._cursor,
            capacity=self._capacity,
        )

    def stats(self, recent: int = 10) -> EventStats:
        counts = Counter(event.kind for event in self._events)
        recent_events = tuple(self._events[-recent:]) if recent > 0 else ()
        return EventStats(
            total_events=len(self._events),
            events_by_kind=dict(counts),
            recent_events=recent_events,
        )

    def clear(self) -> None:
        self._events.clear()
        self._cursor = -1
