"""History ledger tests: bounds, cursor movement and branch truncation."""

import pytest

from companion.core.errors import NoHistory
from companion.core.events.base import EventKind
from companion.core.events.factories import create_character_updated_event
from companion.core.history import HistoryLedger
from companion.core.models.character import Character


def _event(n):
    character = Character(id=f"c{n}", name=f"Hero {n}", race="HUMAN")
    return create_character_updated_event(character.id, character, {"name": character.name})


def _ledger(count, capacity=50):
    ledger = HistoryLedger(capacity=capacity)
    events = [_event(i) for i in range(count)]
    for event in events:
        ledger.append(event)
    return ledger, events


def test_empty_ledger():
    ledger = HistoryLedger()
    assert len(ledger) == 0
    assert ledger.cursor == -1
    assert ledger.current() is None
    assert not ledger.can_undo()
    assert not ledger.can_redo()
    with pytest.raises(NoHistory):
        ledger.undo()
    with pytest.raises(NoHistory):
        ledger.redo()


def test_append_moves_cursor_to_end():
    ledger, events = _ledger(3)
    assert ledger.cursor == 2
    assert ledger.current() is events[2]
    assert ledger.can_undo()
    assert not ledger.can_redo()


def test_capacity_evicts_oldest():
    ledger, events = _ledger(5, capacity=3)

    snapshot = ledger.snapshot()
    assert len(snapshot.events) == 3
    assert snapshot.events == tuple(events[2:])
    assert snapshot.cursor == 2
    assert snapshot.capacity == 3


def test_undo_returns_event_at_new_cursor():
    ledger, events = _ledger(3)

    assert ledger.undo() is events[1]
    assert ledger.cursor == 1
    assert ledger.undo() is events[0]
    assert ledger.cursor == 0
    # The first event can never be undone
    assert not ledger.can_undo()
    with pytest.raises(NoHistory):
        ledger.undo()


def test_undo_redo_round_trip():
    ledger, events = _ledger(3)

    ledger.undo()
    ledger.undo()
    assert ledger.redo() is events[1]
    assert ledger.redo() is events[2]
    assert ledger.cursor == 2
    assert not ledger.can_redo()


def test_upcoming_peeks_redo_target():
    ledger, events = _ledger(3)
    assert ledger.upcoming() is None

    ledger.undo()
    assert ledger.upcoming() is events[2]
    assert ledger.cursor == 1
    ledger.redo()
    assert ledger.upcoming() is None


def test_append_after_undo_discards_redo_branch():
    ledger, events = _ledger(3)
    ledger.undo()
    ledger.undo()

    replacement = _event(99)
    ledger.append(replacement)

    assert ledger.snapshot().events == (events[0], replacement)
    assert ledger.cursor == 1
    assert not ledger.can_redo()


def test_eviction_after_undo_keeps_cursor_in_range():
    ledger, events = _ledger(3, capacity=3)
    ledger.undo()  # cursor 1, events[2] is the redo branch

    ledger.append(_event(10))
    ledger.append(_event(11))

    assert len(ledger) == 3
    assert ledger.cursor == 2
    assert 0 <= ledger.cursor < len(ledger)


def test_snapshot_is_detached():
    ledger, _ = _ledger(2)
    snapshot = ledger.snapshot()
    ledger.append(_event(5))

    assert len(snapshot.events) == 2
    assert snapshot.current is snapshot.events[1]


def test_stats():
    ledger, events = _ledger(12)

    stats = ledger.stats(recent=10)
    assert stats.total_events == 12
    assert stats.events_by_kind == {EventKind.UPDATED: 12}
    assert stats.recent_events == tuple(events[2:])


def test_clear():
    ledger, _ = _ledger(3)
    ledger.clear()
    assert len(ledger) == 0
    assert ledger.cursor == -1


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        HistoryLedger(capacity=0)
