"""Subscription filter tests.

``matches`` is a pure predicate, so these are plain pytest functions.
"""

import pytest
from pydantic import ValidationError

from companion.core.events.base import EventKind
from companion.core.events.factories import (
    create_character_created_event,
    create_character_updated_event,
    create_dice_roll_event,
    create_error_event,
)
from companion.core.filters import EventFilter, coerce_filter, matches
from companion.core.models.character import Character
from companion.core.models.dice import RollBuilder


def _character(character_id="c1", campaign_id="camp-1", **fields):
    return Character(id=character_id, name="Aria", race="ELF", campaign_id=campaign_id, **fields)


def _updated(character_id="c1", campaign_id="camp-1", source="character-dashboard"):
    character = _character(character_id, campaign_id)
    return create_character_updated_event(character_id, character, {"name": "Aria"}, source=source)


def test_absent_filter_matches_everything():
    event = _updated()
    assert matches(event)
    assert matches(event, None)
    assert matches(event, {})
    assert matches(event, EventFilter())


def test_single_kind():
    event = _updated()
    assert matches(event, {"kind": EventKind.UPDATED})
    assert matches(event, {"kind": "character_updated"})
    assert matches(event, {"kind": "UPDATED"})
    assert not matches(event, {"kind": EventKind.CREATED})


def test_kind_collection_matches_any_member():
    updated = _updated()
    created = create_character_created_event(_character())
    kinds = {"kind": [EventKind.UPDATED, EventKind.DELETED]}

    assert matches(updated, kinds)
    assert not matches(created, kinds)
    assert isinstance(coerce_filter(kinds).kind, frozenset)


def test_fields_are_conjunctive():
    event = _updated("c1", "camp-1")

    assert matches(event, {"kind": EventKind.UPDATED, "character_id": "c1", "campaign_id": "camp-1"})
    assert not matches(event, {"kind": EventKind.UPDATED, "character_id": "c2"})
    assert not matches(event, {"character_id": "c1", "campaign_id": "camp-2"})


def test_target_and_global():
    entity_event = _updated("c1")
    roll_event = create_dice_roll_event(RollBuilder().add("d20").roll())

    assert matches(entity_event, {"target_id": "c1"})
    assert matches(roll_event, {"global": True})
    assert matches(roll_event, {"is_global": True})
    assert not matches(entity_event, {"global": True})
    assert matches(entity_event, {"global": False})


def test_operation_type_and_metadata():
    event = _updated(source="bulk-update")

    assert event.metadata == {"source": "bulk-update", "operation_type": "update"}
    assert matches(event, {"operation_type": "update"})
    assert not matches(event, {"operation_type": "create"})
    assert matches(event, {"metadata": {"source": "bulk-update"}})
    assert not matches(event, {"metadata": {"source": "bulk-update", "missing": 1}})


def test_unknown_keys_ignored():
    event = _updated()
    assert matches(event, {"kind": EventKind.UPDATED, "colour": "blue"})
    assert coerce_filter({"colour": "blue"}) == EventFilter()


def test_error_event_filtered_by_global():
    event = create_error_event(ValueError("bad"), "update_character", {"character_id": "c1"})
    assert matches(event, {"kind": EventKind.ERROR_OCCURRED, "global": True})
    # Error payloads carry no character_id
    assert not matches(event, {"character_id": "c1"})


def test_invalid_filter_value():
    event = _updated()
    with pytest.raises(ValidationError):
        coerce_filter({"kind": "not_a_kind"})
    assert not matches(event, {"kind": "not_a_kind"})
