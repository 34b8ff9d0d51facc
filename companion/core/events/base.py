"""
Base Event Classes.

Defines the immutable Event record published on the character event bus.
Every event has a ``kind`` from a closed enumeration, and the kind decides
the payload model (see ``PAYLOAD_TYPES``).
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from companion.core.events.payloads import (
    AbilityScorePayload,
    CharacterChangePayload,
    DiceRollPayload,
    ErrorPayload,
    EventPayload,
    HitPointChangePayload,
    SavingThrowPayload,
    SkillProficiencyPayload,
)
from companion.utils.ids import generate_event_id


# ============================================================================
# Event Kind Enum
# ============================================================================


class EventKind(str, Enum):
    """Kinds of events published on the bus."""
    # Character lifecycle
    CREATED = "character_created"
    UPDATED = "character_updated"
    DELETED = "character_deleted"

    # Sheet details
    ABILITY_SCORE_UPDATED = "ability_score_updated"
    SAVING_THROW_PROFICIENCY_UPDATED = "saving_throw_proficiency_updated"
    SKILL_PROFICIENCY_UPDATED = "skill_proficiency_updated"

    # Combat
    DAMAGE_APPLIED = "damage_applied"
    HEALING_RECEIVED = "healing_received"

    # Session
    DICE_ROLL = "dice_roll"

    # System
    ERROR_OCCURRED = "error_occurred"


PAYLOAD_TYPES: dict[EventKind, type[BaseModel]] = {
    EventKind.CREATED: CharacterChangePayload,
    EventKind.UPDATED: CharacterChangePayload,
    EventKind.DELETED: CharacterChangePayload,
    EventKind.ABILITY_SCORE_UPDATED: AbilityScorePayload,
    EventKind.SAVING_THROW_PROFICIENCY_UPDATED: SavingThrowPayload,
    EventKind.SKILL_PROFICIENCY_UPDATED: SkillProficiencyPayload,
    EventKind.DAMAGE_APPLIED: HitPointChangePayload,
    EventKind.HEALING_RECEIVED: HitPointChangePayload,
    EventKind.DICE_ROLL: DiceRollPayload,
    EventKind.ERROR_OCCURRED: ErrorPayload,
}

# Kinds republished by undo; anything missing maps to itself.
INVERSE_KINDS: dict[EventKind, EventKind] = {
    EventKind.CREATED: EventKind.DELETED,
    EventKind.DELETED: EventKind.CREATED,
    EventKind.DAMAGE_APPLIED: EventKind.HEALING_RECEIVED,
    EventKind.HEALING_RECEIVED: EventKind.DAMAGE_APPLIED,
    EventKind.UPDATED: EventKind.UPDATED,
}


def inverse_kind(kind: EventKind) -> EventKind:
    return INVERSE_KINDS.get(kind, kind)


# ============================================================================
# Event
# ============================================================================


class Event(BaseModel):
    """Immutable record of something that happened to a character.

    Attributes:
        id: Unique event ID
        kind: Classification of the event; decides the payload model
        timestamp: Assigned by the bus at publish time when left empty
        campaign_id: Campaign scope for entity-scoped events
        is_global: Cross-cutting events (errors, dice rolls)
        actor_id: Who caused the event (back-reference only)
        target_id: Who/what the event is aimed at (back-reference only)
        payload: Kind-specific payload
    """

    id: str = Field(default_factory=generate_event_id)
    kind: EventKind
    timestamp: Optional[datetime] = None
    campaign_id: Optional[str] = None
    is_global: bool = False
    actor_id: Optional[str] = None
    target_id: Optional[str] = None
    payload: EventPayload

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _coerce_payload(cls, data: Any) -> Any:
        # Plain-dict payloads are parsed with the model registered for the kind
        # rather than left to union guessing.
        if not isinstance(data, Mapping):
            return data
        kind, payload = data.get("kind"), data.get("payload")
        if kind is None or not isinstance(payload, Mapping):
            return data
        payload_type = PAYLOAD_TYPES[EventKind(kind)]
        return {**data, "payload": payload_type.model_validate(payload)}

    @model_validator(mode="after")
    def _check_payload_matches_kind(self) -> "Event":
        expected = PAYLOAD_TYPES[self.kind]
        if type(self.payload) is not expected:
            raise ValueError(
                f"{self.kind.name} events carry {expected.__name__}, "
                f"got {type(self.payload).__name__}"
            )
        return self

    def __str__(self) -> str:
        return f"Event({self.kind.value}: {self.character_id or '-'})"

    @property
    def character_id(self) -> Optional[str]:
        return getattr(self.payload, "character_id", None)

    @property
    def metadata(self) -> dict[str, Any]:
        return self.payload.metadata

    def stamped(self, timestamp: datetime) -> "Event":
        """Copy of this event with ``timestamp`` set."""
        return self.model_copy(update={"timestamp": timestamp})

    def relabelled(self, kind: EventKind) -> "Event":
        """Copy of this event under another kind sharing the same payload model."""
        if PAYLOAD_TYPES[kind] is not PAYLOAD_TYPES[self.kind]:
            raise ValueError(f"Cannot relabel {self.kind.name} as {kind.name}")
        return self.model_copy(update={"kind": kind})
