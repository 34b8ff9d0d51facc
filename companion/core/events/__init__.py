"""
Core Events - immutable event records for history, fan-out and undo.
"""

from companion.core.events.base import (
    INVERSE_KINDS,
    PAYLOAD_TYPES,
    Event,
    EventKind,
    inverse_kind,
)
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

__all__ = [
    "INVERSE_KINDS",
    "PAYLOAD_TYPES",
    "Event",
    "EventKind",
    "inverse_kind",
    "AbilityScorePayload",
    "CharacterChangePayload",
    "DiceRollPayload",
    "ErrorPayload",
    "EventPayload",
    "HitPointChangePayload",
    "SavingThrowPayload",
    "SkillProficiencyPayload",
]
