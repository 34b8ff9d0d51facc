"""
Event payload types.

Each event kind carries exactly one payload model; kinds that are inverses
of each other share a model so undo relabelling keeps payloads well-typed.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from companion.core.models.character import Character
from companion.core.models.dice import RollResult


class PayloadBase(BaseModel):
    """Fields shared by every payload."""

    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Free-form tags (source, operation_type, severity, ...)",
    )

    model_config = ConfigDict(frozen=True)

    @property
    def operation_type(self) -> Optional[str]:
        return self.metadata.get("operation_type")


# ============================================================================
# Character Mutation Payloads
# ============================================================================


class CharacterChangePayload(PayloadBase):
    """Create/update/delete of a character.

    ``previous_state`` is absent for creates; ``new_state`` is absent for
    deletes; ``changes`` holds the patch for updates.
    """

    character_id: str
    previous_state: Optional[Character] = None
    new_state: Optional[Character] = None
    changes: Optional[dict[str, Any]] = None


class AbilityScorePayload(CharacterChangePayload):
    ability: str
    old_score: int
    new_score: int
    modifier_change: int


class SavingThrowPayload(CharacterChangePayload):
    ability: str
    proficient: bool


class SkillProficiencyPayload(CharacterChangePayload):
    skill: str
    proficient: bool
    expertise: bool = False


class HitPointChangePayload(CharacterChangePayload):
    """Damage taken or healing received."""

    amount: int = Field(ge=0)
    damage_type: Optional[str] = None
    source: Optional[str] = None


# ============================================================================
# Other Payloads
# ============================================================================


class DiceRollPayload(PayloadBase):
    roll: RollResult


class ErrorPayload(PayloadBase):
    """A failed operation, reported for observability."""

    error: str
    context: dict[str, Any] = Field(default_factory=dict)


EventPayload = Union[
    AbilityScorePayload,
    SavingThrowPayload,
    SkillProficiencyPayload,
    HitPointChangePayload,
    CharacterChangePayload,
    DiceRollPayload,
    ErrorPayload,
]
