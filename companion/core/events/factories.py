"""
Event factory helpers.

Build well-formed events for the common character operations so call sites
do not assemble payloads by hand.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from companion.core.events.base import Event, EventKind
from companion.core.events.payloads import (
    AbilityScorePayload,
    CharacterChangePayload,
    DiceRollPayload,
    ErrorPayload,
    HitPointChangePayload,
    SavingThrowPayload,
    SkillProficiencyPayload,
)
from companion.core.models.character import Character
from companion.core.models.dice import RollResult


def _metadata(source: str, operation_type: str | None, extra: Mapping[str, Any] | None) -> dict[str, Any]:
    metadata: dict[str, Any] = {"source": source}
    if operation_type is not None:
        metadata["operation_type"] = operation_type
    if extra:
        metadata.update(extra)
    return metadata


def create_character_created_event(
    character: Character,
    source: str = "character-creation",
    metadata: Mapping[str, Any] | None = None,
) -> Event:
    return Event(
        kind=EventKind.CREATED,
        campaign_id=character.campaign_id,
        target_id=character.id,
        payload=CharacterChangePayload(
            character_id=character.id or "",
            new_state=character,
            metadata=_metadata(source, "create", metadata),
        ),
    )


def create_character_updated_event(
    character_id: str,
    new_state: Character,
    changes: Mapping[str, Any],
    previous_state: Optional[Character] = None,
    source: str = "character-dashboard",
    metadata: Mapping[str, Any] | None = None,
) -> Event:
    return Event(
        kind=EventKind.UPDATED,
        campaign_id=new_state.campaign_id,
        target_id=character_id,
        payload=CharacterChangePayload(
            character_id=character_id,
            previous_state=previous_state,
            new_state=new_state,
            changes=dict(changes),
            metadata=_metadata(source, "update", metadata),
        ),
    )


def create_character_deleted_event(
    previous_state: Character,
    source: str = "character-dashboard",
    metadata: Mapping[str, Any] | None = None,
) -> Event:
    return Event(
        kind=EventKind.DELETED,
        campaign_id=previous_state.campaign_id,
        target_id=previous_state.id,
        payload=CharacterChangePayload(
            character_id=previous_state.id or "",
            previous_state=previous_state,
            metadata=_metadata(source, "delete", metadata),
        ),
    )


def create_ability_score_event(
    previous_state: Character,
    new_state: Character,
    ability: str,
    old_score: int,
    new_score: int,
    modifier_change: int,
) -> Event:
    return Event(
        kind=EventKind.ABILITY_SCORE_UPDATED,
        campaign_id=new_state.campaign_id,
        target_id=new_state.id,
        payload=AbilityScorePayload(
            character_id=new_state.id or previous_state.id or "",
            previous_state=previous_state,
            new_state=new_state,
            ability=ability,
            old_score=old_score,
            new_score=new_score,
            modifier_change=modifier_change,
            metadata=_metadata("ability-card", "update", None),
        ),
    )


def create_saving_throw_event(
    previous_state: Character,
    new_state: Character,
    ability: str,
    proficient: bool,
) -> Event:
    return Event(
        kind=EventKind.SAVING_THROW_PROFICIENCY_UPDATED,
        campaign_id=new_state.campaign_id,
        target_id=new_state.id,
        payload=SavingThrowPayload(
            character_id=new_state.id or previous_state.id or "",
            previous_state=previous_state,
            new_state=new_state,
            changes={"saving_throws": dict(new_state.saving_throws)},
            ability=ability,
            proficient=proficient,
            metadata=_metadata("saving-throws-card", "update", None),
        ),
    )


def create_skill_proficiency_event(
    previous_state: Character,
    new_state: Character,
    skill: str,
    proficient: bool,
    expertise: bool,
) -> Event:
    return Event(
        kind=EventKind.SKILL_PROFICIENCY_UPDATED,
        campaign_id=new_state.campaign_id,
        target_id=new_state.id,
        payload=SkillProficiencyPayload(
            character_id=new_state.id or previous_state.id or "",
            previous_state=previous_state,
            new_state=new_state,
            skill=skill,
            proficient=proficient,
            expertise=expertise,
            metadata=_metadata("skills-card", "update", None),
        ),
    )


def create_hit_point_event(
    kind: EventKind,
    previous_state: Character,
    new_state: Character,
    amount: int,
    damage_type: str | None = None,
    source: str | None = None,
    actor_id: str | None = None,
) -> Event:
    """DAMAGE_APPLIED or HEALING_RECEIVED event."""
    if kind not in (EventKind.DAMAGE_APPLIED, EventKind.HEALING_RECEIVED):
        raise ValueError(f"Not a hit point event kind: {kind}")
    hit_points = new_state.hit_points.model_dump() if new_state.hit_points else None
    return Event(
        kind=kind,
        campaign_id=new_state.campaign_id,
        actor_id=actor_id,
        target_id=new_state.id,
        payload=HitPointChangePayload(
            character_id=new_state.id or previous_state.id or "",
            previous_state=previous_state,
            new_state=new_state,
            changes={"hit_points": hit_points},
            amount=amount,
            damage_type=damage_type,
            source=source,
            metadata=_metadata("combat-tracker", "update", None),
        ),
    )


def create_dice_roll_event(roll: RollResult, actor_id: str | None = None) -> Event:
    return Event(
        kind=EventKind.DICE_ROLL,
        is_global=True,
        actor_id=actor_id,
        payload=DiceRollPayload(roll=roll, metadata={"source": "dice-roller"}),
    )


def create_error_event(
    error: BaseException | str,
    operation: str,
    context: Mapping[str, Any] | None = None,
    severity: str = "error",
) -> Event:
    """Global ERROR_OCCURRED event; ``context`` always includes the operation name."""
    message = error if isinstance(error, str) else (str(error) or type(error).__name__)
    return Event(
        kind=EventKind.ERROR_OCCURRED,
        is_global=True,
        payload=ErrorPayload(
            error=message,
            context={"operation": operation, **(context or {})},
            metadata={"severity": severity},
        ),
    )
