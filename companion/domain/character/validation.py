"""Structural validation of character data.

Runs on raw mappings (create data, or current state merged with a patch)
before anything reaches the store. Every violated rule is reported, not
just the first one, so the UI can show all field errors at once.

Checks:
- name and race present
- level within 1-20
- ability scores present, each an integer within 3-20 (non-numbers rejected)
- hit points present, max >= 1, current present, current and temporary
  non-negative numbers
- currency amounts non-negative numbers
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import Any, Mapping

from pydantic import BaseModel

from companion.core.errors import ValidationFailed

MIN_LEVEL, MAX_LEVEL = 1, 20
MIN_ABILITY_SCORE, MAX_ABILITY_SCORE = 3, 20


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    def raise_for_errors(self) -> None:
        """Raise ``ValidationFailed`` carrying every error, if any."""
        if not self.valid:
            raise ValidationFailed(self.errors)


def _as_mapping(value: Any) -> Mapping[str, Any] | None:
    if value is None:
        return None
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, Mapping):
        return value
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_integral(value: Any) -> bool:
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def validate_character_data(data: Mapping[str, Any] | BaseModel) -> ValidationResult:
    """Validate a full prospective character state.

    Args:
        data: Character fields (snake_case keys) or a ``Character`` model

    Returns:
        ValidationResult with all errors and non-blocking warnings
    """
    character = _as_mapping(data) or {}
    errors: list[str] = []
    warnings: list[str] = []

    name = character.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Character name is required")

    if not character.get("race"):
        errors.append("Character race is required")

    level = character.get("level")
    if not _is_number(level) or not MIN_LEVEL <= level <= MAX_LEVEL:
        errors.append(f"Character level must be between {MIN_LEVEL} and {MAX_LEVEL}")
    elif not _is_integral(level):
        errors.append("Character level must be an integer")

    ability_scores = _as_mapping(character.get("ability_scores"))
    if ability_scores is None:
        errors.append("Ability scores are required")
    else:
        for ability, score in ability_scores.items():
            if not _is_number(score):
                errors.append(
                    f"{ability} must be an integer between {MIN_ABILITY_SCORE} and {MAX_ABILITY_SCORE}"
                )
                continue
            if not MIN_ABILITY_SCORE <= score <= MAX_ABILITY_SCORE:
                errors.append(
                    f"{ability} must be between {MIN_ABILITY_SCORE} and {MAX_ABILITY_SCORE}"
                )
            if not _is_integral(score):
                errors.append(f"{ability} must be an integer")

    hit_points = _as_mapping(character.get("hit_points"))
    if hit_points is None:
        errors.append("Hit points are required")
    else:
        hp_max = hit_points.get("max")
        if not _is_number(hp_max) or hp_max < 1:
            errors.append("Max HP must be at least 1")

        current = hit_points.get("current")
        if not _is_number(current):
            errors.append("Current HP must be a number")
        elif current < 0:
            errors.append("Current HP cannot be negative")

        # temporary may be omitted (defaults to 0)
        temporary = hit_points.get("temporary", 0)
        if not _is_number(temporary):
            errors.append("Temporary HP must be a number")
        elif temporary < 0:
            errors.append("Temporary HP cannot be negative")

    currency = _as_mapping(character.get("currency"))
    if currency:
        for coin, amount in currency.items():
            if not _is_number(amount):
                errors.append(f"{coin} currency must be a number")
            elif amount < 0:
                errors.append(f"{coin} currency cannot be negative")

    if _is_number(level) and level > 1 and ability_scores is None:
        warnings.append("High-level characters should have defined ability scores")

    return ValidationResult(
        valid=not errors,
        errors=tuple(errors),
        warnings=tuple(warnings),
    )


def validate_skill_name(skill: str) -> ValidationResult:
    if not isinstance(skill, str) or not skill.strip():
        return ValidationResult(valid=False, errors=("Skill name is required",))
    return ValidationResult(valid=True)


def validate_hit_point_amount(amount: Any) -> ValidationResult:
    if not _is_number(amount) or not _is_integral(amount) or amount < 0:
        return ValidationResult(valid=False, errors=("Hit point amount must be a non-negative integer",))
    return ValidationResult(valid=True)
