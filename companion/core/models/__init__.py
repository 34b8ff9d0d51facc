"""
Core Models - character snapshots and dice rolls.
"""

from companion.core.models.character import (
    ABILITY_NAMES,
    AbilityScores,
    Character,
    Currency,
    HitPoints,
    SkillProficiency,
    ability_modifier,
    normalize_ability,
)
from companion.core.models.dice import RollBuilder, RollResult, parse_notation

__all__ = [
    "ABILITY_NAMES",
    "AbilityScores",
    "Character",
    "Currency",
    "HitPoints",
    "SkillProficiency",
    "ability_modifier",
    "normalize_ability",
    "RollBuilder",
    "RollResult",
    "parse_notation",
]
