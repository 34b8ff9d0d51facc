"""
Character Models.

Immutable snapshots of a character as returned by the character store.
These are the values carried in event payloads as previous/new state; the
store remains the source of truth for current state.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


ABILITY_NAMES: tuple[str, ...] = (
    "strength",
    "dexterity",
    "constitution",
    "intelligence",
    "wisdom",
    "charisma",
)

DEFAULT_ABILITY_SCORE = 10


def ability_modifier(score: int) -> int:
    """5e-style ability modifier: floor((score - 10) / 2)."""
    return (score - 10) // 2


def normalize_ability(ability: str) -> str:
    """Map 'STR', 'Strength' or 'strength' onto the canonical field name."""
    key = ability.strip().lower()
    for name in ABILITY_NAMES:
        if key == name or key == name[:3]:
            return name
    raise ValueError(f"Unknown ability: {ability!r}")


# ============================================================================
# Value Objects
# ============================================================================


class AbilityScores(BaseModel):
    """The six ability scores."""

    strength: int = DEFAULT_ABILITY_SCORE
    dexterity: int = DEFAULT_ABILITY_SCORE
    constitution: int = DEFAULT_ABILITY_SCORE
    intelligence: int = DEFAULT_ABILITY_SCORE
    wisdom: int = DEFAULT_ABILITY_SCORE
    charisma: int = DEFAULT_ABILITY_SCORE

    model_config = ConfigDict(frozen=True)

    def modifier(self, ability: str) -> int:
        return ability_modifier(getattr(self, normalize_ability(ability)))


class HitPoints(BaseModel):
    max: int = 1
    current: int = 1
    temporary: int = 0

    model_config = ConfigDict(frozen=True)


class Currency(BaseModel):
    cp: int = 0
    sp: int = 0
    ep: int = 0
    gp: int = 0
    pp: int = 0

    model_config = ConfigDict(frozen=True)


class SkillProficiency(BaseModel):
    skill: str
    proficient: bool = False
    expertise: bool = False

    model_config = ConfigDict(frozen=True)


# ============================================================================
# Character
# ============================================================================


class Character(BaseModel):
    """Snapshot of a character sheet.

    Attributes:
        id: Store-assigned identifier
        name: Character name
        race: Race tag (e.g. 'ELF')
        character_class: Class tag (e.g. 'WIZARD')
        level: Character level, 1-20
        campaign_id: Campaign the character belongs to, if any
        owner_id: Owning user, if any
        ability_scores: The six ability scores
        hit_points: Max/current/temporary hit points
        currency: Coin purse
        saving_throws: Ability name -> proficient flag
        skill_proficiencies: Per-skill proficiency/expertise
    """

    id: Optional[str] = None
    name: str = ""
    race: Optional[str] = None
    character_class: Optional[str] = None
    level: int = 1
    campaign_id: Optional[str] = None
    owner_id: Optional[str] = None
    experience_points: int = 0
    ability_scores: Optional[AbilityScores] = None
    hit_points: Optional[HitPoints] = None
    currency: Optional[Currency] = None
    saving_throws: dict[str, bool] = Field(default_factory=dict)
    skill_proficiencies: list[SkillProficiency] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="allow")

    def __str__(self) -> str:
        return f"Character({self.id}: {self.name}, level {self.level})"

    def ability_score(self, ability: str, default: int = DEFAULT_ABILITY_SCORE) -> int:
        """Score for ``ability``, or ``default`` when no scores are recorded."""
        if self.ability_scores is None:
            return default
        return getattr(self.ability_scores, normalize_ability(ability))

    def skill(self, skill: str) -> Optional[SkillProficiency]:
        for entry in self.skill_proficiencies:
            if entry.skill == skill:
                return entry
        return None

    def to_data(self, include_id: bool = True) -> dict[str, Any]:
        """Plain-dict form used for merging patches and validating."""
        exclude = None if include_id else {"id"}
        return self.model_dump(exclude=exclude)
