"""
Character store interface and an in-memory implementation.

The store is the source of truth for character state. The mutation service
only talks to it through ``CharacterStore``; ``InMemoryCharacterStore`` backs
the CLI demo and the test suite.
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Iterable, Mapping, Protocol, runtime_checkable

from companion.core.errors import CharacterNotFound
from companion.core.models.character import Character, SkillProficiency
from companion.utils.logging import get_logger

logger = get_logger(__name__)


# ============================================================================
# Protocols
# ============================================================================


@runtime_checkable
class CharacterStore(Protocol):
    """Async persistence boundary for characters."""

    async def get_by_id(self, character_id: str) -> Character:
        """Return the character or raise ``CharacterNotFound``."""
        ...

    async def create(self, data: Mapping[str, Any]) -> Character:
        ...

    async def update(self, character_id: str, patch: Mapping[str, Any]) -> Character:
        ...

    async def delete(self, character_id: str) -> None:
        ...

    async def update_skill_proficiency(
        self,
        character_id: str,
        skill: str,
        proficient: bool,
        expertise: bool,
    ) -> None:
        ...


# ============================================================================
# In-Memory Store
# ============================================================================


class InMemoryCharacterStore:
    """Dict-backed ``CharacterStore``.

    Ids come from ``id_factory`` (default: "c1", "c2", ...). Patches are
    shallow: a nested block such as ``ability_scores`` is replaced whole.
    """

    def __init__(
        self,
        characters: Iterable[Character] = (),
        id_factory: Callable[[], str] | None = None,
    ):
        self._characters: dict[str, Character] = {}
        counter = itertools.count(1)
        self._id_factory = id_factory or (lambda: f"c{next(counter)}")
        for character in characters:
            if character.id is None:
                raise ValueError("Seed characters must have an id")
            self._characters[character.id] = character

    def __len__(self) -> int:
        return len(self._characters)

    def __contains__(self, character_id: object) -> bool:
        return character_id in self._characters

    async def get_by_id(self, character_id: str) -> Character:
        try:
            return self._characters[character_id]
        except KeyError:
            raise CharacterNotFound(character_id, operation="get_by_id") from None

    async def create(self, data: Mapping[str, Any]) -> Character:
        payload = dict(data)
        character_id = payload.pop("id", None) or self._id_factory()
        if character_id in self._characters:
            raise ValueError(f"Character id already exists: {character_id}")
        character = Character.model_validate({**payload, "id": character_id})
        self._characters[character_id] = character
        logger.debug(f"Stored new character {character}")
        return character

    async def update(self, character_id: str, patch: Mapping[str, Any]) -> Character:
        current = await self.get_by_id(character_id)
        merged = current.to_data()
        merged.update({k: v for k, v in patch.items() if k != "id"})
        character = Character.model_validate(merged)
        self._characters[character_id] = character
        return character

    async def delete(self, character_id: str) -> None:
        if character_id not in self._characters:
            raise CharacterNotFound(character_id, operation="delete")
        del self._characters[character_id]

    async def update_skill_proficiency(
        self,
        character_id: str,
        skill: str,
        proficient: bool,
        expertise: bool,
    ) -> None:
        current = await self.get_by_id(character_id)
        entry = SkillProficiency(skill=skill, proficient=proficient, expertise=expertise)
        skills = [s for s in current.skill_proficiencies if s.skill != skill]
        skills.append(entry)
        self._characters[character_id] = current.model_copy(update={"skill_proficiencies": skills})
