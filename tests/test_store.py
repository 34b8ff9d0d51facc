"""In-memory character store tests."""

import unittest

from companion.core.errors import CharacterNotFound, StoreFailure
from companion.core.models.character import Character
from companion.infrastructure.store import CharacterStore, InMemoryCharacterStore


class InMemoryCharacterStoreTest(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.store = InMemoryCharacterStore()

    async def test_satisfies_protocol(self) -> None:
        self.assertIsInstance(self.store, CharacterStore)

    async def test_create_assigns_sequential_ids(self) -> None:
        first = await self.store.create({"name": "Aria"})
        second = await self.store.create({"name": "Brom"})

        self.assertEqual((first.id, second.id), ("c1", "c2"))
        self.assertEqual(len(self.store), 2)

    async def test_create_honours_explicit_id(self) -> None:
        character = await self.store.create({"id": "hero", "name": "Aria"})
        self.assertEqual(character.id, "hero")

        with self.assertRaises(ValueError):
            await self.store.create({"id": "hero", "name": "Again"})

    async def test_get_missing(self) -> None:
        with self.assertRaises(CharacterNotFound) as ctx:
            await self.store.get_by_id("nope")

        self.assertIsInstance(ctx.exception, StoreFailure)
        self.assertIsInstance(ctx.exception, LookupError)
        self.assertEqual(ctx.exception.character_id, "nope")

    async def test_update_is_shallow_and_keeps_id(self) -> None:
        await self.store.create(
            {"name": "Aria", "ability_scores": {"strength": 8, "dexterity": 16}}
        )

        updated = await self.store.update("c1", {"id": "other", "ability_scores": {"strength": 12}})

        self.assertEqual(updated.id, "c1")
        self.assertEqual(updated.ability_scores.strength, 12)
        # Nested blocks are replaced whole, so dexterity falls back to its default
        self.assertEqual(updated.ability_scores.dexterity, 10)

    async def test_delete(self) -> None:
        await self.store.create({"name": "Aria"})
        await self.store.delete("c1")

        self.assertNotIn("c1", self.store)
        with self.assertRaises(CharacterNotFound):
            await self.store.delete("c1")

    async def test_update_skill_proficiency_replaces_entry(self) -> None:
        await self.store.create({"name": "Aria"})

        await self.store.update_skill_proficiency("c1", "stealth", True, False)
        await self.store.update_skill_proficiency("c1", "stealth", True, True)

        character = await self.store.get_by_id("c1")
        self.assertEqual(len(character.skill_proficiencies), 1)
        self.assertTrue(character.skill("stealth").expertise)

    async def test_seed_characters(self) -> None:
        store = InMemoryCharacterStore([Character(id="seed", name="Old")])
        self.assertEqual((await store.get_by_id("seed")).name, "Old")

        with self.assertRaises(ValueError):
            InMemoryCharacterStore([Character(name="No id")])


if __name__ == "__main__":
    unittest.main()
