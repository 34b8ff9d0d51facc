"""
Companion Infrastructure - character store adapters.
"""

from companion.infrastructure.store import CharacterStore, InMemoryCharacterStore

__all__ = ["CharacterStore", "InMemoryCharacterStore"]
