"""
Companion Domain - character mutation services.
"""

from companion.domain.character import BulkUpdate, CharacterService, ValidationResult, validate_character_data

__all__ = [
    "BulkUpdate",
    "CharacterService",
    "ValidationResult",
    "validate_character_data",
]
