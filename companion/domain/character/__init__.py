from companion.domain.character.service import BulkUpdate, CharacterService
from companion.domain.character.validation import ValidationResult, validate_character_data

__all__ = ["BulkUpdate", "CharacterService", "ValidationResult", "validate_character_data"]
