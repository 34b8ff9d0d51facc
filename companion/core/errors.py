"""
Error types for the character companion core.

Validation and store failures propagate to the caller of a mutation;
``NoHistory`` and ``HandlerFailure`` never leave the event bus.
"""

from __future__ import annotations

from typing import Any, Sequence


class CompanionError(Exception):
    """Base exception for all companion errors."""
    pass


class ValidationFailed(CompanionError):
    """One or more character data rules were violated.

    Attributes:
        errors: Every violated rule, in the order they were checked
    """

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__(", ".join(self.errors) or "Validation failed")


class StoreFailure(CompanionError):
    """The character store rejected or failed an operation."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.cause = cause


class CharacterNotFound(StoreFailure, LookupError):
    """No character exists for the requested id."""

    def __init__(self, character_id: str, operation: str | None = None):
        super().__init__(f"Character not found: {character_id}", operation=operation)
        self.character_id = character_id


class NoHistory(CompanionError):
    """Undo/redo requested while the history cursor is at a boundary."""
    pass


class HandlerFailure(CompanionError):
    """A subscriber handler raised while an event was being delivered."""

    def __init__(self, handler_name: str, event_kind: Any, cause: BaseException):
        super().__init__(f"Handler '{handler_name}' failed on {event_kind}: {cause!r}")
        self.handler_name = handler_name
        self.event_kind = event_kind
        self.cause = cause
