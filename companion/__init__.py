"""D&D companion character events package."""

from .core.event_bus import EventBus
from .core.events import Event, EventKind
from .domain.character import CharacterService
from .infrastructure import InMemoryCharacterStore

__version__ = "0.1.0"

__all__ = ["CharacterService", "Event", "EventBus", "EventKind", "InMemoryCharacterStore"]
