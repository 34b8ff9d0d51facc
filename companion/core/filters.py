"""
Subscription filters.

A filter is a conjunction of optional fields; absent fields are wildcards.
``matches`` is a pure predicate and never raises.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from companion.core.events.base import Event, EventKind

KindSpec = Union[EventKind, frozenset[EventKind]]


def _parse_kind(value: Any) -> Any:
    # Accept enum members, values ("character_updated") and names ("UPDATED").
    if isinstance(value, str) and not isinstance(value, EventKind):
        if value in EventKind.__members__:
            return EventKind[value]
    return value


class EventFilter(BaseModel):
    """Which events a subscription wants.

    Attributes:
        kind: A single kind, or a collection of acceptable kinds
        character_id: Matches ``payload.character_id``
        campaign_id: Matches ``event.campaign_id``
        target_id: Matches ``event.target_id``
        is_global: Matches ``event.is_global``
        operation_type: Matches ``payload.metadata['operation_type']``
        metadata_match: Every pair must be equal in ``payload.metadata``
    """

    kind: Optional[KindSpec] = None
    character_id: Optional[str] = None
    campaign_id: Optional[str] = None
    target_id: Optional[str] = None
    is_global: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("is_global", "global")
    )
    operation_type: Optional[str] = None
    metadata_match: Optional[dict[str, Any]] = Field(
        default=None, validation_alias=AliasChoices("metadata_match", "metadata")
    )

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(_parse_kind(v) for v in value)
        return _parse_kind(value)


FilterLike = Union[EventFilter, Mapping[str, Any], None]


def coerce_filter(value: FilterLike) -> Optional[EventFilter]:
    """Normalise a mapping into an ``EventFilter`` (unknown keys are dropped).

    Raises:
        pydantic.ValidationError: if a known field has an invalid value
    """
    if value is None or isinstance(value, EventFilter):
        return value
    return EventFilter.model_validate(dict(value))


def matches(event: Event, filter: FilterLike = None) -> bool:
    """Return True if ``event`` satisfies every field present in ``filter``."""
    if filter is None:
        return True
    if not isinstance(filter, EventFilter):
        try:
            filter = coerce_filter(filter)
        except ValidationError:
            return False
        if filter is None:
            return True

    if filter.kind is not None:
        if isinstance(filter.kind, frozenset):
            if event.kind not in filter.kind:
                return False
        elif event.kind != filter.kind:
            return False

    if filter.is_global is not None and event.is_global != filter.is_global:
        return False
    if filter.campaign_id is not None and event.campaign_id != filter.campaign_id:
        return False
    if filter.target_id is not None and event.target_id != filter.target_id:
        return False
    if filter.character_id is not None and event.character_id != filter.character_id:
        return False

    metadata = event.metadata
    if filter.operation_type is not None and metadata.get("operation_type") != filter.operation_type:
        return False
    if filter.metadata_match:
        for key, value in filter.metadata_match.items():
            if key not in metadata or metadata[key] != value:
                return False

    return True
