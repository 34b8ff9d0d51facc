"""Character mutation service.

Every mutation follows the same template: load current state where a delta
is needed, validate the prospective state, call the store, publish a
success event carrying previous/new state, and return the store's result.
Validation and store failures publish a global ERROR_OCCURRED event and are
re-raised to the caller.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Awaitable, Iterable, Mapping, Optional, TypeVar, Union

from companion.app.config import CompanionConfig
from companion.core.errors import CompanionError, StoreFailure, ValidationFailed
from companion.core.event_bus import EventBus
from companion.core.events.base import Event, EventKind, inverse_kind
from companion.core.events.factories import (
    create_ability_score_event,
    create_character_created_event,
    create_character_deleted_event,
    create_character_updated_event,
    create_dice_roll_event,
    create_error_event,
    create_hit_point_event,
    create_saving_throw_event,
    create_skill_proficiency_event,
)
from companion.core.events.payloads import CharacterChangePayload
from companion.core.models.character import (
    ABILITY_NAMES,
    Character,
    HitPoints,
    ability_modifier,
    normalize_ability,
)
from companion.core.models.dice import RollBuilder, RollResult
from companion.domain.character.validation import (
    ValidationResult,
    validate_character_data,
    validate_hit_point_amount,
    validate_skill_name,
)
from companion.infrastructure.store import CharacterStore
from companion.utils.logging import get_logger, log_error, log_operation

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class BulkUpdate:
    """One entry of a bulk update: patch ``patch`` onto character ``id``."""
    id: str
    patch: Mapping[str, Any]

    @classmethod
    def coerce(cls, value: Union["BulkUpdate", Mapping[str, Any], tuple]) -> "BulkUpdate":
        """Accept a ``BulkUpdate``, an ``{"id", "patch"}`` mapping or an ``(id, patch)`` pair.

        Raises:
            ValidationFailed: if the entry has no id or no usable patch
        """
        if isinstance(value, BulkUpdate):
            return value
        try:
            if isinstance(value, Mapping):
                character_id = value["id"]
                patch = value.get("patch", value.get("updates", {}))
            else:
                character_id, patch = value
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationFailed([f"Malformed bulk update entry: {value!r}"]) from exc
        if not isinstance(patch, Mapping):
            raise ValidationFailed([f"Bulk update patch must be a mapping: {patch!r}"])
        return cls(id=character_id, patch=patch)


def merge_patch(current: Mapping[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    """Expand partial nested blocks in ``patch`` against the current state.

    Stores apply patches shallowly, so ``{"ability_scores": {"strength": 12}}``
    becomes the full ability block with only strength changed.
    """
    merged = dict(patch)
    for key, value in patch.items():
        existing = current.get(key)
        if isinstance(value, Mapping) and isinstance(existing, Mapping):
            merged[key] = {**existing, **value}
    return merged


class CharacterService:
    """Public mutation surface for characters.

    Args:
        event_bus: Bus that records and fans out every event
        store: Source of truth for character state
        config: Defaults and undo mode (``CompanionConfig()`` if omitted)
    """

    def __init__(
        self,
        event_bus: EventBus,
        store: CharacterStore,
        config: Optional[CompanionConfig] = None,
    ):
        self.event_bus = event_bus
        self.store = store
        self.config = config or CompanionConfig()

    # ------------------------------------------------------------------
    # Shared plumbing
    # ------------------------------------------------------------------

    async def _call_store(self, operation: str, call: Awaitable[T]) -> T:
        """Await a store call, wrapping foreign exceptions in ``StoreFailure``."""
        try:
            return await call
        except CompanionError:
            raise
        except Exception as exc:
            raise StoreFailure(
                f"{operation} failed: {exc}", operation=operation, cause=exc
            ) from exc

    async def _report_failure(
        self,
        operation: str,
        error: BaseException,
        context: Mapping[str, Any],
    ) -> None:
        log_error(logger, operation, error, context)
        await self.event_bus.publish(create_error_event(error, operation, context))

    async def _load(self, operation: str, character_id: str) -> Character:
        return await self._call_store(operation, self.store.get_by_id(character_id))

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def validate(self, data: Mapping[str, Any] | Character) -> ValidationResult:
        """Check character data without touching the store or the bus."""
        return validate_character_data(data)

    async def create(self, data: Mapping[str, Any]) -> Character:
        operation = "create_character"
        try:
            validate_character_data(data).raise_for_errors()
            character = await self._call_store(operation, self.store.create(data))
        except CompanionError as exc:
            await self._report_failure(operation, exc, {"character_data": dict(data)})
            raise

        log_operation(logger, "Created character", {"id": character.id, "name": character.name})
        await self.event_bus.publish(create_character_created_event(character))
        return character

    async def update(
        self,
        character_id: str,
        patch: Mapping[str, Any],
        source: str = "character-dashboard",
    ) -> Character:
        operation = "update_character"
        try:
            current = await self._load(operation, character_id)
            current_data = current.to_data()
            full_patch = merge_patch(current_data, patch)
            validate_character_data({**current_data, **full_patch}).raise_for_errors()
            updated = await self._call_store(operation, self.store.update(character_id, full_patch))
        except CompanionError as exc:
            await self._report_failure(
                operation, exc, {"character_id": character_id, "updates": dict(patch)}
            )
            raise

        log_operation(logger, "Updated character", {"id": character_id, "fields": ",".join(patch)})
        await self.event_bus.publish(
            create_character_updated_event(
                character_id,
                new_state=updated,
                changes=patch,
                previous_state=current,
                source=source,
            )
        )
        return updated

    async def delete(self, character_id: str) -> None:
        operation = "delete_character"
        try:
            existing = await self._load(operation, character_id)
            await self._call_store(operation, self.store.delete(character_id))
        except CompanionError as exc:
            await self._report_failure(operation, exc, {"character_id": character_id})
            raise

        log_operation(logger, "Deleted character", {"id": character_id})
        await self.event_bus.publish(create_character_deleted_event(existing))

    # ------------------------------------------------------------------
    # Bulk / read-only
    # ------------------------------------------------------------------

    async def bulk_update(
        self,
        operations: Iterable[Union[BulkUpdate, Mapping[str, Any], tuple]],
    ) -> list[Character]:
        """Apply updates one after another, skipping the ones that fail.

        Returns:
            Only the successfully updated characters; compare its length with
            the number of operations to detect partial failure.
        """
        results: list[Character] = []
        entries = list(operations)
        for entry in entries:
            try:
                op = BulkUpdate.coerce(entry)
                results.append(await self.update(op.id, op.patch, source="bulk-update"))
            except CompanionError as exc:
                log_error(logger, "bulk_update", exc, {"entry": entry})

        if len(results) != len(entries):
            logger.warning(f"Bulk update: {len(entries) - len(results)} of {len(entries)} operations failed")
        return results

    async def compare_characters(self, character_ids: Iterable[str]) -> dict[str, dict[str, Any]]:
        """Load several characters side by side; failed lookups map to ``{}``."""
        comparisons: dict[str, dict[str, Any]] = {}
        for character_id in character_ids:
            try:
                character = await self._load("compare_characters", character_id)
            except CompanionError as exc:
                log_error(logger, "compare_characters", exc, {"character_id": character_id})
                comparisons[character_id] = {}
            else:
                comparisons[character_id] = character.to_data()
        return comparisons

    # ------------------------------------------------------------------
    # Sheet details
    # ------------------------------------------------------------------

    async def update_ability_score(
        self,
        character_id: str,
        ability: str,
        new_score: int,
    ) -> Character:
        operation = "update_ability_score"
        context = {"character_id": character_id, "ability": ability, "new_score": new_score}
        try:
            try:
                ability_key = normalize_ability(ability)
            except ValueError as exc:
                raise ValidationFailed([str(exc)]) from exc

            current = await self._load(operation, character_id)
            default = self.config.default_ability_score
            base_scores = {name: current.ability_score(name, default) for name in ABILITY_NAMES}
            old_score = base_scores[ability_key]
            scores = {**base_scores, ability_key: new_score}

            validate_character_data({**current.to_data(), "ability_scores": scores}).raise_for_errors()
            updated = await self._call_store(
                operation, self.store.update(character_id, {"ability_scores": scores})
            )
        except CompanionError as exc:
            await self._report_failure(operation, exc, context)
            raise

        modifier_change = ability_modifier(new_score) - ability_modifier(old_score)
        log_operation(
            logger,
            "Updated ability score",
            {"id": character_id, "ability": ability_key, "old": old_score, "new": new_score},
        )
        await self.event_bus.publish(
            create_ability_score_event(
                previous_state=current,
                new_state=updated,
                ability=ability_key,
                old_score=old_score,
                new_score=new_score,
                modifier_change=modifier_change,
            )
        )
        return updated

    async def update_saving_throw_proficiency(
        self,
        character_id: str,
        ability: str,
        proficient: bool,
    ) -> Character:
        operation = "update_saving_throw_proficiency"
        context = {"character_id": character_id, "ability": ability, "proficient": proficient}
        try:
            try:
                ability_key = normalize_ability(ability)
            except ValueError as exc:
                raise ValidationFailed([str(exc)]) from exc

            current = await self._load(operation, character_id)
            saving_throws = {**current.saving_throws, ability_key: proficient}
            validate_character_data({**current.to_data(), "saving_throws": saving_throws}).raise_for_errors()
            updated = await self._call_store(
                operation, self.store.update(character_id, {"saving_throws": saving_throws})
            )
        except CompanionError as exc:
            await self._report_failure(operation, exc, context)
            raise

        await self.event_bus.publish(
            create_saving_throw_event(current, updated, ability=ability_key, proficient=proficient)
        )
        return updated

    async def update_skill_proficiency(
        self,
        character_id: str,
        skill: str,
        proficient: bool,
        expertise: bool = False,
    ) -> Character:
        """Persist a skill proficiency, then re-read the character.

        The store call returns nothing, so the character is fetched again to
        publish the authoritative new state.
        """
        operation = "update_skill_proficiency"
        context = {
            "character_id": character_id,
            "skill": skill,
            "proficient": proficient,
            "expertise": expertise,
        }
        try:
            validate_skill_name(skill).raise_for_errors()
            previous = await self._load(operation, character_id)
            await self._call_store(
                operation,
                self.store.update_skill_proficiency(character_id, skill, proficient, expertise),
            )
            updated = await self._load(operation, character_id)
        except CompanionError as exc:
            await self._report_failure(operation, exc, context)
            raise

        await self.event_bus.publish(
            create_skill_proficiency_event(
                previous, updated, skill=skill, proficient=proficient, expertise=expertise
            )
        )
        return updated

    # ------------------------------------------------------------------
    # Hit points
    # ------------------------------------------------------------------

    async def apply_damage(
        self,
        character_id: str,
        amount: int,
        damage_type: str | None = None,
        source: str | None = None,
    ) -> Character:
        """Reduce hit points, consuming temporary HP first; current HP floors at 0."""

        def damaged(hp: HitPoints) -> HitPoints:
            absorbed = min(hp.temporary, amount)
            return HitPoints(
                max=hp.max,
                current=max(hp.current - (amount - absorbed), 0),
                temporary=hp.temporary - absorbed,
            )

        return await self._change_hit_points(
            "apply_damage", EventKind.DAMAGE_APPLIED, character_id, amount, damaged,
            damage_type=damage_type, source=source,
        )

    async def apply_healing(
        self,
        character_id: str,
        amount: int,
        source: str | None = None,
    ) -> Character:
        """Restore hit points up to the maximum."""

        def healed(hp: HitPoints) -> HitPoints:
            return HitPoints(
                max=hp.max,
                current=min(hp.current + amount, hp.max),
                temporary=hp.temporary,
            )

        return await self._change_hit_points(
            "apply_healing", EventKind.HEALING_RECEIVED, character_id, amount, healed,
            source=source,
        )

    async def _change_hit_points(
        self,
        operation: str,
        kind: EventKind,
        character_id: str,
        amount: int,
        change,
        damage_type: str | None = None,
        source: str | None = None,
    ) -> Character:
        context = {"character_id": character_id, "amount": amount}
        try:
            validate_hit_point_amount(amount).raise_for_errors()
            current = await self._load(operation, character_id)
            if current.hit_points is None:
                raise ValidationFailed(["Hit points are required"])
            hit_points = change(current.hit_points).model_dump()
            validate_character_data({**current.to_data(), "hit_points": hit_points}).raise_for_errors()
            updated = await self._call_store(
                operation, self.store.update(character_id, {"hit_points": hit_points})
            )
        except CompanionError as exc:
            await self._report_failure(operation, exc, context)
            raise

        await self.event_bus.publish(
            create_hit_point_event(
                kind, current, updated, amount=int(amount), damage_type=damage_type, source=source
            )
        )
        return updated

    # ------------------------------------------------------------------
    # Dice
    # ------------------------------------------------------------------

    async def publish_dice_roll(
        self,
        roll: RollResult | RollBuilder,
        rng: random.Random | None = None,
        actor_id: str | None = None,
    ) -> Event:
        """Publish a global DICE_ROLL event; builders are rolled first."""
        operation = "publish_dice_roll"
        if isinstance(roll, RollBuilder):
            try:
                roll = roll.roll(rng)
            except ValueError as exc:
                error = ValidationFailed([str(exc)])
                await self._report_failure(operation, error, {"expression": roll.expression})
                raise error from exc

        return await self.event_bus.publish(create_dice_roll_event(roll, actor_id=actor_id))

    # ------------------------------------------------------------------
    # Undo / Redo
    # ------------------------------------------------------------------

    def can_undo(self) -> bool:
        return self.event_bus.can_undo()

    def can_redo(self) -> bool:
        return self.event_bus.can_redo()

    async def undo(self) -> Optional[Event]:
        """Undo the most recent event.

        In "notify" mode this is the bus undo. In "restore" mode the event
        under the cursor is reverted in the store first, then the inverse of
        that same event is announced.

        Returns:
            The re-emitted (inverse) event, or None if there was nothing to undo
        """
        if self.config.undo_mode != "restore":
            return await self.event_bus.undo()
        if not self.event_bus.can_undo():
            return None

        # Revert before moving the cursor so a failed restore leaves history intact
        undone = self.event_bus.history.current()
        await self._revert(undone)
        self.event_bus.history.undo()

        inverse = undone.relabelled(inverse_kind(undone.kind))
        await self.event_bus.replay(inverse)
        return inverse

    async def redo(self) -> Optional[Event]:
        if self.config.undo_mode != "restore":
            return await self.event_bus.redo()

        redone = self.event_bus.history.upcoming()
        if redone is None:
            return None
        await self._reapply(redone)
        self.event_bus.history.redo()
        await self.event_bus.replay(redone)
        return redone

    async def _revert(self, event: Event) -> None:
        payload = event.payload
        if not isinstance(payload, CharacterChangePayload):
            logger.debug(f"Nothing to restore for {event}")
            return

        operation = "undo"
        try:
            if event.kind == EventKind.CREATED:
                await self._call_store(operation, self.store.delete(payload.character_id))
            elif event.kind == EventKind.DELETED and payload.previous_state is not None:
                await self._call_store(operation, self.store.create(payload.previous_state.to_data()))
            elif payload.previous_state is not None:
                await self._call_store(
                    operation,
                    self.store.update(
                        payload.character_id, payload.previous_state.to_data(include_id=False)
                    ),
                )
        except CompanionError as exc:
            log_error(logger, operation, exc, {"event": event.id, "kind": event.kind.value})
            raise

        log_operation(logger, "Restored character", {"id": payload.character_id, "undone": event.kind.value})

    async def _reapply(self, event: Event) -> None:
        payload = event.payload
        if not isinstance(payload, CharacterChangePayload):
            logger.debug(f"Nothing to reapply for {event}")
            return

        operation = "redo"
        try:
            if event.kind == EventKind.DELETED:
                await self._call_store(operation, self.store.delete(payload.character_id))
            elif event.kind == EventKind.CREATED and payload.new_state is not None:
                await self._call_store(operation, self.store.create(payload.new_state.to_data()))
            elif payload.new_state is not None:
                await self._call_store(
                    operation,
                    self.store.update(payload.character_id, payload.new_state.to_data(include_id=False)),
                )
        except CompanionError as exc:
            log_error(logger, operation, exc, {"event": event.id, "kind": event.kind.value})
            raise

        log_operation(logger, "Reapplied character change", {"id": payload.character_id, "kind": event.kind.value})
