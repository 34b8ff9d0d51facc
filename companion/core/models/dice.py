"""
Dice roll composition.

``RollBuilder`` is an immutable value: every ``add``/``with_*`` call returns
a new builder, so a partially built roll can be shared and extended freely.
``roll()`` produces a ``RollResult`` suitable for a DICE_ROLL event.
"""

from __future__ import annotations

import random
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from companion.utils.clock import utc_now
from companion.utils.ids import generate_roll_id

# "d20", "2d6", "4D8" (modifiers are added separately via with_modifier)
_NOTATION_RE = re.compile(r"^\s*(\d*)d(\d+)\s*$", re.IGNORECASE)


def parse_notation(notation: str) -> tuple[int, int]:
    """Parse ``NdS`` into (count, sides). Raises ValueError for bad input."""
    match = _NOTATION_RE.match(notation)
    if not match:
        raise ValueError(f"Invalid dice notation: {notation!r}")
    count_str, sides_str = match.groups()
    count = int(count_str) if count_str else 1
    sides = int(sides_str)
    if count < 1:
        raise ValueError(f"Dice count must be at least 1: {notation!r}")
    if sides < 2:
        raise ValueError(f"Dice need at least 2 sides: {notation!r}")
    return count, sides


class RollResult(BaseModel):
    """Outcome of a roll, as exported to the event log."""

    id: str = Field(default_factory=generate_roll_id)
    label: Optional[str] = None
    notations: tuple[str, ...] = ()
    total: int
    individual_results: tuple[int, ...] = ()
    modifier: int = 0
    expression: str = ""
    created_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(frozen=True)


class RollBuilder(BaseModel):
    """Immutable builder for a composite roll such as ``2d6 + 1d4 + 3``."""

    notations: tuple[str, ...] = ()
    modifier: int = 0
    label: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def add(self, notation: str) -> "RollBuilder":
        count, sides = parse_notation(notation)
        return self.model_copy(update={"notations": self.notations + (f"{count}d{sides}",)})

    def with_modifier(self, modifier: int) -> "RollBuilder":
        return self.model_copy(update={"modifier": self.modifier + modifier})

    def with_label(self, label: str) -> "RollBuilder":
        return self.model_copy(update={"label": label})

    @property
    def expression(self) -> str:
        expr = " + ".join(self.notations)
        if not expr:
            return str(self.modifier)
        if self.modifier > 0:
            expr += f" + {self.modifier}"
        elif self.modifier < 0:
            expr += f" - {-self.modifier}"
        return expr

    def roll(self, rng: random.Random | None = None) -> RollResult:
        """Roll every die in the builder.

        Args:
            rng: Random source; pass a seeded ``random.Random`` for reproducibility

        Raises:
            ValueError: if nothing has been added to the builder
        """
        if not self.notations:
            raise ValueError("Cannot roll an empty dice expression")
        rng = rng or random.Random()
        results: list[int] = []
        for notation in self.notations:
            count, sides = parse_notation(notation)
            results.extend(rng.randint(1, sides) for _ in range(count))
        return RollResult(
            label=self.label,
            notations=self.notations,
            total=sum(results) + self.modifier,
            individual_results=tuple(results),
            modifier=self.modifier,
            expression=self.expression,
        )
