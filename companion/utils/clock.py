"""Clock abstraction used to timestamp events."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Callable, TypeAlias

Clock: TypeAlias = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class FrozenClock:
    """Deterministic clock for tests and replays; ``advance`` moves it forward."""

    def __init__(self, start: datetime):
        self._now = start

    def __call__(self) -> datetime:
        return self._now

    def advance(self, delta) -> None:
        self._now = self._now + delta
