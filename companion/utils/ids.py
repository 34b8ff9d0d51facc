"""
ID generation utilities.

Process-unique identifiers for events, subscriptions and dice rolls.
"""

from __future__ import annotations

import threading
import time


# ============================================================================
# Thread-Safe Counter
# ============================================================================


class _ThreadSafeCounter:
    """Thread-safe incrementing counter."""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            self._value += 1
            return self._value


_counter = _ThreadSafeCounter()


# ============================================================================
# ID Generation Functions
# ============================================================================


def generate_id(prefix: str = "") -> str:
    """Generate a unique identifier.

    Format: {prefix}_{timestamp}_{counter}

    Example:
        >>> generate_id("EV")
        "EV_1704067200_001"
    """
    timestamp = int(time.time())
    count = _counter.next()

    if prefix:
        return f"{prefix}_{timestamp}_{count:03d}"
    return f"{timestamp}_{count:03d}"


def generate_event_id() -> str:
    return generate_id("EV")


def generate_subscription_id() -> str:
    return generate_id("SUB")


def generate_roll_id() -> str:
    return generate_id("ROLL")
