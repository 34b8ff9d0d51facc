"""
Companion Utils - logging, ID generation and clocks.
"""

from companion.utils.clock import Clock, FrozenClock, utc_now
from companion.utils.ids import generate_id
from companion.utils.logging import get_logger, setup_logging

__all__ = [
    "Clock",
    "FrozenClock",
    "utc_now",
    "generate_id",
    "get_logger",
    "setup_logging",
]
