"""
Companion App - configuration and wiring.
"""

from companion.app.config import CompanionConfig, HistoryConfig

__all__ = [
    "CompanionConfig",
    "HistoryConfig",
]
