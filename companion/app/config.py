"""
Companion Configuration.

Central configuration for the event bus, history and mutation services.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

UndoMode = Literal["notify", "restore"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

UNDO_MODES: tuple[str, ...] = ("notify", "restore")
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")


# ============================================================================
# Default Paths
# ============================================================================


def get_default_config_path() -> Path:
    """Get the default location of the JSON config file."""
    if env_path := os.environ.get("COMPANION_CONFIG"):
        return Path(env_path)
    return Path.cwd() / "companion_config.json"


# ============================================================================
# Configuration Classes
# ============================================================================


@dataclass
class HistoryConfig:
    """Configuration for the undo/redo history ledger."""

    max_size: int = 50  # Events kept before the oldest is evicted
    recent_events: int = 10  # Events reported by stats()

    def __post_init__(self):
        if self.max_size < 1:
            raise ValueError("history max_size must be at least 1")
        if self.recent_events < 0:
            raise ValueError("history recent_events cannot be negative")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryConfig":
        return cls(**{k: v for k, v in data.items() if hasattr(cls, k)})

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_size": self.max_size,
            "recent_events": self.recent_events,
        }


@dataclass
class CompanionConfig:
    """Main configuration.

    Aggregates sub-configurations and provides load/save functionality.
    """

    history: HistoryConfig = field(default_factory=HistoryConfig)

    # "notify" re-emits relabelled events only; "restore" also reverts the store
    undo_mode: UndoMode = "notify"

    default_ability_score: int = 10

    log_level: LogLevel = "INFO"

    def __post_init__(self):
        if self.undo_mode not in UNDO_MODES:
            raise ValueError(f"undo_mode must be one of {UNDO_MODES}, got {self.undo_mode!r}")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "CompanionConfig":
        """Load configuration from a JSON file, then apply environment overrides.

        Args:
            config_path: Path to config file. If None, uses default location.

        Returns:
            CompanionConfig instance
        """
        if config_path is None:
            config_path = get_default_config_path()

        config_path = Path(config_path)

        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            data = {}

        return cls.from_dict(apply_env_overrides(data))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompanionConfig":
        return cls(
            history=HistoryConfig.from_dict(data.get("history", {})),
            undo_mode=data.get("undo_mode", "notify"),
            default_ability_score=int(data.get("default_ability_score", 10)),
            log_level=data.get("log_level", "INFO"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "history": self.history.to_dict(),
            "undo_mode": self.undo_mode,
            "default_ability_score": self.default_ability_score,
            "log_level": self.log_level,
        }

    def save(self, config_path: str | Path | None = None) -> Path:
        """Save configuration to a JSON file.

        Returns:
            Path to saved file
        """
        if config_path is None:
            config_path = get_default_config_path()

        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

        return config_path


def apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with COMPANION_* environment variables applied."""
    merged = dict(data)
    history = dict(merged.get("history", {}))

    if size := os.environ.get("COMPANION_HISTORY_SIZE"):
        history["max_size"] = int(size)
    if mode := os.environ.get("COMPANION_UNDO_MODE"):
        merged["undo_mode"] = mode.lower()
    if level := os.environ.get("COMPANION_LOG_LEVEL"):
        merged["log_level"] = level.upper()

    merged["history"] = history
    return merged
