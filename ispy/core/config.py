"""Tunable game settings.

Defaults live on :class:`GameConfig`. A level manifest may override any of
them through its ``settings:`` mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

from ispy.core.errors import ConfigError


@dataclass(frozen=True)
class GameConfig:
    # Scoring
    penalty_per_click_ms: float = 5000.0

    # Input
    drag_threshold_px: float = 10.0
    long_press_ms: float = 500.0

    # Screen sequencing
    countdown_from: int = 3
    countdown_step_ms: float = 1000.0
    go_display_ms: float = 800.0
    advance_delay_ms: float = 1000.0
    transition_ms: float = 800.0
    min_loading_ms: float = 1500.0
    instructions_fade_ms: float = 3500.0

    # Viewport
    desktop_breakpoint: float = 1024.0
    reference_width: float = 1920.0
    reference_height: float = 1080.0
    default_desktop_zoom: float = 1.5

    # Layout / persistence
    min_canvas_height: float = 400.0
    leaderboard_size: int = 5

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "GameConfig":
        """Build a config from a manifest ``settings:`` block, validating every value."""
        if not raw:
            return cls()
        if not isinstance(raw, Mapping):
            raise ConfigError("'settings' must be a mapping")

        known = {f.name: f for f in fields(cls)}
        overrides: dict[str, Any] = {}
        for key, value in raw.items():
            if key not in known:
                raise ConfigError(f"unknown setting: {key!r}")
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"setting {key!r} must be a number, got {value!r}")
            if value < 0:
                raise ConfigError(f"setting {key!r} must not be negative")
            if known[key].type == "int":
                if value != int(value):
                    raise ConfigError(f"setting {key!r} must be a whole number, got {value!r}")
                overrides[key] = int(value)
            else:
                overrides[key] = float(value)

        config = replace(cls(), **overrides)
        if config.default_desktop_zoom <= 0:
            raise ConfigError("'default_desktop_zoom' must be greater than 0")
        if config.reference_width <= 0 or config.reference_height <= 0:
            raise ConfigError("reference size must be greater than 0")
        if config.countdown_from < 1:
            raise ConfigError("'countdown_from' must be at least 1")
        if config.leaderboard_size < 1:
            raise ConfigError("'leaderboard_size' must be at least 1")
        return config
