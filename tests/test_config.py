"""Tests for ispy.core.config – game settings."""

from __future__ import annotations

import pytest

from ispy.core.config import GameConfig
from ispy.core.errors import ConfigError


class TestDefaults:
    def test_values(self):
        config = GameConfig()
        assert config.penalty_per_click_ms == 5000.0
        assert config.drag_threshold_px == 10.0
        assert config.long_press_ms == 500.0
        assert config.countdown_from == 3
        assert config.leaderboard_size == 5
        assert config.default_desktop_zoom == 1.5

    def test_empty_mapping_gives_defaults(self):
        assert GameConfig.from_mapping(None) == GameConfig()
        assert GameConfig.from_mapping({}) == GameConfig()


class TestFromMapping:
    def test_overrides(self):
        config = GameConfig.from_mapping({"penalty_per_click_ms": 2500, "countdown_from": 5})
        assert config.penalty_per_click_ms == 2500.0
        assert config.countdown_from == 5
        assert isinstance(config.countdown_from, int)
        assert config.long_press_ms == 500.0

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="unknown setting"):
            GameConfig.from_mapping({"penalty": 1})

    @pytest.mark.parametrize("value", ["fast", True, None, [1]])
    def test_non_numeric(self, value):
        with pytest.raises(ConfigError):
            GameConfig.from_mapping({"transition_ms": value})

    def test_negative(self):
        with pytest.raises(ConfigError, match="negative"):
            GameConfig.from_mapping({"long_press_ms": -1})

    def test_zero_zoom(self):
        with pytest.raises(ConfigError):
            GameConfig.from_mapping({"default_desktop_zoom": 0})

    def test_zero_countdown(self):
        with pytest.raises(ConfigError):
            GameConfig.from_mapping({"countdown_from": 0})

    @pytest.mark.parametrize("key", ["countdown_from", "leaderboard_size"])
    def test_fractional_integer_setting(self, key):
        with pytest.raises(ConfigError, match="whole number"):
            GameConfig.from_mapping({key: 2.7})

    def test_integral_float_for_integer_setting(self):
        config = GameConfig.from_mapping({"countdown_from": 4.0})
        assert config.countdown_from == 4
        assert isinstance(config.countdown_from, int)

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError):
            GameConfig.from_mapping(["penalty_per_click_ms"])

    def test_config_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            GameConfig.from_mapping({"leaderboard_size": 0})
