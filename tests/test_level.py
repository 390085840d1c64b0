"""Tests for ispy.core.level – runtime level state."""

from __future__ import annotations

import random
from pathlib import Path

import pytest

from ispy.core.config import GameConfig
from ispy.core.errors import AssetLoadError
from ispy.core.geometry import Rect
from ispy.core.level import Level
from ispy.core.levels import LevelDefinition


def make_definition(zoom=None) -> LevelDefinition:
    return LevelDefinition(
        key="level1",
        name="Find it",
        image=Path("pic1.png"),
        click_region=Rect(10, 10, 20, 20),
        desktop_zoom_factor=zoom,
    )


# ===========================================================================
# Loading
# ===========================================================================

class TestLoad:
    def test_not_loaded_initially(self):
        lv = Level(make_definition(), (800, 600))
        assert not lv.loaded
        assert lv.viewport is None
        assert lv.image_size is None

    def test_load_sets_up_viewport(self):
        lv = Level(make_definition(), (800, 600))
        lv.load(lambda path: (400, 300))
        assert lv.loaded
        assert lv.image_size == (400.0, 300.0)
        assert lv.viewport.scale == 2.0

    def test_loader_receives_image_path(self):
        seen = []
        lv = Level(make_definition(), (800, 600))
        lv.load(lambda path: seen.append(path) or (10, 10))
        assert seen == [Path("pic1.png")]

    def test_os_error_becomes_asset_load_error(self):
        def broken(path):
            raise FileNotFoundError(path)

        lv = Level(make_definition(), (800, 600))
        with pytest.raises(AssetLoadError) as info:
            lv.load(broken)
        assert isinstance(info.value.__cause__, FileNotFoundError)
        assert not lv.loaded

    def test_asset_load_error_passes_through(self):
        def broken(path):
            raise AssetLoadError("bad image")

        with pytest.raises(AssetLoadError, match="bad image"):
            Level(make_definition(), (800, 600)).load(broken)

    def test_zero_size_image_rejected(self):
        with pytest.raises(AssetLoadError):
            Level(make_definition(), (800, 600)).load(lambda path: (0, 0))

    def test_initial_pan_is_randomized_on_load(self):
        config = GameConfig(desktop_breakpoint=800, default_desktop_zoom=2.0)
        lv = Level(make_definition(), (800, 600), config, random.Random(4))
        lv.load(lambda path: (800, 600))
        expected = random.Random(4)
        assert lv.viewport.pan == pytest.approx((expected.uniform(0, 800), expected.uniform(0, 600)))


# ===========================================================================
# Zoom and resize
# ===========================================================================

class TestZoomAndResize:
    def test_definition_zoom_wins(self):
        assert Level(make_definition(zoom=3.0), (800, 600)).zoom_factor == 3.0

    def test_config_zoom_is_default(self):
        config = GameConfig(default_desktop_zoom=1.25)
        assert Level(make_definition(), (800, 600), config).zoom_factor == 1.25

    def test_resize_before_load_is_recorded(self):
        lv = Level(make_definition(), (800, 600))
        lv.resize((1000, 500))
        assert lv.canvas_size == (1000, 500)
        lv.load(lambda path: (100, 100))
        assert lv.viewport.canvas_size == (1000.0, 500.0)

    def test_degenerate_canvas_at_load_is_deferred(self):
        lv = Level(make_definition(), (0, 0))
        lv.load(lambda path: (100, 100))
        assert lv.loaded
        assert lv.viewport.layout is None
        lv.resize((200, 200))
        assert lv.viewport.scale == 2.0

    def test_degenerate_resize_ignored(self):
        lv = Level(make_definition(), (800, 600))
        lv.load(lambda path: (400, 300))
        lv.resize((0, 600))
        assert lv.canvas_size == (800.0, 600.0)


# ===========================================================================
# Feedback lifecycle
# ===========================================================================

class TestFeedbackLifecycle:
    def test_shake_and_xmark_expire(self):
        lv = Level(make_definition(), (800, 600))
        lv.load(lambda path: (400, 300))
        lv.mark_missed((5, 5))
        for _ in range(120):
            lv.update(1000.0 / 60.0)
        assert lv.shake is None
        assert lv.feedback is None
        assert lv.shake_offset == 0.0

    def test_mark_resolved_once(self):
        lv = Level(make_definition(), (800, 600))
        assert lv.mark_resolved((1, 1)) is True
        assert lv.mark_resolved((1, 1)) is False
