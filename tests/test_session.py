"""Tests for ispy.core.session – the game state machine."""

from __future__ import annotations

import itertools
import random
from dataclasses import replace
from pathlib import Path

import pytest

from ispy.core.config import GameConfig
from ispy.core.effects import FadeTransition
from ispy.core.errors import AssetLoadError, ConfigError
from ispy.core.geometry import Rect
from ispy.core.hit_test import ClickResult
from ispy.core.leaderboard import Leaderboard
from ispy.core.levels import LevelDefinition
from ispy.core.session import GameResult, GameSession, GameState

# 800x600 images on an 800x600 canvas at zoom 2: scale 2, target (100,100,80,100)
# sits at canvas (200..360, 200..400) with the pan at the origin.
CONFIG = GameConfig(min_loading_ms=0, desktop_breakpoint=800, default_desktop_zoom=2.0)
HIT = (280.0, 300.0)
MISS = (50.0, 50.0)
COUNTDOWN_MS = 3 * 1000 + 800
ADVANCE_MS = 1000 + 800


def make_levels(count: int = 2):
    return [
        LevelDefinition(
            key=f"level{i + 1}",
            name=f"Scene {i + 1}",
            image=Path(f"pic{i + 1}.svg"),
            click_region=Rect(100, 100, 80, 100),
        )
        for i in range(count)
    ]


def loader(path: Path):
    return (800, 600)


def run_for(session: GameSession, clock, ms: float, step: float = 100.0) -> None:
    """Pump the frame loop for ``ms`` of synthetic time."""
    elapsed = 0.0
    while elapsed < ms:
        clock.advance(step)
        elapsed += step
        session.tick()


def make_session(clock, count: int = 2, config: GameConfig = CONFIG, load=loader) -> GameSession:
    return GameSession(make_levels(count), load, config, clock=clock, rng=random.Random(7))


def play(session: GameSession, clock) -> None:
    """From LevelStart to Playing, with the pan reset so the target is at HIT."""
    assert session.confirm_level_start()
    run_for(session, clock, COUNTDOWN_MS)
    assert session.state is GameState.PLAYING
    session.level.viewport.set_pan((0, 0))


@pytest.fixture()
def session(clock) -> GameSession:
    s = make_session(clock)
    s.start()
    return s


# ---------------------------------------------------------------------------
# GameResult
# ---------------------------------------------------------------------------

class TestGameResult:
    def test_final_time_adds_penalty(self):
        result = GameResult(base_time=12000.0, penalty_time=5000.0, total_clicks=2, correct_clicks=1)
        assert result.final_time == 17000.0
        assert result.accuracy == 50.0

    def test_accuracy_without_clicks(self):
        assert GameResult(0.0, 0.0, 0, 0).accuracy == 100.0


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

class TestLoading:
    def test_initial_state(self, clock):
        s = make_session(clock)
        assert s.state is GameState.LOADING
        assert s.current_index == 0
        assert s.accuracy == 100.0
        assert s.level is None

    def test_reaches_level_start(self, session: GameSession):
        assert session.state is GameState.LEVEL_START
        assert session.level.loaded
        assert not session.timer_running

    def test_minimum_loading_time(self, clock):
        s = make_session(clock, config=GameConfig(min_loading_ms=1500))
        s.start()
        run_for(s, clock, 1400)
        assert s.state is GameState.LOADING
        run_for(s, clock, 100)
        assert s.state is GameState.LEVEL_START

    def test_slow_load_counts_towards_minimum(self, clock):
        def slow_loader(path):
            clock.advance(1000)
            return (800, 600)

        s = make_session(clock, config=GameConfig(min_loading_ms=1500), load=slow_loader)
        s.start()
        run_for(s, clock, 500)
        assert s.state is GameState.LEVEL_START

    def test_start_twice_is_a_noop(self, session: GameSession):
        level = session.level
        session.start()
        assert session.level is level

    def test_empty_levels_is_a_config_error(self, clock):
        s = GameSession([], loader, CONFIG, clock=clock)
        s.start()
        assert s.state is GameState.ERROR
        assert isinstance(s.error, ConfigError)

    def test_image_failure_is_an_asset_error(self, clock):
        def broken(path):
            raise FileNotFoundError(path)

        s = make_session(clock, load=broken)
        s.start()
        assert s.state is GameState.ERROR
        assert isinstance(s.error, AssetLoadError)

    def test_failure_on_later_level(self, clock):
        def second_missing(path):
            if path.name == "pic2.svg":
                raise OSError("gone")
            return (800, 600)

        session = make_session(clock, load=second_missing)
        session.start()
        play(session, clock)
        session.click(HIT)
        run_for(session, clock, ADVANCE_MS)
        assert session.state is GameState.ERROR
        assert isinstance(session.error, AssetLoadError)


# ---------------------------------------------------------------------------
# Countdown
# ---------------------------------------------------------------------------

class TestCountdown:
    def test_confirm_only_from_level_start(self, clock):
        s = make_session(clock)
        assert not s.confirm_level_start()

    def test_labels(self, session: GameSession, clock):
        session.confirm_level_start()
        assert session.state is GameState.COUNTDOWN
        assert session.countdown_label == "3"
        run_for(session, clock, 1000)
        assert session.countdown_label == "2"
        run_for(session, clock, 1000)
        assert session.countdown_label == "1"
        run_for(session, clock, 1000)
        assert session.countdown_label == "GO!"
        assert session.countdown == 0
        assert not session.render_enabled
        run_for(session, clock, 800)
        assert session.countdown_label is None
        assert session.state is GameState.PLAYING
        assert session.render_enabled

    def test_timer_paused_during_countdown(self, session: GameSession, clock):
        session.confirm_level_start()
        run_for(session, clock, 3000)
        assert session.total_elapsed == 0.0
        assert not session.timer_running

    def test_second_confirm_is_rejected(self, session: GameSession):
        assert session.confirm_level_start()
        assert not session.confirm_level_start()

    def test_zero_length_countdown_finishes_in_one_frame(self):
        ticks = itertools.count(1000.0, 0.5)
        config = replace(CONFIG, countdown_step_ms=0, go_display_ms=0)
        s = make_session(lambda: next(ticks), config=config)
        s.start()
        assert s.confirm_level_start()
        s.tick()
        assert s.state is GameState.PLAYING
        assert s.countdown_label is None


# ---------------------------------------------------------------------------
# Clicks and scoring
# ---------------------------------------------------------------------------

class TestClicks:
    def test_ignored_before_playing(self, session: GameSession, clock):
        assert session.click(HIT) is None
        session.confirm_level_start()
        assert session.click(HIT) is None
        assert session.total_clicks == 0

    def test_wrong_clicks_add_penalty(self, session: GameSession, clock):
        play(session, clock)
        for _ in range(3):
            assert session.click(MISS) is ClickResult.INCORRECT
        assert session.penalty_total == 15000.0
        assert session.total_clicks == 3
        assert session.correct_clicks == 0
        assert session.accuracy_percent == 0
        assert session.state is GameState.PLAYING

    def test_score_time_includes_penalty(self, session: GameSession, clock):
        play(session, clock)
        run_for(session, clock, 2000)
        session.click(MISS)
        assert session.score_time == 7000.0

    def test_correct_click_blocks_further_clicks(self, session: GameSession, clock):
        play(session, clock)
        assert session.click(HIT) is ClickResult.CORRECT
        assert session.state is GameState.TRANSITIONING
        assert session.click(HIT) is None
        assert session.click(MISS) is None
        run_for(session, clock, 500)
        assert session.click(HIT) is None
        assert session.total_clicks == 1
        assert session.correct_clicks == 1
        assert session.penalty_total == 0.0

    def test_click_outside_canvas_is_not_counted(self, session: GameSession, clock):
        play(session, clock)
        assert session.click((900, 100)) is None
        assert session.total_clicks == 0

    def test_accuracy_rounds_to_nearest_percent(self, session: GameSession, clock):
        play(session, clock)
        session.click(MISS)
        session.click(HIT)
        run_for(session, clock, ADVANCE_MS)
        play(session, clock)
        session.click(HIT)
        assert session.accuracy_percent == 67


# ---------------------------------------------------------------------------
# Timing and level progression
# ---------------------------------------------------------------------------

class TestProgression:
    def test_timer_counts_only_playing_time(self, session: GameSession, clock):
        run_for(session, clock, 4000)  # idle on the level-start screen
        play(session, clock)
        assert session.total_elapsed == 0.0
        run_for(session, clock, 2000)
        assert session.timer_running
        session.click(HIT)
        assert not session.timer_running
        run_for(session, clock, ADVANCE_MS)
        assert session.state is GameState.LEVEL_START
        run_for(session, clock, 5000)
        assert session.total_elapsed == 2000.0
        play(session, clock)
        run_for(session, clock, 500)
        assert session.total_elapsed == 2500.0
        assert session.level_elapsed == 500.0

    def test_fade_starts_after_delay(self, session: GameSession, clock):
        play(session, clock)
        run_for(session, clock, 300)
        session.click(HIT)
        run_for(session, clock, 900)
        assert session.transition is None
        assert session.level_elapsed == 300.0
        run_for(session, clock, 100)
        assert isinstance(session.transition, FadeTransition)
        assert session.level_elapsed == 0.0
        assert session.state is GameState.TRANSITIONING

    def test_advance_builds_a_new_level(self, session: GameSession, clock):
        play(session, clock)
        first = session.level
        session.click(HIT)
        run_for(session, clock, ADVANCE_MS)
        assert session.current_index == 1
        assert session.level is not first
        assert session.level.name == "Scene 2"
        assert not session.level.resolved
        assert first.resolved

    def test_completion(self, session: GameSession, clock):
        play(session, clock)
        run_for(session, clock, 1000)
        session.click(MISS)
        session.click(HIT)
        run_for(session, clock, ADVANCE_MS)
        play(session, clock)
        run_for(session, clock, 1500)
        session.click(HIT)
        run_for(session, clock, ADVANCE_MS)

        assert session.state is GameState.COMPLETED
        assert session.current_index == 2
        result = session.result
        assert result.base_time == 2500.0
        assert result.penalty_time == 5000.0
        assert result.final_time == 7500.0
        assert result.total_clicks == 3
        assert result.correct_clicks == 2
        assert session.celebration is not None

    def test_celebration_ends(self, clock):
        s = make_session(clock, count=1)
        s.start()
        play(s, clock)
        s.click(HIT)
        run_for(s, clock, ADVANCE_MS)
        assert s.celebration is not None
        run_for(s, clock, 3000)
        assert s.celebration is None
        assert s.state is GameState.COMPLETED

    def test_submit_score(self, clock, tmp_path: Path):
        board = Leaderboard(tmp_path / "scores.json")
        s = make_session(clock, count=1)
        s.start()
        assert s.submit_score("Ada", board) is None
        play(s, clock)
        run_for(s, clock, 1200)
        s.click(HIT)
        run_for(s, clock, ADVANCE_MS)
        scores = s.submit_score("  Ada ", board)
        assert scores[0].name == "Ada"
        assert scores[0].time == 1200.0


# ---------------------------------------------------------------------------
# Pointer input: pan vs click
# ---------------------------------------------------------------------------

class TestPointer:
    def test_tap_is_a_click(self, session: GameSession, clock):
        play(session, clock)
        session.pointer_pressed(HIT)
        assert session.pointer_released((282, 303)) is ClickResult.CORRECT
        assert session.pan_state is None

    def test_small_move_is_still_a_tap(self, session: GameSession, clock):
        play(session, clock)
        session.pointer_pressed(MISS)
        session.pointer_moved((55, 55))
        assert session.level.viewport.pan == (0.0, 0.0)
        assert session.pointer_released((55, 55)) is ClickResult.INCORRECT

    def test_drag_pans_opposite_to_pointer(self, session: GameSession, clock):
        play(session, clock)
        session.level.viewport.set_pan((400, 300))
        session.pointer_pressed((100, 100))
        session.pointer_moved((120, 130))
        assert session.pan_state.is_dragging
        assert session.level.viewport.pan == (380.0, 270.0)
        session.pointer_moved((110, 130))
        assert session.level.viewport.pan == (390.0, 270.0)
        assert session.pointer_released((110, 130)) is None
        assert session.total_clicks == 0

    def test_drag_is_clamped(self, session: GameSession, clock):
        play(session, clock)
        session.pointer_pressed((100, 100))
        session.pointer_moved((700, 500))
        assert session.level.viewport.pan == (0.0, 0.0)

    def test_long_press_clicks(self, session: GameSession, clock):
        play(session, clock)
        session.pointer_pressed(MISS)
        run_for(session, clock, 500)
        assert session.total_clicks == 1
        assert session.pan_state.is_long_pressing
        assert session.pointer_released(MISS) is None
        assert session.total_clicks == 1

    def test_drag_cancels_long_press(self, session: GameSession, clock):
        play(session, clock)
        session.pointer_pressed((100, 100))
        session.pointer_moved((130, 100))
        run_for(session, clock, 1000)
        assert session.total_clicks == 0

    def test_release_cancels_long_press(self, session: GameSession, clock):
        play(session, clock)
        session.pointer_pressed(MISS)
        run_for(session, clock, 200)
        session.pointer_released(MISS)
        run_for(session, clock, 1000)
        assert session.total_clicks == 1

    def test_press_outside_playing_is_ignored(self, session: GameSession):
        session.pointer_pressed(HIT)
        assert session.pan_state is None
        assert session.pointer_released(HIT) is None


# ---------------------------------------------------------------------------
# Resize and restart
# ---------------------------------------------------------------------------

class TestResizeAndRestart:
    def test_resize_before_start(self, clock):
        s = make_session(clock)
        s.resize((0, 0))
        assert s.canvas_size == (800.0, 600.0)
        s.resize((1000, 700))
        s.start()
        assert s.level.viewport.canvas_size == (1000.0, 700.0)

    def test_resize_keeps_pan_valid(self, session: GameSession, clock):
        play(session, clock)
        session.level.viewport.set_pan((800, 600))
        session.resize((1000, 700))
        max_x, max_y = session.level.viewport.pan_range
        x, y = session.level.viewport.pan
        assert 0.0 <= x <= max_x
        assert 0.0 <= y <= max_y

    def test_restart_builds_fresh_session(self, session: GameSession, clock):
        play(session, clock)
        session.click(MISS)
        fresh = session.restart()
        assert fresh is not session
        assert fresh.state is GameState.LEVEL_START
        assert fresh.current_index == 0
        assert fresh.penalty_total == 0.0
        assert fresh.total_clicks == 0
        assert fresh.total_elapsed == 0.0

    def test_restart_cancels_pending_calls(self, session: GameSession, clock):
        session.confirm_level_start()
        fresh = session.restart()
        run_for(fresh, clock, 5000)
        assert session.state is GameState.COUNTDOWN
        assert session.countdown == 3
        assert fresh.state is GameState.LEVEL_START
