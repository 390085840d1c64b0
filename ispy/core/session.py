from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from ispy.core.config import GameConfig
from ispy.core.effects import Celebration, FadeTransition
from ispy.core.errors import ConfigError, IspyError
from ispy.core.geometry import Point, Size, is_degenerate
from ispy.core.hit_test import ClickResult, classify_click
from ispy.core.leaderboard import Leaderboard, ScoreEntry
from ispy.core.level import ImageLoader, Level
from ispy.core.levels import LevelDefinition
from ispy.core.scheduler import ScheduledCall, Scheduler
from ispy.core.timer import Clock, PlayTimer, monotonic_ms

logger = logging.getLogger(__name__)


class GameState(Enum):
    LOADING = "loading"
    LEVEL_START = "level_start"
    COUNTDOWN = "countdown"
    PLAYING = "playing"
    TRANSITIONING = "transitioning"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class PanState:
    """Pointer press in progress. Discarded on every release."""

    start_point: Point
    last_point: Point
    is_dragging: bool = False
    is_long_pressing: bool = False
    long_press: Optional[ScheduledCall] = None


@dataclass(frozen=True)
class GameResult:
    """Final numbers of a completed play-through."""

    base_time: float
    penalty_time: float
    total_clicks: int
    correct_clicks: int

    @property
    def final_time(self) -> float:
        return self.base_time + self.penalty_time

    @property
    def accuracy(self) -> float:
        return _accuracy(self.correct_clicks, self.total_clicks)


def _accuracy(correct: int, total: int) -> float:
    return (correct / total) * 100.0 if total else 100.0


class GameSession:
    """One play-through of an ordered list of levels.

    Drives the level sequence (loading → level start → countdown → playing →
    transition → next level or completed), owns the play timers, the penalty
    ledger and the click counters. Everything is single-threaded: the frame
    loop calls :meth:`tick`, which runs due timer callbacks and advances
    effects. Restarting builds a new session instead of clearing this one.
    """

    def __init__(
        self,
        levels: Sequence[LevelDefinition],
        loader: ImageLoader,
        config: Optional[GameConfig] = None,
        *,
        clock: Clock = monotonic_ms,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        canvas_size: Size = (800.0, 600.0),
    ) -> None:
        self._levels = list(levels)
        self._loader = loader
        self._config = config or GameConfig()
        self._clock = clock
        self._scheduler = scheduler or Scheduler(clock)
        self._rng = rng or random.Random()
        self._canvas_size: Size = canvas_size

        self._state = GameState.LOADING
        self._started = False
        self._index = 0
        self._level: Optional[Level] = None
        self._timer = PlayTimer(clock)

        self._penalty_total = 0.0
        self._total_clicks = 0
        self._correct_clicks = 0

        self._pan: Optional[PanState] = None
        self._countdown: Optional[int] = None
        self._render_enabled = False
        self._last_tick: Optional[float] = None

        self.transition: Optional[FadeTransition] = None
        self.celebration: Optional[Celebration] = None
        self._result: Optional[GameResult] = None
        self._error: Optional[IspyError] = None

    # ---- Read-only state ----

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def levels(self) -> List[LevelDefinition]:
        return list(self._levels)

    @property
    def level_count(self) -> int:
        return len(self._levels)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def level(self) -> Optional[Level]:
        return self._level

    @property
    def canvas_size(self) -> Size:
        return self._canvas_size

    @property
    def render_enabled(self) -> bool:
        return self._render_enabled

    @property
    def countdown(self) -> Optional[int]:
        """Current countdown number; 0 while "GO!" is showing, None outside the countdown."""
        return self._countdown

    @property
    def countdown_label(self) -> Optional[str]:
        if self._countdown is None:
            return None
        return "GO!" if self._countdown == 0 else str(self._countdown)

    @property
    def pan_state(self) -> Optional[PanState]:
        return self._pan

    @property
    def total_elapsed(self) -> float:
        return self._timer.total_elapsed()

    @property
    def level_elapsed(self) -> float:
        return self._timer.level_elapsed()

    @property
    def timer_running(self) -> bool:
        return not self._timer.paused

    @property
    def penalty_total(self) -> float:
        return self._penalty_total

    @property
    def score_time(self) -> float:
        """Running score: play time plus penalties."""
        return self.total_elapsed + self._penalty_total

    @property
    def total_clicks(self) -> int:
        return self._total_clicks

    @property
    def correct_clicks(self) -> int:
        return self._correct_clicks

    @property
    def accuracy(self) -> float:
        return _accuracy(self._correct_clicks, self._total_clicks)

    @property
    def accuracy_percent(self) -> int:
        return int(math.floor(self.accuracy + 0.5))

    @property
    def result(self) -> Optional[GameResult]:
        return self._result

    @property
    def error(self) -> Optional[IspyError]:
        return self._error

    # ---- Lifecycle ----

    def start(self) -> None:
        """Load the first level and head for the level-start screen."""
        if self._started:
            logger.debug("start() ignored: session already started")
            return
        self._started = True
        self._set_state(GameState.LOADING)
        began = self._clock()
        try:
            if not self._levels:
                raise ConfigError("No levels found. Please add level images and metadata.")
            self._load_level(0)
        except IspyError as e:
            self._fail(e)
            return
        remaining = self._config.min_loading_ms - (self._clock() - began)
        self._after(remaining, self._enter_level_start)

    def restart(self) -> "GameSession":
        """Tear this session down and return a fresh, started one."""
        self._cancel_long_press()
        self._scheduler.cancel_all()
        session = GameSession(
            self._levels,
            self._loader,
            self._config,
            clock=self._clock,
            scheduler=self._scheduler,
            rng=self._rng,
            canvas_size=self._canvas_size,
        )
        session.start()
        return session

    def confirm_level_start(self) -> bool:
        """Player pressed GO on the level-start screen."""
        if self._state is not GameState.LEVEL_START:
            return False
        self._render_enabled = False
        self._countdown = self._config.countdown_from
        self._set_state(GameState.COUNTDOWN)
        self._scheduler.call_later(self._config.countdown_step_ms, self._countdown_tick)
        return True

    def tick(self) -> None:
        """One frame: run due callbacks, then advance effects."""
        now = self._clock()
        dt = 0.0 if self._last_tick is None else now - self._last_tick
        self._last_tick = now

        self._scheduler.run_due()

        if self._level is not None:
            self._level.update(dt)
        if self.transition is not None and self.transition.update(dt):
            self.transition = None
        if self.celebration is not None and self.celebration.update(dt):
            self.celebration = None

    def resize(self, canvas_size: Size) -> None:
        """Safe in any state, including before anything has loaded."""
        if is_degenerate(canvas_size):
            return
        self._canvas_size = canvas_size
        if self._level is not None:
            self._level.resize(canvas_size)

    def submit_score(self, name: str, leaderboard: Leaderboard) -> Optional[List[ScoreEntry]]:
        """Hand the final time to the leaderboard. Only valid once completed."""
        if self._state is not GameState.COMPLETED or self._result is None:
            return None
        return leaderboard.add_score(name, self._result.final_time)

    # ---- Pointer input ----

    def pointer_pressed(self, point: Point) -> None:
        if not self._accepts_input():
            return
        self._cancel_long_press()
        pan = PanState(start_point=point, last_point=point)
        pan.long_press = self._scheduler.call_later(
            self._config.long_press_ms, lambda: self._on_long_press(pan)
        )
        self._pan = pan

    def pointer_moved(self, point: Point) -> None:
        pan = self._pan
        if pan is None or not self._accepts_input():
            return
        if not pan.is_dragging:
            dx = point[0] - pan.start_point[0]
            dy = point[1] - pan.start_point[1]
            if math.hypot(dx, dy) <= self._config.drag_threshold_px:
                return
            pan.is_dragging = True
            self._cancel_long_press()
        # Content follows the pointer, so the scroll offset moves the other way.
        self._level.pan_by(-(point[0] - pan.last_point[0]), -(point[1] - pan.last_point[1]))
        pan.last_point = point

    def pointer_released(self, point: Point) -> Optional[ClickResult]:
        pan = self._pan
        self._cancel_long_press()
        self._pan = None
        if pan is None or not self._accepts_input():
            return None
        if pan.is_dragging or pan.is_long_pressing:
            return None
        return self.click(point)

    def click(self, point: Point) -> Optional[ClickResult]:
        """Register a click in canvas space. Returns None when the click is ignored."""
        if not self._accepts_input():
            return None
        level = self._level
        if level.viewport is None or not level.viewport.contains_canvas_point(point):
            return None

        self._total_clicks += 1
        result = classify_click(level, point)
        if result is ClickResult.CORRECT:
            self._correct_clicks += 1
            self._timer.pause()
            self._set_state(GameState.TRANSITIONING)
            self._scheduler.call_later(self._config.advance_delay_ms, self._start_fade)
        else:
            self._penalty_total += self._config.penalty_per_click_ms
        return result

    # ---- Internals ----

    def _accepts_input(self) -> bool:
        return (
            self._state is GameState.PLAYING
            and self._level is not None
            and self._level.loaded
        )

    def _set_state(self, state: GameState) -> None:
        if state is not self._state:
            logger.debug("Game state %s -> %s", self._state.value, state.value)
        self._state = state

    def _after(self, delay_ms: float, callback: Callable[[], None]) -> None:
        if delay_ms <= 0:
            callback()
        else:
            self._scheduler.call_later(delay_ms, callback)

    def _fail(self, error: IspyError) -> None:
        logger.error("Game could not start: %s", error)
        self._error = error
        self._timer.pause()
        self._render_enabled = False
        self._set_state(GameState.ERROR)

    def _load_level(self, index: int) -> None:
        level = Level(self._levels[index], self._canvas_size, self._config, self._rng)
        level.load(self._loader)
        self._level = level

    def _enter_level_start(self) -> None:
        if self._state is not GameState.LOADING:
            return
        self._timer.pause()
        self._render_enabled = False
        self._set_state(GameState.LEVEL_START)

    def _countdown_tick(self) -> None:
        if self._state is not GameState.COUNTDOWN or self._countdown is None:
            logger.debug("Stale countdown tick ignored")
            return
        self._countdown -= 1
        if self._countdown > 0:
            self._scheduler.call_later(self._config.countdown_step_ms, self._countdown_tick)
        else:
            self._countdown = 0
            self._scheduler.call_later(self._config.go_display_ms, self._finish_countdown)

    def _finish_countdown(self) -> None:
        if self._state is not GameState.COUNTDOWN:
            return
        self._countdown = None
        self._render_enabled = True
        self._set_state(GameState.PLAYING)
        self._timer.begin_level()

    def _on_long_press(self, pan: PanState) -> None:
        if self._pan is not pan or pan.is_dragging or not self._accepts_input():
            logger.debug("Stale long press ignored")
            return
        pan.long_press = None
        pan.is_long_pressing = True
        self.click(pan.start_point)

    def _cancel_long_press(self) -> None:
        if self._pan is not None and self._pan.long_press is not None:
            self._pan.long_press.cancel()
            self._pan.long_press = None

    def _start_fade(self) -> None:
        if self._state is not GameState.TRANSITIONING:
            return
        self._timer.pause()
        self._timer.reset_level()
        self.transition = FadeTransition(duration=self._config.transition_ms)
        self._scheduler.call_later(self._config.transition_ms, self._advance)

    def _advance(self) -> None:
        if self._state is not GameState.TRANSITIONING:
            return
        self._index += 1
        if self._index >= len(self._levels):
            self._complete()
            return
        self._set_state(GameState.LOADING)
        try:
            self._load_level(self._index)
        except IspyError as e:
            self._fail(e)
            return
        self.transition = None
        self._enter_level_start()

    def _complete(self) -> None:
        self._timer.pause()
        self._render_enabled = False
        self._result = GameResult(
            base_time=self._timer.total_elapsed(),
            penalty_time=self._penalty_total,
            total_clicks=self._total_clicks,
            correct_clicks=self._correct_clicks,
        )
        self.transition = None
        self.celebration = Celebration.across(self._canvas_size[0], self._rng)
        self._set_state(GameState.COMPLETED)
        logger.info(
            "Game completed in %.0f ms (+%.0f ms penalties), accuracy %.0f%%",
            self._result.base_time,
            self._result.penalty_time,
            self._result.accuracy,
        )
