"""Pause-correct play timers.

Each stopwatch keeps the time folded in from finished running segments plus
the timestamp of the current segment's start, so repeated pause/resume
cycles never drift. All timestamps come from one injectable clock returning
milliseconds.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Default clock: monotonic time in milliseconds."""
    return time.monotonic() * 1000.0


class Stopwatch:
    """A single accumulated-duration timer."""

    def __init__(self, clock: Clock = monotonic_ms) -> None:
        self._clock = clock
        self._accumulated = 0.0
        self._resumed_at: Optional[float] = None
        self._started = False
        self._paused = True

    @property
    def started(self) -> bool:
        return self._started

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def running(self) -> bool:
        return self._started and not self._paused

    def start(self) -> None:
        """Start from the not-yet-started state. No-op otherwise."""
        if self._started:
            logger.debug("start() ignored: stopwatch already started")
            return
        self._started = True
        self._paused = False
        self._resumed_at = self._clock()

    def pause(self) -> None:
        if not self.running:
            return
        now = self._clock()
        self._accumulated += now - (self._resumed_at if self._resumed_at is not None else now)
        self._resumed_at = None
        self._paused = True

    def resume(self) -> None:
        if not self._started:
            logger.debug("resume() ignored: stopwatch never started")
            return
        if not self._paused:
            return
        self._resumed_at = self._clock()
        self._paused = False

    def reset(self) -> None:
        """Zero the accumulator and return to the not-yet-started state."""
        self._accumulated = 0.0
        self._resumed_at = None
        self._started = False
        self._paused = True

    def elapsed(self) -> float:
        if self.running and self._resumed_at is not None:
            return self._accumulated + (self._clock() - self._resumed_at)
        return self._accumulated


class PlayTimer:
    """Total play time and current-level play time, paused and resumed together."""

    def __init__(self, clock: Clock = monotonic_ms) -> None:
        self.total = Stopwatch(clock)
        self.level = Stopwatch(clock)

    def begin_level(self) -> None:
        """Enter play: total keeps counting from where it stopped, level starts from zero."""
        if self.total.started:
            self.total.resume()
        else:
            self.total.start()
        self.level.reset()
        self.level.start()

    def pause(self) -> None:
        self.total.pause()
        self.level.pause()

    def resume(self) -> None:
        self.total.resume()
        self.level.resume()

    def reset_level(self) -> None:
        self.level.reset()

    @property
    def paused(self) -> bool:
        return not self.total.running

    def total_elapsed(self) -> float:
        return self.total.elapsed()

    def level_elapsed(self) -> float:
        return self.level.elapsed()
