"""Cooperative timer queue driven by the frame loop.

Callbacks never run on their own: ``run_due()`` executes whatever has come
due on the session's clock, one callback at a time, each to completion.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from typing import Callable, List, Tuple

from ispy.core.timer import Clock, monotonic_ms

logger = logging.getLogger(__name__)


class ScheduledCall:
    """Handle for a pending callback. ``cancel()`` guarantees it will not run."""

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self._callback = callback
        self._cancelled = False
        self._done = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._done)

    def cancel(self) -> None:
        self._cancelled = True

    def _run(self) -> None:
        self._done = True
        self._callback()


class Scheduler:
    def __init__(self, clock: Clock = monotonic_ms) -> None:
        self._clock = clock
        self._queue: List[Tuple[float, int, ScheduledCall]] = []
        self._counter = itertools.count()

    @property
    def pending(self) -> int:
        return sum(1 for _, _, call in self._queue if call.active)

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(self._clock() + max(0.0, delay_ms), callback)
        heapq.heappush(self._queue, (call.due, next(self._counter), call))
        return call

    def run_due(self) -> int:
        """Run every call that is due now, in due order. Returns how many ran.

        The clock is read again before each call, so a zero-delay call added
        by a running callback also runs in this pass.
        """
        ran = 0
        while self._queue and self._queue[0][0] <= self._clock():
            _, _, call = heapq.heappop(self._queue)
            if not call.active:
                continue
            call._run()
            ran += 1
        return ran

    def cancel_all(self) -> None:
        for _, _, call in self._queue:
            call.cancel()
        self._queue.clear()
