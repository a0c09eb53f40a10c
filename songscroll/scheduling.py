"""
Timer scheduling used by the scroll engine.

The engine never touches a runtime's timer primitives directly. It asks a
:class:`Scheduler` for one-shot and repeating timers and keeps the returned
handles so it can cancel them. Two schedulers are provided: a virtual one
driven by an explicit clock (simulation and tests) and one backed by an
asyncio event loop.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Tuple

LOG = logging.getLogger(__name__)

TimerCallback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: float, callback: TimerCallback) -> TimerHandle:
        ...

    def call_repeating(self, interval_ms: float, callback: TimerCallback) -> TimerHandle:
        ...


# --------------------------------------------------------------------- virtual


@dataclass(eq=False)
class VirtualTimer:
    due_ms: float
    callback: TimerCallback
    interval_ms: Optional[float] = None
    cancelled: bool = field(default=False)

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """
    Deterministic scheduler advanced by hand.

    Timers fire in due-time order; timers due at the same instant fire in the
    order they were armed.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now_ms = float(start_ms)
        self._queue: List[Tuple[float, int, VirtualTimer]] = []
        self._counter = itertools.count()

    @property
    def now_ms(self) -> float:
        return self._now_ms

    def _arm(self, timer: VirtualTimer) -> None:
        heapq.heappush(self._queue, (timer.due_ms, next(self._counter), timer))

    def call_later(self, delay_ms: float, callback: TimerCallback) -> VirtualTimer:
        timer = VirtualTimer(due_ms=self._now_ms + max(0.0, float(delay_ms)), callback=callback)
        self._arm(timer)
        return timer

    def call_repeating(self, interval_ms: float, callback: TimerCallback) -> VirtualTimer:
        interval = float(interval_ms)
        if interval <= 0:
            raise ValueError("interval_ms must be positive")
        timer = VirtualTimer(due_ms=self._now_ms + interval, callback=callback, interval_ms=interval)
        self._arm(timer)
        return timer

    def pending(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, delta_ms: float) -> None:
        """Move the clock forward by ``delta_ms``, firing every timer that falls due."""

        target = self._now_ms + max(0.0, float(delta_ms))
        while self._queue and self._queue[0][0] <= target:
            due_ms, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now_ms = due_ms
            timer.callback()
            if timer.interval_ms is not None and not timer.cancelled:
                timer.due_ms = due_ms + timer.interval_ms
                self._arm(timer)
        self._now_ms = target


# --------------------------------------------------------------------- asyncio


class _RepeatingLoopTimer:
    def __init__(self, loop: asyncio.AbstractEventLoop, interval_s: float, callback: TimerCallback) -> None:
        self._loop = loop
        self._interval_s = interval_s
        self._callback = callback
        self._cancelled = False
        self._handle: asyncio.TimerHandle = loop.call_later(interval_s, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        # Re-arm first so a cancel() issued by the callback also covers the next firing.
        self._handle = self._loop.call_later(self._interval_s, self._fire)
        try:
            self._callback()
        except Exception:
            LOG.exception("Repeating timer callback failed; cancelling timer.")
            self.cancel()

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()


class AsyncioScheduler:
    """Scheduler backed by ``loop.call_later``."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay_ms: float, callback: TimerCallback) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, float(delay_ms)) / 1000.0, callback)

    def call_repeating(self, interval_ms: float, callback: TimerCallback) -> _RepeatingLoopTimer:
        interval = float(interval_ms)
        if interval <= 0:
            raise ValueError("interval_ms must be positive")
        return _RepeatingLoopTimer(self.loop, interval / 1000.0, callback)
