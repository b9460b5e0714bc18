"""Scheduler adapters.

- `AsyncioScheduler` delays callbacks on an asyncio event loop, which then
  plays the role of the single context that owns the repositories.
- `ManualScheduler` keeps a virtual clock that only moves when `advance` is
  called. Used by tests and by synchronous entrypoints such as the CLI.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable

from roster.interfaces.scheduler import ScheduledCall, Scheduler

# pylint: disable=too-few-public-methods


class _AsyncioCall(ScheduledCall):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioScheduler(Scheduler):
    """Schedule callbacks with `loop.call_later`.

    Args:
        loop: The owning loop. Defaults to the running loop at call time.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioCall(loop.call_later(delay, callback))


class _ManualCall(ScheduledCall):
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Deterministic scheduler driven by a virtual clock.

    Callbacks run inside `advance` in due-time order (ties in scheduling
    order). A callback may schedule further calls; those run in the same
    `advance` if they fall due before its end.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, _ManualCall]] = []
        self._sequence = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        call = _ManualCall(self.now + delay, callback)
        heapq.heappush(self._queue, (call.due, next(self._sequence), call))
        return call

    @property
    def pending(self) -> int:
        """Number of calls waiting to run."""
        return sum(1 for _, _, call in self._queue if not call.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every call that falls due.

        Args:
            seconds: How far to move the clock (must be >= 0).

        Returns:
            The number of callbacks that ran.
        """
        if seconds < 0:
            raise ValueError("seconds must be >= 0")
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, call = heapq.heappop(self._queue)
            self.now = due
            if call.cancelled:
                continue
            call.callback()
            ran += 1
        self.now = target
        return ran

    def run_pending(self) -> int:
        """Run everything scheduled, however far in the future."""
        ran = 0
        while self._queue:
            ran += self.advance(max(0.0, self._queue[0][0] - self.now))
        return ran
