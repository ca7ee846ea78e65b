"""
Cancellable timers and a debouncer built on them.

A scheduler hands out handles with a ``cancel()`` method. The debouncer
holds at most one handle and replaces it on every trigger.
"""
import asyncio
import heapq
import itertools
import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioScheduler:
    """Schedules on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class _ManualHandle:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock. Nothing fires until ``advance`` moves time forward."""

    def __init__(self):
        self.now = 0.0
        self._queue: list = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(self.now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (handle.due, next(self._counter), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock and run due callbacks in order. Returns how many ran."""
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            self.now = due
            if handle.cancelled:
                continue
            handle.callback()
            fired += 1
        self.now = target
        return fired


class ImmediateScheduler:
    """Runs callbacks synchronously; for scripts with no event loop."""

    class _Done:
        def cancel(self) -> None:
            pass

    def call_later(self, delay: float, callback: Callable[[], None]) -> "_Done":
        callback()
        return self._Done()


class Debouncer:
    """Delay ``callback`` until ``delay`` seconds pass without a new trigger."""

    def __init__(self, delay: float, callback: Callable[[], None], scheduler: Scheduler):
        self.delay = delay
        self.callback = callback
        self.scheduler = scheduler
        self._handle: Optional[TimerHandle] = None
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def trigger(self):
        """Cancel any pending call and start the delay again."""
        self.cancel()
        self._pending = True
        self._handle = self.scheduler.call_later(self.delay, self._fire)

    def cancel(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending = False

    def flush(self):
        """Run the pending call now, if there is one."""
        if self._pending:
            self.cancel()
            self.callback()

    def _fire(self):
        self._handle = None
        if not self._pending:
            return
        self._pending = False
        self.callback()
