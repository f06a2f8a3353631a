"""Delayed-task scheduling and debouncing.

``Scheduler`` is the seam between input handling and time: production code
uses ``AsyncioScheduler`` (event loop timers), tests use ``ManualScheduler``
and advance a virtual clock explicitly.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Any, Callable, List, Optional, Protocol, Tuple


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> Cancellable: ...


class AsyncioScheduler:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class _ManualHandle:
    __slots__ = ("when", "callback", "cancelled")

    def __init__(self, when: float, callback: Callable[[], Any]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-time scheduler; callbacks run only inside ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, _ManualHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], Any]) -> _ManualHandle:
        handle = _ManualHandle(self.now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running due callbacks in order. Returns how many ran."""
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            self.now = when
            if handle.cancelled:
                continue
            handle.callback()
            ran += 1
        self.now = target
        return ran

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)


class Debouncer:
    """Run ``callback`` once input has been quiet for ``wait`` seconds.

    Each call replaces the pending invocation (and its arguments).
    """

    def __init__(self, scheduler: Scheduler, wait: float, callback: Callable[..., Any]):
        self._scheduler = scheduler
        self._wait = wait
        self._callback = callback
        self._handle: Optional[Cancellable] = None
        self._args: Tuple[Any, ...] = ()

    def __call__(self, *args: Any) -> None:
        self.cancel()
        self._args = args
        self._handle = self._scheduler.call_later(self._wait, self._fire)

    def _fire(self) -> None:
        self._handle = None
        self._callback(*self._args)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Run the pending invocation now, if any."""
        if self._handle is not None:
            self.cancel()
            self._callback(*self._args)
