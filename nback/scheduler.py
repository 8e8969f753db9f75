"""Timer abstraction — schedule(delay_ms, callback) -> cancellable handle.

ThreadingScheduler runs callbacks on daemon timer threads, the way the deck
games always have. ManualScheduler keeps a virtual clock that only moves when
advance() is called, so turn timing can be replayed deterministically.
"""

import heapq
import itertools
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> Cancellable: ...


class ThreadingScheduler:
    """Real-time scheduler backed by threading.Timer."""

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(0, delay_ms) / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return timer


@dataclass(order=True)
class ScheduledCall:
    due: int
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock. Calls fire in due order, ties in scheduling order."""

    def __init__(self):
        self.now = 0
        self._queue: list[ScheduledCall] = []
        self._seq = itertools.count()

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(self.now + max(0, delay_ms), next(self._seq), callback)
        heapq.heappush(self._queue, call)
        return call

    def advance(self, ms: int) -> None:
        """Move the clock forward ms milliseconds, firing everything due."""
        target = self.now + ms
        while self._queue and self._queue[0].due <= target:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self.now = call.due
            call.callback()
        self.now = target

    def pending(self) -> int:
        return sum(1 for c in self._queue if not c.cancelled)
