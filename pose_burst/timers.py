"""
One-shot timers driven by the frame loop.

Callbacks never run on their own thread: the loop calls ``run_due()`` once per
tick and every timer whose deadline has passed runs there, in deadline order.
The clock is injectable so tests can step time by hand.
"""

from __future__ import annotations

import heapq
import itertools
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional


@dataclass
class TimerHandle:
    deadline: float
    callback: Callable[[], None]
    name: str = ""
    cancelled: bool = False
    done: bool = False

    def cancel(self) -> bool:
        """Cancel the timer. Returns False if it already ran."""
        if self.done:
            return False
        self.cancelled = True
        return True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.done)


@dataclass
class TimerQueue:
    clock: Callable[[], float] = time.monotonic

    _heap: List[tuple] = field(default_factory=list)
    _counter: itertools.count = field(default_factory=itertools.count)

    def now(self) -> float:
        return self.clock()

    def call_later(self, delay: float, callback: Callable[[], None], name: str = "") -> TimerHandle:
        handle = TimerHandle(deadline=self.now() + max(0.0, delay), callback=callback, name=name)
        # counter keeps FIFO order for equal deadlines
        heapq.heappush(self._heap, (handle.deadline, next(self._counter), handle))
        return handle

    def run_due(self, now: Optional[float] = None) -> int:
        """Run every pending timer whose deadline is <= now. Returns how many ran."""
        if now is None:
            now = self.now()
        ran = 0
        while self._heap and self._heap[0][0] <= now:
            _, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            handle.done = True
            handle.callback()
            ran += 1
        return ran

    def cancel_all(self) -> int:
        cancelled = 0
        for _, _, handle in self._heap:
            if handle.cancel():
                cancelled += 1
        self._heap.clear()
        return cancelled

    def __len__(self) -> int:
        return sum(1 for _, _, h in self._heap if h.pending)
