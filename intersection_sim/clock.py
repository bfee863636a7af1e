import heapq
import itertools
from typing import Callable, List, Optional, Tuple

# -----------------------------------------------------------------------------
#  Virtual clock
#
#  All simulation time is in milliseconds. Timers due at the same instant fire
#  by priority, then by the order they were scheduled.
# -----------------------------------------------------------------------------

PRIORITY_CYCLE = 0
PRIORITY_SPAWN = 1
PRIORITY_DEPARTURE = 2


class Timer:
    def __init__(self, due: float, priority: int, callback: Callable[[], None], period: Optional[float] = None):
        self.due = due
        self.priority = priority
        self.callback = callback
        self.period = period
        self.fired = 0


class VirtualClock:
    """Deterministic timer wheel.

    Callbacks run to completion one at a time; a callback scheduled by another
    callback for the current instant still fires during the same ``advance``.
    """

    def __init__(self, start: float = 0.0):
        self.now = float(start)
        self._heap: List[Tuple[float, int, int, Timer]] = []
        self._seq = itertools.count()

    def _push(self, timer: Timer):
        heapq.heappush(self._heap, (timer.due, timer.priority, next(self._seq), timer))

    def call_later(self, delay: float, callback: Callable[[], None], priority: int = PRIORITY_DEPARTURE) -> Timer:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        timer = Timer(self.now + delay, priority, callback)
        self._push(timer)
        return timer

    def call_every(self, period: float, callback: Callable[[], None], first_delay: Optional[float] = None,
                   priority: int = PRIORITY_DEPARTURE) -> Timer:
        if period <= 0:
            raise ValueError(f"period must be > 0, got {period}")
        delay = period if first_delay is None else first_delay
        if delay < 0:
            raise ValueError(f"first_delay must be >= 0, got {delay}")
        timer = Timer(self.now + delay, priority, callback, period=period)
        self._push(timer)
        return timer

    def pending(self) -> int:
        return len(self._heap)

    def next_due(self) -> Optional[float]:
        return self._heap[0][0] if self._heap else None

    def run_until(self, t: float) -> int:
        """Fire every timer due at or before ``t``; returns how many fired."""
        count = 0
        while self._heap and self._heap[0][0] <= t:
            due, _, _, timer = heapq.heappop(self._heap)
            self.now = due
            timer.fired += 1
            if timer.period is not None:
                timer.due = due + timer.period
                self._push(timer)
            timer.callback()
            count += 1
        if t > self.now:
            self.now = float(t)
        return count

    def advance(self, ms: float) -> int:
        if ms < 0:
            raise ValueError(f"cannot advance by a negative amount: {ms}")
        return self.run_until(self.now + ms)
