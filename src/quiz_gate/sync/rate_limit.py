from __future__ import annotations

from typing import Callable, Optional


class MinIntervalLimiter:
    """
    Enforces a minimum spacing between automatic load attempts.

    Independent of cache TTLs: it bounds how often the network is tried at all, so rapid
    re-activation cannot turn into a retry storm.
    """

    def __init__(self, min_interval: float, clock: Callable[[], float]):
        self.min_interval = min_interval
        self.clock = clock
        self.last_call: Optional[float] = None

    def remaining(self) -> float:
        if self.last_call is None:
            return 0.0
        return max(0.0, self.min_interval - (self.clock() - self.last_call))

    def try_acquire(self) -> bool:
        """Record an attempt and return True, or return False if it is too soon."""
        if self.remaining() > 0:
            return False
        self.last_call = self.clock()
        return True
