"""
Time oracles for the governance engine.

The engine never reads the wall clock directly. It is handed a clock
(any zero-argument callable returning integer seconds), so voting windows
can be driven deterministically in tests and simulations.
"""

import threading
import time


class SystemClock:
    """Wall-clock time in whole seconds."""

    def __call__(self) -> int:
        return int(time.time())

    def __repr__(self) -> str:
        return "<SystemClock>"


class ManualClock:
    """
    Settable clock. Time only moves when told to.

    Never moves backwards: `set()` to an earlier instant raises ValueError.
    """

    def __init__(self, start: int = 0):
        self._now = int(start)
        self._lock = threading.Lock()

    def __call__(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Move time forward by *seconds* and return the new instant."""
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        with self._lock:
            self._now += int(seconds)
            return self._now

    def set(self, timestamp: int) -> int:
        with self._lock:
            if timestamp < self._now:
                raise ValueError(
                    f"Clock cannot move backwards ({timestamp} < {self._now})"
                )
            self._now = int(timestamp)
            return self._now

    def __repr__(self) -> str:
        return f"<ManualClock now={self._now}>"
