"""
Clock Sources
=============
Injectable "now" providers for timestamp freshness checks.
"""

import threading
import time
from typing import Protocol


class ClockSource(Protocol):
    """Anything that can report the current instant in epoch milliseconds."""

    def now_ms(self) -> int:
        ...


class SystemClock:
    """Wall clock backed by time.time()."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)


class FrozenClock:
    """
    Manually driven clock for tests and simulations.

    Time only moves when set() or advance() is called.
    """

    def __init__(self, now_ms: int = 0):
        self._now_ms = now_ms
        self._lock = threading.Lock()

    def now_ms(self) -> int:
        with self._lock:
            return self._now_ms

    def set(self, now_ms: int) -> None:
        with self._lock:
            self._now_ms = now_ms

    def advance(self, millis: int) -> int:
        """Move the clock forward and return the new instant."""
        with self._lock:
            self._now_ms += millis
            return self._now_ms
