"""Time sources for the session core."""

import time
from typing import Optional, Protocol


class Clock(Protocol):
    """Protocol for time sources - allows deterministic tests."""

    def now(self) -> float:
        """Return the current time as epoch seconds."""
        ...


class SystemClock:
    """Wall clock backed by time.time()."""

    def now(self) -> float:
        return time.time()


class FrozenClock:
    """
    Manually driven clock.

    Time only moves when advance() or set() is called.
    """

    def __init__(self, start: Optional[float] = None):
        self._now = time.time() if start is None else float(start)

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        """Move the clock forward and return the new time."""
        self._now += seconds
        return self._now

    def set(self, timestamp: float) -> None:
        self._now = float(timestamp)
