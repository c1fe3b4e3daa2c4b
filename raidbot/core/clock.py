"""Time source shared by every control loop.

All waits in the engine go through a Clock so a session can be driven by a
simulated clock in tests and in the sandbox.
"""

from __future__ import annotations

import time


class Clock:
    """Monotonic wall clock."""

    __slots__ = ()

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


class SimulatedClock(Clock):
    """Clock whose time only advances when someone sleeps on it.

    Lets the sandbox run a whole session instantly and reproducibly.
    """

    __slots__ = ("_now",)

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            self._now += seconds

    def advance(self, seconds: float) -> None:
        self._now += seconds
