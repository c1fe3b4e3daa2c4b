"""Cooperative pause point shared by a session's control loops."""

from __future__ import annotations

import logging
import threading

from raidbot.errors import SessionStoppedError

logger = logging.getLogger(__name__)


class PauseGate:
    """Suspends the control thread between ticks.

    Every loop in the engine calls ``wait()`` at the top of each iteration.
    While paused the call blocks; once stopped it raises
    ``SessionStoppedError`` so the loop unwinds without further input.
    """

    __slots__ = ("_resumed", "_stopped", "_poll")

    def __init__(self, poll: float = 0.1) -> None:
        self._resumed = threading.Event()
        self._resumed.set()
        self._stopped = threading.Event()
        self._poll = poll

    @property
    def paused(self) -> bool:
        return not self._resumed.is_set()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def pause(self) -> None:
        self._resumed.clear()

    def resume(self) -> None:
        self._resumed.set()

    def stop(self) -> None:
        self._stopped.set()
        self._resumed.set()

    def reset(self) -> None:
        self._stopped.clear()
        self._resumed.set()

    def wait(self) -> None:
        while not self._resumed.wait(timeout=self._poll):
            if self._stopped.is_set():
                break
        if self._stopped.is_set():
            raise SessionStoppedError("session stop requested")
