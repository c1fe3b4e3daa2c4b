"""SessionManager — runs a BotSession on a background thread.

The API only reads: a point-in-time ``SessionState`` copied from the
world's last refresh and the tracker, plus the session's event log. The
control thread is the only writer.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from raidbot.combat.tracker import AttackState
from raidbot.core.clock import Clock
from raidbot.core.models import Monster, PlayerUnit
from raidbot.engine.pause import PauseGate
from raidbot.engine.session import BotSession, SessionPhase
from raidbot.utils.event_log import EventLog

if TYPE_CHECKING:
    from raidbot.config import BotConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionState:
    """Read-only copy of what the session currently sees."""

    phase: SessionPhase
    paused: bool
    running: bool
    timestamp: float
    player: PlayerUnit
    loaded_area: str
    current_step: str | None
    gold: int
    monsters: tuple[Monster, ...] = ()
    attack_states: dict[int, AttackState] = field(default_factory=dict)
    error: str | None = None


class SessionManager:
    """Manages the bot session lifecycle on a background thread.

    Provides thread-safe access to:
      - a state snapshot (player, monsters, tracked attack states)
      - the event log (lock-guarded ring buffer)
      - control commands (start / pause / resume / stop / reset)
    """

    def __init__(self, config: BotConfig, clock: Clock | None = None) -> None:
        self.config = config
        self._clock = clock
        self._gate = PauseGate()
        self._session_id = 0
        self._session = self._build()
        self._thread: threading.Thread | None = None
        self._running = threading.Event()

    # -- public properties --

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def paused(self) -> bool:
        return self._gate.paused

    @property
    def session(self) -> BotSession:
        return self._session

    @property
    def event_log(self) -> EventLog:
        return self._session.ctx.event_log

    # -- state access --

    def get_state(self) -> SessionState:
        s = self._session
        world = s.world
        return SessionState(
            phase=s.phase,
            paused=self.paused,
            running=self.running,
            timestamp=s.clock.now(),
            player=world.player,
            loaded_area=world.loaded_area.name,
            current_step=s.current_step.name if s.current_step is not None else None,
            gold=world.gold,
            monsters=tuple(world.monsters()),
            attack_states=s.ctx.tracker.snapshot(),
            error=s.error,
        )

    # -- lifecycle --

    def start(self) -> bool:
        """Start the session thread; False if one is running or the session already ran."""
        if self._running.is_set() or self._session.phase != SessionPhase.IDLE:
            return False
        self._gate.reset()
        self._running.set()
        self._thread = threading.Thread(target=self._run, name="bot-session", daemon=True)
        self._thread.start()
        logger.info("SessionManager started session %d", self._session_id)
        return True

    def pause(self) -> None:
        self._gate.pause()
        logger.info("SessionManager paused session %d", self._session_id)

    def resume(self) -> None:
        self._gate.resume()
        logger.info("SessionManager resumed session %d", self._session_id)

    def stop(self, timeout: float = 5.0) -> None:
        self._gate.stop()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Session thread did not exit within %.1fs", timeout)
        self._thread = None
        logger.info("SessionManager stopped.")

    def reset(self) -> None:
        """Stop, rebuild the world and leave a fresh idle session ready to start."""
        self.stop()
        self._gate.reset()
        self._session_id += 1
        self._session = self._build()
        logger.info("SessionManager reset, session %d ready", self._session_id)

    # -- internals --

    def _build(self) -> BotSession:
        clock = self._clock or Clock()
        session = BotSession(
            self.config, clock=clock, pause_gate=self._gate, session_id=self._session_id,
        )
        session.world.refresh()
        return session

    def _run(self) -> None:
        logger.info("Session thread started.")
        try:
            self._session.run()
        finally:
            self._running.clear()
            logger.info("Session thread exited.")
