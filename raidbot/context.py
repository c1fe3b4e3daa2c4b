"""BotContext — everything one session's control thread works with."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from raidbot.combat.tracker import MonsterStateTracker
from raidbot.config import BotConfig
from raidbot.core.clock import Clock
from raidbot.engine.pause import PauseGate
from raidbot.errors import PlayerDiedError
from raidbot.game.interfaces import HID, GameData, PathFinder
from raidbot.systems.rng import DeterministicRNG
from raidbot.utils.event_log import BotEvent, EventLog

logger = logging.getLogger(__name__)


@dataclass
class BotContext:
    """Collaborators and shared state of a single bot session.

    Passed by reference to every component; nothing here is global.
    """

    data: GameData
    pathfinder: PathFinder
    hid: HID
    config: BotConfig = field(default_factory=BotConfig)
    clock: Clock = field(default_factory=Clock)
    pause_gate: PauseGate = field(default_factory=PauseGate)
    tracker: MonsterStateTracker | None = None
    rng: DeterministicRNG | None = None
    event_log: EventLog = field(default_factory=EventLog)
    session_id: int = 0
    force_attack: bool = False

    def __post_init__(self) -> None:
        cfg = self.config
        if self.tracker is None:
            self.tracker = MonsterStateTracker(
                sample_interval=cfg.damage_sample_interval,
                gc_threshold=cfg.tracker_gc_threshold,
                idle_ttl=cfg.tracker_idle_ttl,
            )
        if self.rng is None:
            self.rng = DeterministicRNG(cfg.seed)

    def pause_point(self) -> None:
        """Cooperative suspension point at the top of every loop."""
        self.pause_gate.wait()

    def check_player_death(self) -> None:
        if not self.data.player.alive:
            logger.info("Player death detected in %s", self.data.player.area.name)
            raise PlayerDiedError()

    def record(self, category: str, message: str, unit_ids: tuple[int, ...] = ()) -> None:
        self.event_log.append(BotEvent(
            timestamp=self.clock.now(), category=category,
            message=message, unit_ids=unit_ids,
        ))
