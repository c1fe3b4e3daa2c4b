"""BotSession — wires one sandbox character to the combat and movement engine.

The demo plan walks out of town into the Blood Moor, clears it, enters the
Den of Evil through its entrance and clears that too.
"""

from __future__ import annotations

import logging
from enum import Enum

from raidbot.combat.attack import AttackCoordinator
from raidbot.combat.clear import AreaClearer
from raidbot.config import BotConfig
from raidbot.context import BotContext
from raidbot.core.clock import Clock
from raidbot.core.enums import Area
from raidbot.engine.pause import PauseGate
from raidbot.errors import PlayerDiedError, RaidbotError, SessionStoppedError
from raidbot.movement.follower import PathFollower
from raidbot.movement.orchestrator import MovementOrchestrator
from raidbot.sandbox.hid import SandboxHID, SandboxInteractor
from raidbot.sandbox.pathfinder import GridPathFinder
from raidbot.sandbox.scenario import build_demo_world
from raidbot.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)

DEMO_PLAN: tuple[Area, ...] = (Area.BLOOD_MOOR, Area.DEN_OF_EVIL)


class SessionPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"
    DIED = "died"
    STOPPED = "stopped"
    FAILED = "failed"


class BotSession:
    """One character, its sandbox world and the engine driving it."""

    def __init__(
        self,
        config: BotConfig,
        clock: Clock | None = None,
        pause_gate: PauseGate | None = None,
        session_id: int = 0,
        plan: tuple[Area, ...] = DEMO_PLAN,
    ) -> None:
        self.config = config
        self.clock = clock or Clock()
        self.plan = plan
        self.phase = SessionPhase.IDLE
        self.current_step: Area | None = None
        self.error: str | None = None

        rng = DeterministicRNG(config.seed)
        self.world = build_demo_world(config, clock=self.clock)
        self.pathfinder = GridPathFinder(
            self.world, rng,
            walk_speed=config.walk_speed,
            teleport_range=config.teleport_range,
            session_key=session_id,
        )
        self.hid = SandboxHID(self.world, self.pathfinder, damage=config.player_damage)
        self.interactor = SandboxInteractor(self.world)

        self.ctx = BotContext(
            data=self.world,
            pathfinder=self.pathfinder,
            hid=self.hid,
            config=config,
            clock=self.clock,
            pause_gate=pause_gate or PauseGate(),
            rng=rng,
            session_id=session_id,
        )
        self.follower = PathFollower(self.ctx)
        self.coordinator = AttackCoordinator(self.ctx, self.follower)
        self.clearer = AreaClearer(self.ctx, self.coordinator, self.follower)
        self.orchestrator = MovementOrchestrator(
            self.ctx, self.interactor,
            follower=self.follower,
            clearer=self.clearer,
            pick_up_items=self.world.pick_up_items,
        )

    def run(self) -> SessionPhase:
        """Execute the plan; returns the phase the session ended in."""
        self.phase = SessionPhase.RUNNING
        self.world.refresh()
        logger.info("Session %d starting in %s", self.ctx.session_id, self.world.player.area.name)
        self.ctx.record("session", "started")

        try:
            for area in self.plan:
                self.current_step = area
                self._visit(area)
        except PlayerDiedError:
            self.phase = SessionPhase.DIED
            logger.info("Session %d ended: player died", self.ctx.session_id)
        except SessionStoppedError:
            self.phase = SessionPhase.STOPPED
            logger.info("Session %d stopped", self.ctx.session_id)
        except RaidbotError as exc:
            self.phase = SessionPhase.FAILED
            self.error = str(exc)
            logger.error("Session %d failed in %s: %s",
                         self.ctx.session_id, self.world.player.area.name, exc)
        else:
            self.phase = SessionPhase.FINISHED
            logger.info("Session %d finished with %d gold", self.ctx.session_id, self.world.gold)

        self.current_step = None
        self.ctx.record("session", self.phase.value)
        return self.phase

    def _visit(self, area: Area) -> None:
        cfg = self.config
        self.orchestrator.move_to_area(area)
        before = self.world.alive_count(area)
        self.clearer.clear_around_player(cfg.session_clear_radius)
        self.world.pick_up_items(cfg.loot_radius)
        killed = before - self.world.alive_count(area)
        logger.info("Cleared %s: %d of %d monsters killed", area.name, killed, before)
        self.ctx.record("area", f"cleared {area.name}: {killed}/{before}")
