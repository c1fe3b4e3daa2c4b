"""Area clearing on top of the AttackCoordinator.

Used by the movement orchestrator when monsters block a path, and
directly by callers that want a radius cleared or a path fought through.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from raidbot.combat.attack import AttackCoordinator, AttackRange
from raidbot.combat.safe_position import find_safe_position
from raidbot.combat.targeting import is_any_enemy_around_player, is_valid_enemy
from raidbot.core.enums import Skill
from raidbot.core.models import Position
from raidbot.errors import MonstersInPathError, PathNotFoundError
from raidbot.movement.follower import MoveOpts, PathFollower

if TYPE_CHECKING:
    from raidbot.context import BotContext

logger = logging.getLogger(__name__)

# Picks the next target id, given the ids already given up on.
TargetSelector = Callable[[set[int]], int | None]

CLEAR_THROUGH_TOLERANCE = 7
CLEAR_THROUGH_EXTRA_RADIUS = 5


class AreaClearer:
    """Kills every valid enemy a selector yields, one target at a time."""

    __slots__ = ("_ctx", "_coordinator", "_follower", "_range")

    def __init__(
        self,
        ctx: BotContext,
        coordinator: AttackCoordinator | None = None,
        follower: PathFollower | None = None,
    ) -> None:
        self._ctx = ctx
        self._follower = follower if follower is not None else PathFollower(ctx)
        self._coordinator = coordinator if coordinator is not None else AttackCoordinator(ctx, self._follower)
        cfg = ctx.config
        self._range = AttackRange(
            min_distance=cfg.attack_min_distance,
            max_distance=cfg.attack_max_distance,
            follow=cfg.attack_follow,
        )

    # -- public --

    def clear_around_player(self, radius: int) -> None:
        self.clear_around_position(self._ctx.data.player.position, radius)

    def clear_around_position(self, pos: Position, radius: int) -> None:
        data = self._ctx.data

        def _select(skip: set[int]) -> int | None:
            for m in data.monsters():
                if m.unit_id in skip or not is_valid_enemy(m, data):
                    continue
                if pos.distance(m.position) <= radius:
                    return m.unit_id
            return None

        logger.debug("Clearing radius %d around %s", radius, pos)
        self.kill_monster_sequence(_select)

    def kill_monster_sequence(self, select: TargetSelector) -> None:
        """Attack whatever *select* returns until it returns None.

        A target that survives ``max_attack_loops`` rounds, or that the
        coordinator abandons, is skipped for the rest of this sequence.
        """
        ctx = self._ctx
        cfg = ctx.config
        skip: set[int] = set()
        previous: int | None = None
        loops = 0
        last_kite: float | None = None

        while True:
            ctx.pause_point()
            ctx.data.refresh()
            ctx.check_player_death()

            target = select(skip)
            if target is None:
                return
            if target != previous:
                loops = 0
            if loops >= cfg.max_attack_loops:
                logger.info("Monster %d survived %d attack rounds, skipping", target, loops)
                skip.add(target)
                previous = None
                continue

            if cfg.kite_danger_distance > 0:
                now = ctx.clock.now()
                if last_kite is None or now - last_kite > cfg.kite_cooldown:
                    if self._kite(target):
                        last_kite = now

            if not self._attack_round(target):
                skip.add(target)
            loops += 1
            previous = target

    def clear_through_path(self, destination: Position, radius: int) -> None:
        """Alternate clearing *radius* around the player with short moves."""
        ctx = self._ctx
        cfg = ctx.config
        last_movement = False
        steps = 0

        while True:
            ctx.pause_point()
            ctx.data.refresh()
            ctx.check_player_death()

            self.clear_around_player(radius)
            if last_movement:
                return

            steps += 1
            if steps > cfg.clear_through_max_steps:
                logger.warning("Gave up clearing through to %s after %d steps", destination, steps - 1)
                return

            path = ctx.pathfinder.get_path(destination)
            if path is None:
                raise PathNotFoundError(f"no path to {destination}")
            if len(path) == 0:
                return

            hop = min(radius, len(path))
            dest = path.points[hop - 1]
            if len(path) - hop <= cfg.move_tolerance:
                last_movement = True

            try:
                self._follower.move_to(dest, MoveOpts(distance_override=CLEAR_THROUGH_TOLERANCE))
            except MonstersInPathError:
                logger.debug("Monsters blocked the hop to %s, clearing wider", dest)
                self.clear_around_player(radius + CLEAR_THROUGH_EXTRA_RADIUS)
                last_movement = False

    # -- internals --

    def _attack_round(self, target: int) -> bool:
        cfg = self._ctx.config
        if cfg.attack_skill == Skill.NONE:
            return self._coordinator.primary_attack(
                target, cfg.attacks_per_round, stand_still=not cfg.attack_follow,
                attack_range=self._range,
            )
        return self._coordinator.secondary_attack(
            Skill(cfg.attack_skill), target, cfg.attacks_per_round, attack_range=self._range,
        )

    def _kite(self, target: int) -> bool:
        ctx = self._ctx
        cfg = ctx.config
        danger = is_any_enemy_around_player(ctx.data, cfg.kite_danger_distance)
        if danger is None:
            return False
        monster = ctx.data.find_monster(target)
        if monster is None:
            return False

        logger.info("Monster %d within %d tiles, looking for a safer spot",
                    danger.unit_id, cfg.kite_danger_distance)
        pos = find_safe_position(
            ctx.data, ctx.pathfinder, monster,
            cfg.kite_danger_distance, cfg.kite_safe_distance,
            cfg.attack_min_distance, cfg.attack_max_distance,
        )
        if pos is None:
            logger.info("No safe position found")
            return True
        self._follower.move_to(pos, MoveOpts(ignore_monsters=True))
        return True
