"""AttackCoordinator — one attack sequence against one target.

Keeps the target in range, fires at the cast cadence and decides when a
target is unreachable. Unreachability is soft: the target's bookkeeping is
dropped and the call returns normally so the caller can pick another
target. Pathing failures and death propagate.

Tick of ``attack``:
  pause point -> refresh -> target still valid? -> observe damage
  -> ensure_in_range -> aura (first tick) -> cadence gate -> fire
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from raidbot.combat.targeting import is_valid_enemy, nearest_valid_enemy
from raidbot.combat.tracker import AttackState
from raidbot.core.enums import AttackKind, MouseButton, Skill
from raidbot.core.models import Monster, Position
from raidbot.errors import (
    MonsterUnreachableError, PathNotFoundError, PlayerDiedError, RaidbotError, SessionStoppedError,
)
from raidbot.movement.follower import MoveOpts, PathFollower

if TYPE_CHECKING:
    from raidbot.context import BotContext

logger = logging.getLogger(__name__)

# Skills that hit everything around the caster and re-target every cast.
BURST_SKILLS = frozenset({Skill.NOVA})

MIN_CADENCE_SLEEP = 0.005


@dataclass(frozen=True, slots=True)
class AttackRange:
    """Engagement distance band plus how the character holds it."""

    min_distance: int = 0
    max_distance: int = 3
    follow: bool = True
    stand_still: bool = False

    @classmethod
    def distance(cls, min_distance: int, max_distance: int) -> AttackRange:
        """Follow the enemy, staying within the band."""
        return cls(min_distance, max_distance, follow=True)

    @classmethod
    def ranged(cls, min_distance: int, max_distance: int) -> AttackRange:
        """Do not chase the enemy once it leaves the band."""
        return cls(min_distance, max_distance, follow=False)

    @classmethod
    def stationary(cls, min_distance: int, max_distance: int) -> AttackRange:
        """Do not chase, and hold the stand-still key while firing."""
        return cls(min_distance, max_distance, follow=False, stand_still=True)


MELEE_RANGE = AttackRange()


@dataclass(frozen=True, slots=True)
class AttackSettings:
    target: int
    kind: AttackKind = AttackKind.PRIMARY
    skill: Skill = Skill.NONE
    min_distance: int = 0
    max_distance: int = 3
    follow_enemy: bool = True
    stand_still: bool = False
    aura: Skill = Skill.NONE
    count: int = 1
    timeout: float = 0.0            # Burst attacks only


class AttackCoordinator:
    """Runs attack sequences on behalf of a session."""

    __slots__ = ("_ctx", "_follower")

    def __init__(self, ctx: BotContext, follower: PathFollower | None = None) -> None:
        self._ctx = ctx
        self._follower = follower if follower is not None else PathFollower(ctx)

    # -- entry points --

    def primary_attack(
        self,
        target: int,
        count: int,
        stand_still: bool,
        attack_range: AttackRange | None = None,
        aura: Skill = Skill.NONE,
    ) -> bool:
        r = attack_range or MELEE_RANGE
        return self.attack(AttackSettings(
            target=target,
            kind=AttackKind.PRIMARY,
            min_distance=r.min_distance,
            max_distance=r.max_distance,
            follow_enemy=r.follow,
            stand_still=stand_still or r.stand_still,
            aura=aura,
            count=count,
        ))

    def secondary_attack(
        self,
        skill: Skill,
        target: int,
        count: int,
        attack_range: AttackRange | None = None,
        aura: Skill = Skill.NONE,
    ) -> bool:
        r = attack_range or MELEE_RANGE
        burst = skill in BURST_SKILLS
        settings = AttackSettings(
            target=target,
            kind=AttackKind.BURST if burst else AttackKind.SECONDARY,
            skill=skill,
            min_distance=r.min_distance,
            max_distance=r.max_distance,
            follow_enemy=r.follow,
            stand_still=r.stand_still,
            aura=aura,
            count=count,
            timeout=self._ctx.config.burst_timeout if burst else 0.0,
        )
        if burst:
            return self.burst_attack(settings)
        return self.attack(settings)

    # -- sequences --

    def attack(self, settings: AttackSettings) -> bool:
        """Fire up to ``settings.count`` times at the target.

        Returns False when the target was abandoned as unreachable.
        """
        ctx = self._ctx
        cfg = ctx.config
        data = ctx.data
        pf = ctx.pathfinder
        clock = ctx.clock

        remaining = settings.count
        last_fire: float | None = None
        try:
            while True:
                ctx.pause_point()
                data.refresh()
                ctx.check_player_death()

                if remaining <= 0:
                    return True

                monster = data.find_monster(settings.target)
                if monster is None or not is_valid_enemy(monster, data):
                    return True

                distance = pf.distance_from_me(monster.position)
                if last_fire is not None and not settings.follow_enemy and distance > settings.max_distance:
                    logger.debug("Monster %d left range (%d > %d), not following",
                                 monster.unit_id, distance, settings.max_distance)
                    return True

                now = clock.now()
                _, state = ctx.tracker.observe(monster, now)
                needs_repositioning = state.stalled_for(now) > cfg.stall_threshold

                try:
                    self.ensure_in_range(monster, state, settings.max_distance,
                                         settings.min_distance, needs_repositioning)
                except MonsterUnreachableError:
                    self._give_up(monster)
                    return False

                if settings.aura != Skill.NONE and last_fire is None:
                    ctx.hid.press_key_binding(data.must_key_binding_for_skill(settings.aura))

                if not self._cadence_ready(last_fire):
                    continue

                self._perform_attack(settings, monster)
                last_fire = clock.now()
                remaining -= 1
        finally:
            ctx.hid.key_up(data.stand_still_key)

    def burst_attack(self, settings: AttackSettings) -> bool:
        """Channel a burst skill at whatever valid enemy is in range.

        Runs until the timeout elapses or no valid enemy is left within
        ``max_distance``. Returns False when a target was abandoned.
        """
        ctx = self._ctx
        cfg = ctx.config
        data = ctx.data
        pf = ctx.pathfinder
        clock = ctx.clock

        try:
            monster = data.find_monster(settings.target)
            if monster is None or not is_valid_enemy(monster, data):
                return True

            _, state = ctx.tracker.observe(monster, clock.now())
            try:
                self.ensure_in_range(monster, state, settings.max_distance, settings.min_distance, False)
            except MonsterUnreachableError:
                self._give_up(monster)
                return False

            started_at = clock.now()
            last_fire: float | None = None
            while True:
                ctx.pause_point()
                data.refresh()
                ctx.check_player_death()

                now = clock.now()
                if now - started_at > settings.timeout:
                    return True

                target = nearest_valid_enemy(data, pf, settings.max_distance)
                if target is None:
                    return True

                _, state = ctx.tracker.observe(target, now)
                needs_repositioning = state.stalled_for(now) > cfg.stall_threshold

                if needs_repositioning or not pf.line_of_sight(data.player.position, target.position):
                    try:
                        self.ensure_in_range(target, state, settings.max_distance,
                                             settings.min_distance, needs_repositioning)
                    except MonsterUnreachableError:
                        self._give_up(target)
                        return False
                    clock.sleep(cfg.attack_poll_interval)
                    continue

                if not self._cadence_ready(last_fire):
                    continue

                self._perform_attack(settings, target)
                last_fire = clock.now()
        finally:
            ctx.hid.key_up(data.stand_still_key)

    # -- range keeping --

    def ensure_in_range(
        self,
        monster: Monster,
        state: AttackState,
        max_distance: int,
        min_distance: int,
        needs_repositioning: bool,
    ) -> None:
        """Bring the player into attack position against *monster*.

        Raises MonsterUnreachableError on a second stall episode and
        PathNotFoundError when no path to the monster exists.
        """
        ctx = self._ctx
        cfg = ctx.config
        pf = ctx.pathfinder
        player_pos = ctx.data.player.position

        distance = pf.distance_from_me(monster.position)
        has_los = pf.line_of_sight(player_pos, monster.position)

        if has_los and distance <= max_distance and not needs_repositioning:
            ctx.tracker.reset_reposition_attempts(monster.unit_id)
            return

        if needs_repositioning:
            if state.reposition_attempts >= 1:
                logger.info("Already repositioned against monster %d (%s), giving up",
                            monster.unit_id, monster.name)
                raise MonsterUnreachableError(monster.unit_id)

            now = ctx.clock.now()
            if state.last_reposition is not None and now - state.last_reposition < cfg.reposition_cooldown:
                return

            dest = pf.beyond_position(monster.position, player_pos, cfg.reposition_distance)
            logger.info("Monster %d (%s) took no damage for %.1fs, repositioning to %s",
                        monster.unit_id, monster.name, state.stalled_for(now), dest)
            ctx.record("reposition", f"reposition to {dest}", (monster.unit_id,))
            try:
                self._move(dest)
            except (PlayerDiedError, SessionStoppedError):
                raise
            except RaidbotError as exc:
                logger.error("Reposition move against monster %d failed: %s", monster.unit_id, exc)
            ctx.tracker.record_reposition(monster.unit_id, ctx.clock.now())
            return

        if max_distance <= cfg.melee_range:
            self._move(monster.position, tolerance=max(max_distance, 1) + 1)
            return

        path = pf.get_path(monster.position)
        if path is None:
            raise PathNotFoundError(f"no path to monster {monster.unit_id} at {monster.position}")

        for point in path:
            d = point.distance(monster.position)
            if d > max_distance or d < min_distance:
                continue
            if not pf.line_of_sight(point, monster.position):
                continue
            dest = point
            if pf.distance_from_me(dest) <= cfg.move_tolerance:
                dest = pf.beyond_position(player_pos, dest, cfg.overshoot_distance)
                # The overshot tile must still see the monster
                if not pf.line_of_sight(dest, monster.position):
                    continue
            self._move(dest)
            return

        logger.debug("No attack position along path to monster %d", monster.unit_id)

    # -- internals --

    def _cadence_ready(self, last_fire: float | None) -> bool:
        """True when the next cast may fire; otherwise suspends briefly."""
        if last_fire is None:
            return True
        ctx = self._ctx
        elapsed = ctx.clock.now() - last_fire
        threshold = ctx.data.cast_duration() - ctx.config.attack_cycle_slack
        if elapsed > threshold:
            return True
        ctx.clock.sleep(max(min(threshold - elapsed, ctx.config.attack_poll_interval), MIN_CADENCE_SLEEP))
        return False

    def _perform_attack(self, settings: AttackSettings, monster: Monster) -> None:
        ctx = self._ctx
        data = ctx.data
        pos = monster.position
        if not ctx.force_attack and not ctx.pathfinder.line_of_sight(data.player.position, pos):
            logger.debug("No line of sight to monster %d, holding fire", monster.unit_id)
            return

        if settings.skill != Skill.NONE and data.player.right_skill != settings.skill:
            ctx.hid.press_key_binding(data.must_key_binding_for_skill(settings.skill))
            ctx.clock.sleep(ctx.config.skill_select_delay)

        if settings.stand_still:
            ctx.hid.key_down(data.stand_still_key)

        x, y = ctx.pathfinder.game_coords_to_screen(pos)
        button = MouseButton.LEFT if settings.kind == AttackKind.PRIMARY else MouseButton.RIGHT
        ctx.hid.click(button, x, y)

        if settings.stand_still:
            ctx.hid.key_up(data.stand_still_key)
        ctx.record("attack", f"{settings.kind.name.lower()} attack on {monster.name}", (monster.unit_id,))

    def _move(self, dest: Position, tolerance: int | None = None) -> None:
        self._follower.move_to(dest, MoveOpts(distance_override=tolerance, ignore_monsters=True))

    def _give_up(self, monster: Monster) -> None:
        logger.info("Giving up on monster %d (%s) in %s: unreachable or unkillable",
                    monster.unit_id, monster.name, self._ctx.data.player.area.name)
        self._ctx.tracker.forget(monster.unit_id)
        self._ctx.record("combat", f"gave up on {monster.name}", (monster.unit_id,))
