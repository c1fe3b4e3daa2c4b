"""MovementOrchestrator — caller-facing movement.

Wraps the PathFollower with death checks, area-transition sync, named
area routes, entrance interaction and combat interruption: when monsters
block the path, movement pauses, the blockers are cleared through the
AttackCoordinator, nearby items are picked up and movement resumes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from raidbot.combat.clear import AreaClearer
from raidbot.core.enums import Area, MouseButton
from raidbot.core.models import Level, Position
from raidbot.errors import (
    AreaNotFoundError, AreaSyncTimeoutError, InteractionError, MonstersInPathError,
    PlayerDiedError, RaidbotError, SessionStoppedError,
)
from raidbot.game.interfaces import Interactor
from raidbot.movement.follower import MoveOpts, PathFollower
from raidbot.movement.routes import (
    DISTANCE_OVERRIDE_ROUTES, PORTAL_ROUTES, STATIC_EXITS, PortalStep,
)

if TYPE_CHECKING:
    from raidbot.context import BotContext

logger = logging.getLogger(__name__)

TargetFn = Callable[[], Position | None]
ItemPicker = Callable[[int], None]

# Entrance click lands this many tiles up-left of the entrance tile.
ENTRANCE_CLICK_OFFSET = 2

_FATAL = (PlayerDiedError, SessionStoppedError)


def _no_pickup(radius: int) -> None:
    logger.debug("No item pickup configured (radius %d)", radius)


class MovementOrchestrator:
    """Moves the character between areas and coordinates."""

    __slots__ = (
        "_ctx", "_interactor", "_follower", "_clearer", "_pick_up_items",
        "_last_engagement",
    )

    def __init__(
        self,
        ctx: BotContext,
        interactor: Interactor,
        follower: PathFollower | None = None,
        clearer: AreaClearer | None = None,
        pick_up_items: ItemPicker | None = None,
    ) -> None:
        self._ctx = ctx
        self._interactor = interactor
        self._follower = follower if follower is not None else PathFollower(ctx)
        self._clearer = clearer if clearer is not None else AreaClearer(ctx, follower=self._follower)
        self._pick_up_items = pick_up_items or _no_pickup
        self._last_engagement: float | None = None

    # -- checks --

    def check_player_death(self) -> None:
        self._ctx.check_player_death()

    def ensure_area_sync(self, expected: Area) -> None:
        """Wait until the loaded area data matches *expected*."""
        ctx = self._ctx
        cfg = ctx.config
        data = ctx.data
        if data.player.area == expected and data.loaded_area == expected:
            return

        for _ in range(cfg.area_sync_attempts):
            data.refresh()
            ctx.check_player_death()
            if data.player.area == expected and data.loaded_area == expected:
                return
            ctx.clock.sleep(cfg.area_sync_delay)

        raise AreaSyncTimeoutError(
            f"area sync timeout: expected {expected.name}, "
            f"player in {data.player.area.name}, loaded {data.loaded_area.name}"
        )

    # -- public movement --

    def move_to_coords(self, pos: Position) -> None:
        ctx = self._ctx
        ctx.check_player_death()
        self.ensure_area_sync(ctx.data.player.area)
        self.move_to(lambda: pos)

    def move_to(self, target_fn: TargetFn) -> None:
        """Follow the position *target_fn* returns until it returns None or we arrive."""
        ctx = self._ctx
        cfg = ctx.config
        data = ctx.data

        ctx.check_player_death()
        self.ensure_area_sync(data.player.area)

        last_movement = False
        engagements = 0
        rounds = 0
        while True:
            ctx.pause_point()
            data.refresh()
            ctx.check_player_death()

            to = target_fn()
            if to is None:
                return

            opts = MoveOpts(ignore_monsters=engagements >= cfg.max_path_engagements)

            if data.can_teleport():
                try:
                    self._follower.move_to(to, opts)
                except MonstersInPathError:
                    self._handle_monsters_in_path()
                    engagements += 1
                    continue
                return

            if last_movement:
                return

            path = ctx.pathfinder.get_path(to)
            if path is not None and path.distance <= cfg.move_tolerance:
                last_movement = True

            try:
                self._follower.move_to(to, opts)
            except MonstersInPathError:
                self._handle_monsters_in_path()
                engagements += 1
                continue

            if last_movement:
                return
            rounds += 1
            if rounds >= cfg.max_movement_rounds:
                logger.debug("Stopping after %d movement rounds towards %s", rounds, to)
                return

    def move_to_area(self, destination: Area, _depth: int = 0) -> None:
        ctx = self._ctx
        data = ctx.data

        ctx.check_player_death()
        self.ensure_area_sync(data.player.area)
        origin = data.player.area

        route = PORTAL_ROUTES.get((origin, destination))
        if route is not None:
            logger.debug("Taking portal route %s -> %s", origin.name, destination.name)
            self._take_portal_route(route, destination)
            self.ensure_area_sync(destination)
            ctx.record("area", f"entered {destination.name}")
            return

        level = next((lv for lv in data.adjacent_levels() if lv.area == destination), None)
        if level is None:
            raise AreaNotFoundError(f"destination area not found: {destination.name}")

        target = self._area_target_fn(level, destination)
        try:
            if (origin, destination) in DISTANCE_OVERRIDE_ROUTES:
                self._move_with_override(target, ctx.config.entrance_distance_override)
            else:
                self.move_to(target)
        except _FATAL:
            raise
        except RaidbotError as exc:
            logger.warning("Error moving to area %s, will try to continue: %s", destination.name, exc)

        if level.is_entrance:
            if not self._enter(level, destination, _depth):
                return
            self.ensure_area_sync(destination)

        logger.info("Moved to area %s", destination.name)
        ctx.record("area", f"entered {destination.name}")

    # -- internals --

    def _area_target_fn(self, level: Level, destination: Area) -> TargetFn:
        ctx = self._ctx
        data = ctx.data
        pf = ctx.pathfinder

        def _target() -> Position | None:
            if data.player.area == destination:
                logger.debug("Reached area %s", destination.name)
                return None

            static = STATIC_EXITS.get((data.player.area, destination))
            if static is not None:
                return static.resolve(pf)

            # Caves: no map to load, walk to the entrance and interact
            if level.is_entrance:
                return level.position

            # Any reachable object of the next level works as a waypoint
            objects = sorted(data.objects(level.area), key=lambda o: pf.distance_from_me(o.position))
            for obj in objects:
                if pf.get_path(obj.position) is not None:
                    return obj.position
            return level.position

        return _target

    def _move_with_override(self, target_fn: TargetFn, tolerance: int) -> None:
        pos = target_fn()
        if pos is None:
            return
        cfg = self._ctx.config
        engagements = 0
        while True:
            self._ctx.pause_point()
            opts = MoveOpts(
                distance_override=tolerance,
                ignore_monsters=engagements >= cfg.max_path_engagements,
            )
            try:
                self._follower.move_to(pos, opts)
                return
            except MonstersInPathError:
                logger.debug("Monsters in path while approaching %s", pos)
                self._handle_monsters_in_path()
                engagements += 1

    def _handle_monsters_in_path(self) -> None:
        ctx = self._ctx
        cfg = ctx.config
        now = ctx.clock.now()

        if self._last_engagement is not None:
            since = now - self._last_engagement
            if since <= cfg.monster_handle_cooldown:
                ctx.clock.sleep(cfg.monster_handle_cooldown - since)
                return
        self._last_engagement = now

        logger.debug("Monsters in path, clearing radius %d", cfg.clear_path_dist)
        ctx.record("combat", "clearing monsters in path")
        try:
            self._clearer.clear_around_player(cfg.clear_path_dist)
        except _FATAL:
            raise
        except RaidbotError as exc:
            logger.warning("Clearing monsters in path failed: %s", exc)

        try:
            self._pick_up_items(cfg.loot_radius)
        except _FATAL:
            raise
        except RaidbotError as exc:
            logger.warning("Error picking up items after combat: %s", exc)

    def _enter(self, level: Level, destination: Area, depth: int) -> bool:
        """Interact with a cave entrance. Returns False when a nested
        ``move_to_area`` already finished the trip."""
        ctx = self._ctx
        cfg = ctx.config
        data = ctx.data
        pf = ctx.pathfinder

        last_error: InteractionError | None = None
        for attempt in range(cfg.entrance_attempts):
            ctx.pause_point()
            data.refresh()
            distance = pf.distance_from_me(level.position)

            if distance > cfg.entrance_far_distance:
                if depth >= cfg.entrance_max_depth:
                    raise InteractionError(
                        f"still {distance} tiles from the {destination.name} entrance after {depth} retries"
                    )
                logger.debug("Entrance %d tiles away, moving again", distance)
                self.move_to_area(destination, _depth=depth + 1)
                return False

            if distance > cfg.entrance_click_distance:
                click_at = Position(level.position.x - ENTRANCE_CLICK_OFFSET,
                                    level.position.y - ENTRANCE_CLICK_OFFSET)
                x, y = pf.game_coords_to_screen(click_at)
                ctx.hid.click(MouseButton.LEFT, x, y)
                ctx.clock.sleep(cfg.entrance_click_delay)
                data.refresh()

            ctx.check_player_death()
            try:
                self._interactor.interact_entrance(destination)
                return True
            except InteractionError as exc:
                last_error = exc
                logger.warning("Entrance interaction with %s failed (attempt %d/%d): %s",
                               destination.name, attempt + 1, cfg.entrance_attempts, exc)
                if attempt < cfg.entrance_attempts - 1:
                    ctx.clock.sleep(cfg.entrance_retry_delay)
                    data.refresh()
                    ctx.check_player_death()

        raise InteractionError(
            f"failed to enter {destination.name} after {cfg.entrance_attempts} attempts: {last_error}"
        )

    def _take_portal_route(self, route: tuple[PortalStep, ...], destination: Area) -> None:
        data = self._ctx.data
        for step in route:
            obj = data.find_object(step.object_name)
            if obj is None:
                raise InteractionError(f"{step.object_name} not found in {data.player.area.name}")
            self.move_to_coords(obj.position)

            self._interactor.interact_object(obj, self._portal_done_fn(step, destination))

    def _portal_done_fn(self, step: PortalStep, destination: Area) -> Callable[[], bool]:
        data = self._ctx.data
        if step.until_object is not None:
            wanted = step.until_object
            return lambda: data.find_object(wanted) is not None
        return lambda: data.player.area == destination
