"""PathFollower — drives the character to a tile.

The only component that issues movement input. One ``move_to`` call runs a
tick loop until the player is within the arrival tolerance, the overall
timeout elapses (silent success) or pathing fails outright.

Per-call loop state lives in an immutable MovementState advanced by the
pure step functions ``track_idle`` and ``adjust_tolerance``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from raidbot.core.enums import Domain, Skill
from raidbot.core.models import Position
from raidbot.errors import MonstersInPathError, PathNotFoundError

if TYPE_CHECKING:
    from raidbot.context import BotContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MoveOpts:
    """Per-call movement options."""

    distance_override: int | None = None
    stationary_range: tuple[int, int] | None = None   # Stop once remaining distance is in [min, max]
    ignore_monsters: bool = False


@dataclass(frozen=True, slots=True)
class MovementState:
    previous_position: Position | None
    idle_since: float | None
    previous_distance: int
    tolerance: int


# ---------------------------------------------------------------------------
# Pure step functions
# ---------------------------------------------------------------------------

def track_idle(
    state: MovementState,
    position: Position,
    now: float,
    threshold: float,
) -> tuple[MovementState, bool]:
    """Advance idle tracking. Returns the new state and whether to nudge."""
    if state.previous_position is None or position != state.previous_position:
        return replace(state, previous_position=position, idle_since=None), False
    if state.idle_since is None:
        return replace(state, idle_since=now), False
    if now - state.idle_since > threshold:
        return replace(state, idle_since=None), True
    return state, False


def adjust_tolerance(
    state: MovementState,
    distance: int,
    default: int,
    override: int | None,
    widen_below: int,
) -> MovementState:
    """Arrival tolerance for the next step.

    With an override the tolerance stays fixed. Otherwise it widens by the
    default step while the remaining distance is short and barely shrinking,
    and snaps back to the default as soon as progress resumes.
    """
    if override is not None:
        tolerance = override
    elif distance < widen_below and abs(state.previous_distance - distance) < default:
        tolerance = state.tolerance + default
    else:
        tolerance = default
    return replace(state, tolerance=tolerance, previous_distance=distance)


# ---------------------------------------------------------------------------
# PathFollower
# ---------------------------------------------------------------------------

class PathFollower:
    """Moves the character along computed paths with teleport/walk cadence."""

    __slots__ = ("_ctx", "_step_counter")

    def __init__(self, ctx: BotContext) -> None:
        self._ctx = ctx
        self._step_counter = 0

    def move_to(self, destination: Position, opts: MoveOpts | None = None) -> None:
        opts = opts or MoveOpts()
        ctx = self._ctx
        cfg = ctx.config
        data = ctx.data
        pf = ctx.pathfinder
        clock = ctx.clock

        default_tol = cfg.move_tolerance
        state = MovementState(
            previous_position=None,
            idle_since=None,
            previous_distance=0,
            tolerance=opts.distance_override if opts.distance_override is not None else default_tol,
        )

        started_at = clock.now()
        deadline = started_at + cfg.move_timeout
        last_step: float | None = None
        last_monster_check: float | None = None
        walk_interval = self._next_walk_interval()

        while True:
            ctx.pause_point()
            data.refresh()
            ctx.check_player_death()

            now = clock.now()
            if now >= deadline:
                logger.debug("Movement to %s timed out after %.1fs", destination, now - started_at)
                return

            distance = pf.distance_from_me(destination)
            if opts.stationary_range is not None:
                lo, hi = opts.stationary_range
                if lo <= distance <= hi:
                    logger.debug("Reached stationary band %d-%d (distance %d)", lo, hi, distance)
                    return

            if distance < state.tolerance:
                return

            state, nudge = track_idle(state, data.player.position, now, cfg.idle_threshold)
            if nudge:
                logger.debug("No progress for %.1fs, nudging", cfg.idle_threshold)
                pf.random_movement()

            teleporting = data.can_teleport()

            # Cadence: teleport waits out the cast, walking a randomized step
            if last_step is not None:
                interval = data.cast_duration() if teleporting else walk_interval
                remaining = interval - (now - last_step)
                if remaining > 0:
                    clock.sleep(min(remaining, cfg.wait_poll_interval, deadline - now))
                    continue

            if not opts.ignore_monsters and not teleporting and not data.in_town():
                if last_monster_check is None or now - last_monster_check > cfg.monster_check_interval:
                    last_monster_check = now
                    self._check_monsters_in_path()

            self._select_locomotion_skill(teleporting)

            path = pf.get_path(destination)
            if path is None:
                if distance < state.tolerance + cfg.no_path_grace:
                    return
                raise PathNotFoundError(
                    f"no path to {destination} in {data.player.area.name}"
                )
            if path.distance <= state.tolerance or len(path) <= state.tolerance:
                return

            state = adjust_tolerance(
                state, path.distance, default_tol, opts.distance_override,
                cfg.tolerance_widen_distance,
            )
            state = replace(state, previous_position=data.player.position)

            last_step = now
            pf.move_through_path(path, walk_interval)
            walk_interval = self._next_walk_interval()

    # -- internals --

    def _next_walk_interval(self) -> float:
        lo, hi = self._ctx.config.walk_interval_ms
        ms = self._ctx.rng.next_int(Domain.MOVEMENT, self._ctx.session_id, self._step_counter, lo, hi)
        self._step_counter += 1
        return ms / 1000.0

    def _select_locomotion_skill(self, teleporting: bool) -> None:
        data = self._ctx.data
        right = data.player.right_skill
        if teleporting:
            if right != Skill.TELEPORT:
                self._ctx.hid.press_key_binding(data.must_key_binding_for_skill(Skill.TELEPORT))
            return
        kb = data.key_binding_for_skill(Skill.VIGOR)
        if kb is not None and right != Skill.VIGOR:
            self._ctx.hid.press_key_binding(kb)

    def _check_monsters_in_path(self) -> None:
        ctx = self._ctx
        player_pos = ctx.data.player.position
        for m in ctx.data.alive_enemies():
            d = ctx.pathfinder.distance_from_me(m.position)
            if d > ctx.config.clear_path_dist:
                continue
            if ctx.pathfinder.line_of_sight(player_pos, m.position):
                logger.debug("Monster %s in path at distance %d", m.name, d)
                raise MonstersInPathError(f"monster {m.unit_id} ({m.name}) blocks the path")
