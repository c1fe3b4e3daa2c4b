"""Tests for the PathFollower tick loop and its pure step functions."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from raidbot.core.enums import Area, Skill
from raidbot.core.models import KeyBinding, Position
from raidbot.errors import (
    MissingKeyBindingError, MonstersInPathError, PathNotFoundError, PlayerDiedError,
)
from raidbot.movement.follower import (
    MoveOpts, MovementState, PathFollower, adjust_tolerance, track_idle,
)
from tests.helpers.fakes import FakeGame, FakePathFinder, RecordingHID, make_context


def _state(**kw) -> MovementState:
    defaults = dict(previous_position=None, idle_since=None, previous_distance=0, tolerance=4)
    defaults.update(kw)
    return MovementState(**defaults)


def _setup(player=(0, 0), area=Area.BLOOD_MOOR, step=5, **cfg):
    game = FakeGame(player_pos=player, area=area)
    pf = FakePathFinder(game, step=step)
    hid = RecordingHID(game.clock, game)
    ctx = make_context(game, pf, hid, **cfg)
    return game, pf, hid, ctx, PathFollower(ctx)


# ---------------------------------------------------------------------------
# Pure step functions
# ---------------------------------------------------------------------------

class TestTrackIdle:
    def test_first_position_is_recorded(self):
        state, nudge = track_idle(_state(), Position(1, 1), 10.0, 1.5)
        assert state.previous_position == Position(1, 1)
        assert nudge is False

    def test_standing_still_starts_idle_timer(self):
        state, nudge = track_idle(_state(previous_position=Position(1, 1)), Position(1, 1), 10.0, 1.5)
        assert state.idle_since == 10.0
        assert nudge is False

    def test_nudge_after_threshold(self):
        s = _state(previous_position=Position(1, 1), idle_since=10.0)
        state, nudge = track_idle(s, Position(1, 1), 11.6, 1.5)
        assert nudge is True
        assert state.idle_since is None

    def test_no_nudge_before_threshold(self):
        s = _state(previous_position=Position(1, 1), idle_since=10.0)
        _, nudge = track_idle(s, Position(1, 1), 11.0, 1.5)
        assert nudge is False

    def test_moving_clears_idle_timer(self):
        s = _state(previous_position=Position(1, 1), idle_since=10.0)
        state, nudge = track_idle(s, Position(2, 1), 20.0, 1.5)
        assert state.idle_since is None
        assert nudge is False


class TestAdjustTolerance:
    def test_override_is_fixed(self):
        state = adjust_tolerance(_state(tolerance=7, previous_distance=10), 9, 4, 7, 20)
        assert state.tolerance == 7
        assert state.previous_distance == 9

    def test_widens_when_close_and_stuck(self):
        state = adjust_tolerance(_state(tolerance=4, previous_distance=12), 10, 4, None, 20)
        assert state.tolerance == 8

    def test_widening_accumulates(self):
        s = adjust_tolerance(_state(tolerance=4, previous_distance=12), 10, 4, None, 20)
        s = adjust_tolerance(s, 9, 4, None, 20)
        assert s.tolerance == 12

    def test_resets_on_progress(self):
        state = adjust_tolerance(_state(tolerance=12, previous_distance=18), 10, 4, None, 20)
        assert state.tolerance == 4

    def test_no_widening_when_far(self):
        state = adjust_tolerance(_state(tolerance=4, previous_distance=31), 30, 4, None, 20)
        assert state.tolerance == 4


# ---------------------------------------------------------------------------
# move_to
# ---------------------------------------------------------------------------

class TestMoveTo:
    def test_walks_until_within_tolerance(self):
        game, pf, hid, ctx, follower = _setup()
        follower.move_to(Position(20, 0))
        assert game.player.position == Position(20, 0)
        assert [m[1] for m in pf.moves] == [
            Position(5, 0), Position(10, 0), Position(15, 0), Position(20, 0),
        ]

    def test_arrival_ends_call_without_waiting_out_step(self):
        game, pf, hid, ctx, follower = _setup()
        start = game.clock.now()
        follower.move_to(Position(5, 0))
        assert game.player.position == Position(5, 0)
        assert len(pf.moves) == 1
        assert game.clock.now() - start <= ctx.config.wait_poll_interval

    def test_stuck_player_nudged_while_waiting_for_next_step(self):
        game, pf, hid, ctx, follower = _setup(walk_interval_ms=(4000, 4000))
        pf.frozen = True
        follower.move_to(Position(30, 0))
        # One step every 4 s; idle polling nudges in between
        assert pf.nudges > len(pf.moves)

    def test_already_there_issues_no_input(self):
        game, pf, hid, ctx, follower = _setup(player=(2, 0))
        follower.move_to(Position(0, 0))
        assert pf.moves == []

    def test_walk_steps_spaced_by_walk_interval(self):
        game, pf, hid, ctx, follower = _setup(step=2)
        follower.move_to(Position(20, 0))
        lo, hi = ctx.config.walk_interval_ms
        times = [t for t, _ in pf.moves]
        gaps = [b - a for a, b in zip(times, times[1:])]
        assert gaps
        assert all(g >= lo / 1000.0 - 1e-9 for g in gaps)
        assert all(g <= hi / 1000.0 + ctx.config.wait_poll_interval for g in gaps)

    def test_same_seed_same_cadence(self):
        runs = []
        for _ in range(2):
            game, pf, hid, ctx, follower = _setup(step=2)
            follower.move_to(Position(20, 0))
            runs.append([t for t, _ in pf.moves])
        assert runs[0] == runs[1]

    def test_timeout_returns_silently(self):
        game, pf, hid, ctx, follower = _setup()
        pf.frozen = True
        start = game.clock.now()
        follower.move_to(Position(30, 0))
        elapsed = game.clock.now() - start
        assert ctx.config.move_timeout <= elapsed < ctx.config.move_timeout + 0.2
        assert game.player.position == Position(0, 0)

    def test_stuck_player_is_nudged(self):
        game, pf, hid, ctx, follower = _setup()
        pf.frozen = True
        follower.move_to(Position(30, 0))
        assert pf.nudges >= 1

    def test_death_aborts(self):
        game, pf, hid, ctx, follower = _setup()
        game.set_player(hp_percent=0)
        with pytest.raises(PlayerDiedError):
            follower.move_to(Position(20, 0))

    def test_death_mid_walk_aborts(self):
        game, pf, hid, ctx, follower = _setup()
        game.on_refresh.append(
            lambda: game.set_player(hp_percent=0) if pf.moves else None
        )
        with pytest.raises(PlayerDiedError):
            follower.move_to(Position(20, 0))
        assert len(pf.moves) == 1

    def test_no_path_far_raises(self):
        game, pf, hid, ctx, follower = _setup()
        pf.paths[Position(20, 0)] = None
        with pytest.raises(PathNotFoundError):
            follower.move_to(Position(20, 0))

    def test_no_path_but_close_is_success(self):
        game, pf, hid, ctx, follower = _setup()
        pf.paths[Position(6, 0)] = None
        follower.move_to(Position(6, 0))
        assert pf.moves == []

    def test_stationary_range_stops_inside_band(self):
        game, pf, hid, ctx, follower = _setup()
        follower.move_to(Position(8, 0), MoveOpts(stationary_range=(5, 10)))
        assert pf.moves == []

    def test_distance_override_widens_arrival(self):
        game, pf, hid, ctx, follower = _setup()
        follower.move_to(Position(7, 0), MoveOpts(distance_override=8))
        assert pf.moves == []

    def test_vigor_selected_while_walking(self):
        game, pf, hid, ctx, follower = _setup()
        game.bindings[Skill.VIGOR] = KeyBinding("v")
        follower.move_to(Position(20, 0))
        assert hid.presses == [KeyBinding("v")]


class TestTeleport:
    def test_teleport_selected_and_paced_by_cast(self):
        game, pf, hid, ctx, follower = _setup(step=10)
        game.teleport = True
        game.bindings[Skill.TELEPORT] = KeyBinding("f3")
        follower.move_to(Position(30, 0))

        assert hid.presses == [KeyBinding("f3")]
        assert game.player.right_skill == Skill.TELEPORT
        times = [t for t, _ in pf.moves]
        assert len(times) == 3
        cast = game.cast_duration()
        assert all(b - a >= cast - 1e-9 for a, b in zip(times, times[1:]))

    def test_teleport_without_binding_raises(self):
        game, pf, hid, ctx, follower = _setup()
        game.teleport = True
        with pytest.raises(MissingKeyBindingError):
            follower.move_to(Position(30, 0))


class TestMonstersInPath:
    def test_visible_monster_raises(self):
        game, pf, hid, ctx, follower = _setup()
        game.add_monster(1, pos=(5, 0))
        with pytest.raises(MonstersInPathError):
            follower.move_to(Position(20, 0))

    def test_ignore_monsters(self):
        game, pf, hid, ctx, follower = _setup()
        game.add_monster(1, pos=(5, 0))
        follower.move_to(Position(20, 0), MoveOpts(ignore_monsters=True))
        assert game.player.position == Position(20, 0)

    def test_monster_behind_wall_is_ignored(self):
        game, pf, hid, ctx, follower = _setup()
        game.add_monster(1, pos=(5, 5))
        pf.blocked_sight.add(Position(5, 5))
        follower.move_to(Position(20, 0))
        assert game.player.position == Position(20, 0)

    def test_far_or_dead_monsters_are_ignored(self):
        game, pf, hid, ctx, follower = _setup()
        game.add_monster(1, pos=(0, 30))
        game.add_monster(2, pos=(3, 0), life=0)
        follower.move_to(Position(20, 0))
        assert game.player.position == Position(20, 0)

    def test_town_never_checks(self):
        game, pf, hid, ctx, follower = _setup(area=Area.ROGUE_ENCAMPMENT)
        game.add_monster(1, pos=(5, 0))
        follower.move_to(Position(20, 0))
        assert game.player.position == Position(20, 0)

    def test_teleporting_never_checks(self):
        game, pf, hid, ctx, follower = _setup(step=10)
        game.teleport = True
        game.bindings[Skill.TELEPORT] = KeyBinding("f3")
        game.add_monster(1, pos=(5, 0))
        follower.move_to(Position(20, 0))
        assert game.player.position == Position(20, 0)
