"""Tests for the MovementOrchestrator: area sync, combat interrupts, entrances, routes."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from raidbot.core.enums import Area, MouseButton
from raidbot.core.models import GameObject, Level, Position
from raidbot.errors import (
    AreaNotFoundError, AreaSyncTimeoutError, InteractionError, MonstersInPathError,
    PathNotFoundError, PlayerDiedError,
)
from raidbot.movement.orchestrator import MovementOrchestrator
from tests.helpers.fakes import (
    FakeGame, FakeInteractor, FakePathFinder, RecordingHID, StubClearer, StubFollower,
    make_context,
)


class _Loot:
    def __init__(self):
        self.radii: list[int] = []

    def __call__(self, radius: int) -> None:
        self.radii.append(radius)


def _setup(player=(0, 0), area=Area.BLOOD_MOOR, interactor=None, **cfg):
    game = FakeGame(player_pos=player, area=area)
    pf = FakePathFinder(game)
    hid = RecordingHID(game.clock, game)
    ctx = make_context(game, pf, hid, **cfg)
    follower = StubFollower(game)
    clearer = StubClearer()
    loot = _Loot()
    orch = MovementOrchestrator(
        ctx, interactor or FakeInteractor(),
        follower=follower, clearer=clearer, pick_up_items=loot,
    )
    return game, pf, hid, ctx, follower, clearer, loot, orch


def _until(game, goal):
    return lambda: None if game.player.position == goal else goal


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

class TestChecks:
    def test_check_player_death(self):
        game, *_, orch = _setup()
        orch.check_player_death()
        game.set_player(hp_percent=0)
        with pytest.raises(PlayerDiedError):
            orch.check_player_death()

    def test_area_sync_immediate(self):
        game, *_, orch = _setup()
        orch.ensure_area_sync(Area.BLOOD_MOOR)
        assert game.refresh_count == 0

    def test_area_sync_waits_for_loaded_area(self):
        game, pf, hid, ctx, *_, orch = _setup()
        game.set_player(area=Area.COLD_PLAINS)
        game.sync_after = 3
        orch.ensure_area_sync(Area.COLD_PLAINS)
        assert game.refresh_count == 3

    def test_area_sync_timeout(self):
        game, pf, hid, ctx, *_, orch = _setup()
        start = game.clock.now()
        game.set_player(area=Area.COLD_PLAINS)
        with pytest.raises(AreaSyncTimeoutError):
            orch.ensure_area_sync(Area.COLD_PLAINS)
        assert game.refresh_count == ctx.config.area_sync_attempts
        assert game.clock.now() - start == pytest.approx(
            ctx.config.area_sync_attempts * ctx.config.area_sync_delay)

    def test_area_sync_detects_death(self):
        game, *_, orch = _setup()
        game.set_player(area=Area.COLD_PLAINS, hp_percent=0)
        with pytest.raises(PlayerDiedError):
            orch.ensure_area_sync(Area.COLD_PLAINS)


# ---------------------------------------------------------------------------
# move_to and combat interrupts
# ---------------------------------------------------------------------------

class TestMoveTo:
    def test_arrives(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup()
        goal = Position(20, 0)
        orch.move_to(_until(game, goal))
        assert game.player.position == goal
        assert len(follower.moves) == 1

    def test_move_to_coords(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup()
        orch.move_to_coords(Position(20, 0))
        assert game.player.position == Position(20, 0)
        # The last hop is made once the path is within tolerance, then it stops
        assert len(follower.moves) == 2

    def test_monsters_in_path_clear_then_loot_then_resume(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup()
        follower.errors.append(MonstersInPathError("zombie"))
        goal = Position(20, 0)
        orch.move_to(_until(game, goal))
        assert clearer.radii == [ctx.config.clear_path_dist]
        assert loot.radii == [ctx.config.loot_radius]
        assert len(follower.moves) == 2
        assert game.player.position == goal

    def test_interrupt_cooldown(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup()
        follower.errors.extend([MonstersInPathError("a"), MonstersInPathError("b")])
        orch.move_to(_until(game, Position(20, 0)))
        # Second interrupt inside the cooldown only waits it out
        assert clearer.radii == [ctx.config.clear_path_dist]
        assert ctx.config.monster_handle_cooldown in game.clock.sleeps

    def test_clear_failure_is_not_fatal(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup()
        clearer.error = PathNotFoundError("walled in")
        follower.errors.append(MonstersInPathError("zombie"))
        orch.move_to(_until(game, Position(20, 0)))
        assert loot.radii == [ctx.config.loot_radius]
        assert game.player.position == Position(20, 0)

    def test_death_during_clear_propagates(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup()
        clearer.error = PlayerDiedError()
        follower.errors.append(MonstersInPathError("zombie"))
        with pytest.raises(PlayerDiedError):
            orch.move_to(_until(game, Position(20, 0)))
        assert loot.radii == []

    def test_engagements_capped_then_monsters_ignored(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup()
        follower.raise_until_ignored = MonstersInPathError("horde")
        orch.move_to(_until(game, Position(20, 0)))
        cap = ctx.config.max_path_engagements
        assert len(follower.moves) == cap + 1
        assert follower.moves[-1][1].ignore_monsters is True
        assert game.player.position == Position(20, 0)

    def test_rounds_capped_when_never_arriving(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup()
        follower.arrive = False
        orch.move_to(lambda: Position(40, 0))
        assert len(follower.moves) == ctx.config.max_movement_rounds

    def test_teleport_single_call(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup()
        game.teleport = True
        follower.arrive = False
        orch.move_to(lambda: Position(40, 0))
        assert len(follower.moves) == 1

    def test_target_none_stops_immediately(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup()
        orch.move_to(lambda: None)
        assert follower.moves == []


# ---------------------------------------------------------------------------
# Areas
# ---------------------------------------------------------------------------

class TestMoveToArea:
    def test_walks_into_adjacent_area(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup()
        game.levels = [Level(Area.COLD_PLAINS, Position(30, 0))]
        follower.on_move = lambda dest: game.enter(Area.COLD_PLAINS)

        orch.move_to_area(Area.COLD_PLAINS)

        assert game.player.area == Area.COLD_PLAINS
        assert follower.moves[0][0] == Position(30, 0)
        assert any("COLD_PLAINS" in e.message for e in ctx.event_log.by_category("area"))

    def test_prefers_reachable_object_of_next_level(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup()
        game.levels = [Level(Area.COLD_PLAINS, Position(30, 0))]
        game.area_objects[Area.COLD_PLAINS] = [
            GameObject(1, "far_shrine", Position(50, 0)),
            GameObject(2, "unreachable", Position(31, 0)),
            GameObject(3, "waypoint", Position(35, 0)),
        ]
        pf.paths[Position(31, 0)] = None
        follower.on_move = lambda dest: game.enter(Area.COLD_PLAINS)

        orch.move_to_area(Area.COLD_PLAINS)

        assert follower.moves[0][0] == Position(35, 0)

    def test_unknown_area(self):
        *_, orch = _setup()
        with pytest.raises(AreaNotFoundError):
            orch.move_to_area(Area.HARROGATH)

    def test_movement_error_is_logged_and_entrance_still_tried(self):
        interactor = FakeInteractor()
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup(interactor=interactor)
        interactor.on_success = lambda: game.enter(Area.DEN_OF_EVIL)
        game.levels = [Level(Area.DEN_OF_EVIL, Position(2, 0), is_entrance=True)]
        follower.errors.append(PathNotFoundError("blocked"))

        orch.move_to_area(Area.DEN_OF_EVIL)

        assert interactor.entrance_calls == [Area.DEN_OF_EVIL]
        assert game.player.area == Area.DEN_OF_EVIL

    def test_static_exit(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup(
            player=(15100, 5050), area=Area.TAMOE_HIGHLAND)
        game.levels = [Level(Area.MONASTERY_GATE, Position(15000, 5000))]
        follower.on_move = lambda dest: game.enter(Area.MONASTERY_GATE)

        orch.move_to_area(Area.MONASTERY_GATE)

        assert follower.moves[0][0] == Position(15139, 5056)

    def test_probed_static_exit_falls_back(self):
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup(
            player=(5050, 5050), area=Area.LUT_GHOLEIN)
        game.levels = [Level(Area.ROCKY_WASTE, Position(5000, 5000))]
        pf.paths[Position(5004, 5065)] = None
        follower.on_move = lambda dest: game.enter(Area.ROCKY_WASTE)

        orch.move_to_area(Area.ROCKY_WASTE)

        assert follower.moves[0][0] == Position(5096, 4997)


class TestEntrances:
    def _entrance_setup(self, failures=0, player=(0, 0)):
        interactor = FakeInteractor(failures=failures)
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup(
            player=player, interactor=interactor)
        interactor.on_success = lambda: game.enter(Area.DEN_OF_EVIL)
        game.levels = [Level(Area.DEN_OF_EVIL, Position(10, 0), is_entrance=True)]
        return game, hid, ctx, follower, interactor, orch

    def test_enters_cave(self):
        game, hid, ctx, follower, interactor, orch = self._entrance_setup()
        orch.move_to_area(Area.DEN_OF_EVIL)
        assert interactor.entrance_calls == [Area.DEN_OF_EVIL]
        assert game.player.area == Area.DEN_OF_EVIL
        assert hid.clicks == []

    def test_retries_then_succeeds(self):
        game, hid, ctx, follower, interactor, orch = self._entrance_setup(failures=2)
        orch.move_to_area(Area.DEN_OF_EVIL)
        assert len(interactor.entrance_calls) == 3
        assert game.clock.sleeps.count(ctx.config.entrance_retry_delay) == 2
        assert game.player.area == Area.DEN_OF_EVIL

    def test_gives_up_after_attempts(self):
        game, hid, ctx, follower, interactor, orch = self._entrance_setup(failures=99)
        with pytest.raises(InteractionError):
            orch.move_to_area(Area.DEN_OF_EVIL)
        assert len(interactor.entrance_calls) == ctx.config.entrance_attempts

    def test_medium_distance_clicks_next_to_entrance(self):
        game, hid, ctx, follower, interactor, orch = self._entrance_setup()
        # Movement stops five tiles short of the entrance
        follower.arrive = False
        game.set_player(position=(5, 0))
        orch.move_to_area(Area.DEN_OF_EVIL)
        assert [(c.button, c.x, c.y) for c in hid.clicks] == [(MouseButton.LEFT, 8, -2)]
        assert ctx.config.entrance_click_delay in game.clock.sleeps
        assert game.player.area == Area.DEN_OF_EVIL

    def test_far_entrance_retries_movement_with_depth_limit(self):
        game, hid, ctx, follower, interactor, orch = self._entrance_setup()
        follower.arrive = False
        with pytest.raises(InteractionError):
            orch.move_to_area(Area.DEN_OF_EVIL)
        assert interactor.entrance_calls == []

    def test_far_entrance_second_approach_records_entry_once(self):
        game, hid, ctx, follower, interactor, orch = self._entrance_setup()
        follower.arrive = False

        # The first approach runs out of movement rounds; the retry arrives
        def _arrive_on_retry(dest):
            if len(follower.moves) >= ctx.config.max_movement_rounds:
                follower.arrive = True

        follower.on_move = _arrive_on_retry
        orch.move_to_area(Area.DEN_OF_EVIL)

        assert len(follower.moves) > ctx.config.max_movement_rounds
        assert interactor.entrance_calls == [Area.DEN_OF_EVIL]
        assert game.player.area == Area.DEN_OF_EVIL
        entered = [e.message for e in ctx.event_log.by_category("area")]
        assert entered == ["entered DEN_OF_EVIL"]

    def test_distance_override_route(self):
        interactor = FakeInteractor()
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup(
            area=Area.TOWER_CELLAR_LEVEL_1, interactor=interactor)
        interactor.on_success = lambda: game.enter(Area.TOWER_CELLAR_LEVEL_2)
        game.levels = [Level(Area.TOWER_CELLAR_LEVEL_2, Position(10, 0), is_entrance=True)]

        orch.move_to_area(Area.TOWER_CELLAR_LEVEL_2)

        assert len(follower.moves) == 1
        assert follower.moves[0][1].distance_override == ctx.config.entrance_distance_override
        assert game.player.area == Area.TOWER_CELLAR_LEVEL_2


class TestPortalRoutes:
    def test_single_portal(self):
        interactor = FakeInteractor()
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup(
            area=Area.PALACE_CELLAR_LEVEL_3, interactor=interactor)
        game.area_objects[Area.PALACE_CELLAR_LEVEL_3] = [
            GameObject(7, "arcane_sanctuary_portal", Position(5, 5)),
        ]
        interactor.on_success = lambda: game.enter(Area.ARCANE_SANCTUARY)

        orch.move_to_area(Area.ARCANE_SANCTUARY)

        assert interactor.object_calls == ["arcane_sanctuary_portal"]
        assert game.player.area == Area.ARCANE_SANCTUARY

    def test_tome_reveals_portal(self):
        interactor = FakeInteractor()
        game, pf, hid, ctx, follower, clearer, loot, orch = _setup(
            area=Area.ARCANE_SANCTUARY, interactor=interactor)
        objects = game.area_objects.setdefault(Area.ARCANE_SANCTUARY, [])
        objects.append(GameObject(1, "yet_another_tome", Position(4, 0)))

        def _use():
            if interactor.object_calls[-1] == "yet_another_tome":
                objects.append(GameObject(2, "permanent_town_portal", Position(8, 0)))
            else:
                game.enter(Area.CANYON_OF_THE_MAGI)

        interactor.on_success = _use
        orch.move_to_area(Area.CANYON_OF_THE_MAGI)

        assert interactor.object_calls == ["yet_another_tome", "permanent_town_portal"]
        assert game.player.area == Area.CANYON_OF_THE_MAGI

    def test_missing_portal_object(self):
        *_, orch = _setup(area=Area.PALACE_CELLAR_LEVEL_3)
        with pytest.raises(InteractionError):
            orch.move_to_area(Area.ARCANE_SANCTUARY)
