"""Input collaborators for the sandbox: HID and entrance/object interactor."""

from __future__ import annotations

import logging
from typing import Callable

from raidbot.core.enums import Area, MouseButton, Skill
from raidbot.core.models import GameObject, KeyBinding, Position
from raidbot.errors import InteractionError
from raidbot.game.interfaces import HID, Interactor
from raidbot.sandbox.pathfinder import GridPathFinder
from raidbot.sandbox.world import SandboxWorld

logger = logging.getLogger(__name__)

MELEE_REACH = 3
SPELL_REACH = 25
NOVA_RADIUS = 7
HIT_RADIUS = 1          # A click within this many tiles of a monster hits it
CLICK_WALK_LIMIT = 10
INTERACT_RANGE = 5

# Right skills that do not damage anything
_UTILITY_SKILLS = frozenset({Skill.TELEPORT, Skill.VIGOR, Skill.CONCENTRATION, Skill.HOLY_FREEZE})


class SandboxHID(HID):
    """Translates clicks and key presses into sandbox world mutations."""

    __slots__ = ("_world", "_pf", "_damage", "held_keys", "clicks")

    def __init__(self, world: SandboxWorld, pathfinder: GridPathFinder, damage: int = 12) -> None:
        self._world = world
        self._pf = pathfinder
        self._damage = damage
        self.held_keys: set[KeyBinding] = set()
        self.clicks: int = 0

    def click(self, button: MouseButton, x: int, y: int, modifier: KeyBinding | None = None) -> None:
        self.clicks += 1
        world = self._world
        pos = self._pf.screen_to_game_coords(x, y)
        here = world.live_position

        if button == MouseButton.RIGHT:
            self._cast(pos, here)
            return

        # Left click: melee swing if a monster is under the cursor, else walk there
        if world.damage_monsters_if_reachable(pos, here, HIT_RADIUS, MELEE_REACH, self._damage):
            return
        if here.distance(pos) <= CLICK_WALK_LIMIT:
            world.place_player(pos)

    def key_down(self, kb: KeyBinding) -> None:
        self.held_keys.add(kb)

    def key_up(self, kb: KeyBinding) -> None:
        self.held_keys.discard(kb)

    def press_key_binding(self, kb: KeyBinding) -> None:
        skill = self._world.skill_for_key(kb)
        if skill is None:
            logger.debug("Key %s is not bound to a skill", kb.key)
            return
        self._world.select_skill(skill)

    def _cast(self, pos: Position, here: Position) -> None:
        world = self._world
        skill = world.live_right_skill
        if skill == Skill.TELEPORT:
            world.place_player(pos)
        elif skill == Skill.NOVA:
            world.damage_monsters(here, NOVA_RADIUS, self._damage)
        elif skill not in _UTILITY_SKILLS:
            world.damage_monsters_if_reachable(pos, here, HIT_RADIUS, SPELL_REACH, self._damage)


class SandboxInteractor(Interactor):
    """Uses entrances and objects once the player stands close enough."""

    __slots__ = ("_world",)

    def __init__(self, world: SandboxWorld) -> None:
        self._world = world

    def interact_entrance(self, area: Area) -> None:
        world = self._world
        entrance = world.entrance_to(area)
        if entrance is None:
            raise InteractionError(f"no entrance to {area.name} here")
        distance = world.live_position.distance(entrance.level.position)
        if distance > INTERACT_RANGE:
            raise InteractionError(f"entrance to {area.name} is {distance} tiles away")
        world.enter_area(area, entrance.arrival)

    def interact_object(self, obj: GameObject, is_done: Callable[[], bool]) -> None:
        world = self._world
        distance = world.live_position.distance(obj.position)
        if distance > INTERACT_RANGE:
            raise InteractionError(f"{obj.name} is {distance} tiles away")
        world.use_object(obj)
        world.refresh()
        if not is_done():
            raise InteractionError(f"using {obj.name} had no effect")
