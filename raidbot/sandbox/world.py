"""SandboxWorld — a grid world implementing the GameData interface.

All areas share one global tile grid, each owning a rectangle of it, the
way the real game places levels in one coordinate space. Adjacent
wilderness areas touch, so walking across the border changes the area;
caves sit in their own walled-off rectangle and are only reachable
through their entrance.

The bot sees state as of the last ``refresh``; the sandbox collaborators
(path finder, HID, interactor) mutate the live state underneath.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from raidbot.core.clock import Clock
from raidbot.core.enums import Area, MonsterType, Skill
from raidbot.core.grid import Grid
from raidbot.core.models import (
    GameObject, KeyBinding, Level, Monster, PlayerUnit, Position,
)
from raidbot.game.interfaces import GameData

logger = logging.getLogger(__name__)

DEFAULT_KEY_BINDINGS: dict[Skill, KeyBinding] = {
    Skill.FIRE_BOLT: KeyBinding("f1"),
    Skill.NOVA: KeyBinding("f2"),
    Skill.TELEPORT: KeyBinding("f3"),
}
STAND_STILL_KEY = KeyBinding("shift")

GOLD_PER_KILL = 25


@dataclass(slots=True)
class SandboxMonster:
    unit_id: int
    name: str
    position: Position
    life: int
    max_life: int
    monster_type: MonsterType = MonsterType.NORMAL

    def snapshot(self) -> Monster:
        return Monster(
            unit_id=self.unit_id, name=self.name, position=self.position,
            life=max(self.life, 0), max_life=self.max_life,
            monster_type=self.monster_type,
        )


@dataclass(slots=True)
class ObjectEffect:
    """What using a sandbox object does."""

    leads_to: Area | None = None
    arrival: Position | None = None
    reveals: GameObject | None = None


@dataclass(slots=True)
class Entrance:
    level: Level
    arrival: Position


@dataclass(slots=True)
class SandboxArea:
    area: Area
    x0: int
    y0: int
    x1: int
    y1: int
    levels: list[Level] = field(default_factory=list)
    entrances: list[Entrance] = field(default_factory=list)
    objects: list[GameObject] = field(default_factory=list)

    def contains(self, pos: Position) -> bool:
        return self.x0 <= pos.x <= self.x1 and self.y0 <= pos.y <= self.y1


class SandboxWorld(GameData):
    """Deterministic stand-in for live game state."""

    def __init__(
        self,
        grid: Grid,
        areas: list[SandboxArea],
        start: Position,
        clock: Clock | None = None,
        load_delay: float = 0.2,
        use_teleport: bool = False,
        key_bindings: dict[Skill, KeyBinding] | None = None,
    ) -> None:
        self.grid = grid
        self._areas = {a.area: a for a in areas}
        self._clock = clock or Clock()
        self._load_delay = load_delay
        self._use_teleport = use_teleport
        self._bindings = dict(key_bindings if key_bindings is not None else DEFAULT_KEY_BINDINGS)
        self._lock = threading.Lock()

        self._monsters: dict[int, SandboxMonster] = {}
        self._effects: dict[int, ObjectEffect] = {}
        self._ground_gold: list[tuple[Position, int]] = []
        self._next_unit_id = 1

        # Live player state
        self._position = start
        self._hp = 100
        self._right_skill = Skill.NONE
        self._casting_frames = 0
        self._gold = 0
        area = self._area_at(start)
        if area is None:
            raise ValueError(f"start position {start} is outside every area")
        self._area = area
        self._loaded_area = self._area
        self._entered_at = self._clock.now()

        # Snapshot seen by the bot
        self._player = self._player_snapshot()
        self._monster_view: list[Monster] = []

    # -- world building --

    def add_monster(
        self,
        name: str,
        pos: Position,
        life: int,
        monster_type: MonsterType = MonsterType.NORMAL,
    ) -> int:
        with self._lock:
            uid = self._next_unit_id
            self._next_unit_id += 1
            self._monsters[uid] = SandboxMonster(uid, name, pos, life, life, monster_type)
            return uid

    def add_object(self, area: Area, obj: GameObject, effect: ObjectEffect | None = None) -> None:
        with self._lock:
            self._areas[area].objects.append(obj)
            if effect is not None:
                self._effects[obj.id] = effect

    # -- GameData --

    def refresh(self) -> None:
        with self._lock:
            now = self._clock.now()
            current = self._area_at(self._position) or self._area
            if current != self._area:
                logger.debug("Player crossed into %s", current.name)
                self._area = current
                self._entered_at = now
            if self._loaded_area != self._area and now - self._entered_at >= self._load_delay:
                self._loaded_area = self._area
            self._player = self._player_snapshot()
            self._monster_view = [
                m.snapshot() for m in self._monsters.values()
                if self._areas[self._area].contains(m.position)
            ]

    @property
    def player(self) -> PlayerUnit:
        return self._player

    @property
    def loaded_area(self) -> Area:
        return self._loaded_area

    def monsters(self) -> list[Monster]:
        return list(self._monster_view)

    def is_walkable(self, pos: Position) -> bool:
        return self.grid.is_walkable(pos)

    def can_teleport(self) -> bool:
        return (
            self._use_teleport
            and not self._player.area.is_town
            and Skill.TELEPORT in self._bindings
        )

    def key_binding_for_skill(self, skill: Skill) -> KeyBinding | None:
        return self._bindings.get(skill)

    @property
    def stand_still_key(self) -> KeyBinding:
        return STAND_STILL_KEY

    def adjacent_levels(self) -> list[Level]:
        a = self._areas[self._player.area]
        return list(a.levels) + [e.level for e in a.entrances]

    def objects(self, area: Area | None = None) -> list[GameObject]:
        a = self._areas.get(area if area is not None else self._player.area)
        return list(a.objects) if a is not None else []

    # -- live state, used by the sandbox collaborators --

    @property
    def live_position(self) -> Position:
        return self._position

    @property
    def live_right_skill(self) -> Skill:
        return self._right_skill

    @property
    def gold(self) -> int:
        return self._gold

    def place_player(self, pos: Position) -> None:
        with self._lock:
            if self.grid.is_walkable(pos):
                self._position = pos

    def select_skill(self, skill: Skill) -> None:
        with self._lock:
            self._right_skill = skill

    def skill_for_key(self, kb: KeyBinding) -> Skill | None:
        for skill, bound in self._bindings.items():
            if bound == kb:
                return skill
        return None

    def damage_monsters(self, center: Position, radius: int, amount: int) -> list[int]:
        """Damage every living monster within *radius* of *center*."""
        hit: list[int] = []
        with self._lock:
            for m in self._monsters.values():
                if m.life <= 0 or center.distance(m.position) > radius:
                    continue
                m.life -= amount
                hit.append(m.unit_id)
                if m.life <= 0:
                    logger.debug("Monster %d (%s) killed", m.unit_id, m.name)
                    self._ground_gold.append((m.position, GOLD_PER_KILL))
        return hit

    def damage_monsters_if_reachable(
        self,
        target: Position,
        origin: Position,
        hit_radius: int,
        reach: int,
        amount: int,
    ) -> bool:
        """Hit the living monster nearest *target* if *origin* can reach it."""
        if origin.distance(target) > reach or not self.grid.has_line_of_sight(origin, target):
            return False
        with self._lock:
            candidates = [
                m for m in self._monsters.values()
                if m.life > 0 and target.distance(m.position) <= hit_radius
            ]
        if not candidates:
            return False
        nearest = min(candidates, key=lambda m: target.distance(m.position))
        return bool(self.damage_monsters(nearest.position, 0, amount))

    def kill_player(self) -> None:
        with self._lock:
            self._hp = 0

    def enter_area(self, area: Area, arrival: Position) -> None:
        with self._lock:
            self._position = arrival
            self._area = self._area_at(arrival) or area
            self._entered_at = self._clock.now()
            logger.debug("Entered %s at %s", area.name, arrival)

    def entrance_to(self, area: Area) -> Entrance | None:
        for e in self._areas[self._area].entrances:
            if e.level.area == area:
                return e
        return None

    def use_object(self, obj: GameObject) -> None:
        effect = self._effects.get(obj.id)
        if effect is None:
            return
        if effect.reveals is not None:
            self.add_object(self._area, effect.reveals)
        if effect.leads_to is not None and effect.arrival is not None:
            self.enter_area(effect.leads_to, effect.arrival)

    def pick_up_items(self, radius: int) -> None:
        """Collect gold dropped within *radius* of the player."""
        with self._lock:
            near = [(p, g) for p, g in self._ground_gold if self._position.distance(p) <= radius]
            for item in near:
                self._ground_gold.remove(item)
                self._gold += item[1]
        if near:
            logger.debug("Picked up %d gold piles", len(near))

    def alive_count(self, area: Area | None = None) -> int:
        with self._lock:
            return sum(
                1 for m in self._monsters.values()
                if m.life > 0 and (area is None or self._areas[area].contains(m.position))
            )

    # -- internals --

    def _area_at(self, pos: Position) -> Area | None:
        for a in self._areas.values():
            if a.contains(pos):
                return a.area
        return None

    def _player_snapshot(self) -> PlayerUnit:
        return PlayerUnit(
            position=self._position,
            area=self._area,
            hp_percent=self._hp,
            right_skill=self._right_skill,
            casting_frames=self._casting_frames,
            gold=self._gold,
        )
