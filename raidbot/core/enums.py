"""Enumerations used throughout the engine."""

from __future__ import annotations

from enum import IntEnum, unique


@unique
class AttackKind(IntEnum):
    """How an attack sequence fires."""

    PRIMARY = 0     # Left click
    SECONDARY = 1   # Right click with a bound skill
    BURST = 2       # Channel / AoE skill, re-targets every tick


@unique
class MouseButton(IntEnum):
    LEFT = 0
    RIGHT = 1


@unique
class MonsterType(IntEnum):
    NORMAL = 0
    CHAMPION = 1
    MINION = 2
    UNIQUE = 3
    SUPER_UNIQUE = 4


@unique
class Skill(IntEnum):
    """Skill identifiers, numbered as the game client numbers them."""

    NONE = 0
    FIRE_BOLT = 36
    CHARGED_BOLT = 38
    NOVA = 48
    TELEPORT = 54
    BLIZZARD = 59
    CONCENTRATION = 113
    HOLY_FREEZE = 114
    VIGOR = 115
    FIST_OF_THE_HEAVENS = 121


@unique
class Area(IntEnum):
    """Areas referenced by the movement layer."""

    ROGUE_ENCAMPMENT = 1
    BLOOD_MOOR = 2
    COLD_PLAINS = 3
    TAMOE_HIGHLAND = 7
    DEN_OF_EVIL = 8
    FORGOTTEN_TOWER = 20
    TOWER_CELLAR_LEVEL_1 = 21
    TOWER_CELLAR_LEVEL_2 = 22
    TOWER_CELLAR_LEVEL_3 = 23
    TOWER_CELLAR_LEVEL_4 = 24
    TOWER_CELLAR_LEVEL_5 = 25
    MONASTERY_GATE = 26
    LUT_GHOLEIN = 40
    ROCKY_WASTE = 41
    CANYON_OF_THE_MAGI = 46
    SEWERS_LEVEL_2_ACT_2 = 48
    SEWERS_LEVEL_3_ACT_2 = 49
    HAREM_LEVEL_1 = 50
    PALACE_CELLAR_LEVEL_3 = 54
    ARCANE_SANCTUARY = 74
    KURAST_DOCKS = 75
    PANDEMONIUM_FORTRESS = 103
    HARROGATH = 109

    @property
    def is_town(self) -> bool:
        return self in _TOWNS


_TOWNS = frozenset({
    Area.ROGUE_ENCAMPMENT,
    Area.LUT_GHOLEIN,
    Area.KURAST_DOCKS,
    Area.PANDEMONIUM_FORTRESS,
    Area.HARROGATH,
})


@unique
class Domain(IntEnum):
    """RNG domains for deterministic randomness isolation."""

    MOVEMENT = 0
    NUDGE = 1
    SPAWN = 2
    MAP_GEN = 3


@unique
class Material(IntEnum):
    """Tile materials of the sandbox grid."""

    FLOOR = 0
    WALL = 1
    WATER = 2
    TOWN = 3
