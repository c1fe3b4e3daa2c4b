"""Core data models and world representation."""

from raidbot.core.clock import Clock, SimulatedClock
from raidbot.core.enums import Area, AttackKind, Domain, Material, MonsterType, MouseButton, Skill
from raidbot.core.grid import Grid
from raidbot.core.models import (
    GameObject, KeyBinding, Level, Monster, Path, PlayerUnit, Position, cast_duration,
)

__all__ = [
    "Area",
    "AttackKind",
    "Clock",
    "Domain",
    "GameObject",
    "Grid",
    "KeyBinding",
    "Level",
    "Material",
    "Monster",
    "MonsterType",
    "MouseButton",
    "Path",
    "PlayerUnit",
    "Position",
    "SimulatedClock",
    "Skill",
    "cast_duration",
]
