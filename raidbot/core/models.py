"""Core data models: Position, units, levels and paths as seen by the bot."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from raidbot.core.enums import Area, MonsterType, Skill

# Cast timing: one animation frame is 40 ms, plus a fixed 10 ms input lag.
FRAME_SECONDS = 0.04
CAST_LAG_SECONDS = 0.01
MIN_CAST_DURATION = 0.30


@dataclass(frozen=True, slots=True)
class Position:
    """Immutable 2D tile coordinate."""

    x: int = 0
    y: int = 0

    def __add__(self, other: Position) -> Position:
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Position) -> Position:
        return Position(self.x - other.x, self.y - other.y)

    def distance(self, other: Position) -> int:
        """Euclidean distance truncated to whole tiles."""
        dx = self.x - other.x
        dy = self.y - other.y
        return int(math.sqrt(dx * dx + dy * dy))

    def __repr__(self) -> str:
        return f"({self.x}, {self.y})"


@dataclass(frozen=True, slots=True)
class KeyBinding:
    """A key (optionally with a modifier) the input layer can press."""

    key: str
    modifier: str = ""


@dataclass(frozen=True, slots=True)
class Monster:
    """A monster as sampled from live game state."""

    unit_id: int
    name: str
    position: Position
    life: int
    max_life: int = 0
    monster_type: MonsterType = MonsterType.NORMAL
    immunities: tuple[str, ...] = ()

    @property
    def alive(self) -> bool:
        return self.life > 0


@dataclass(frozen=True, slots=True)
class PlayerUnit:
    """The controlled character as sampled from live game state."""

    position: Position
    area: Area
    hp_percent: int = 100
    mana: int = 100
    right_skill: Skill = Skill.NONE
    casting_frames: int = 0
    gold: int = 0

    @property
    def alive(self) -> bool:
        return self.hp_percent > 0


@dataclass(frozen=True, slots=True)
class Level:
    """An adjacent level reachable from the current area."""

    area: Area
    position: Position
    is_entrance: bool = False


@dataclass(frozen=True, slots=True)
class GameObject:
    """An interactable object (portal, tome, waypoint...)."""

    id: int
    name: str
    position: Position
    selectable: bool = True


@dataclass(frozen=True, slots=True)
class Path:
    """A computed path: tiles from the player (exclusive) to the goal (inclusive)."""

    points: tuple[Position, ...] = field(default_factory=tuple)
    distance: int = 0

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)


def cast_duration(casting_frames: int) -> float:
    """Seconds a cast occupies the character, floored at MIN_CAST_DURATION."""
    seconds = casting_frames * FRAME_SECONDS + CAST_LAG_SECONDS
    return max(MIN_CAST_DURATION, seconds)
