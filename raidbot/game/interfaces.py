"""Collaborator interfaces the engine consumes.

GameData   — live game state (player, monsters, bindings, levels).
PathFinder — pathing, distances, line of sight, screen projection.
HID        — the only side-effecting input primitives.
Interactor — entrance / object interaction owned by another layer.

The engine never reads memory or injects OS events itself; concrete
implementations live outside the core (see ``raidbot.sandbox``).
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Callable

from raidbot.core.enums import Area, MouseButton, Skill
from raidbot.core.models import (
    GameObject, KeyBinding, Level, Monster, Path, PlayerUnit, Position, cast_duration,
)
from raidbot.errors import MissingKeyBindingError


class GameData(ABC):
    """Live game state, re-sampled on every ``refresh``."""

    @abstractmethod
    def refresh(self) -> None:
        """Pull the latest state from the game."""

    @property
    @abstractmethod
    def player(self) -> PlayerUnit:
        ...

    @property
    @abstractmethod
    def loaded_area(self) -> Area:
        """Area whose map data is currently loaded (lags behind transitions)."""

    @abstractmethod
    def monsters(self) -> list[Monster]:
        """Hostile monsters in the current area, dead ones included."""

    @abstractmethod
    def is_walkable(self, pos: Position) -> bool:
        ...

    @abstractmethod
    def can_teleport(self) -> bool:
        ...

    @abstractmethod
    def key_binding_for_skill(self, skill: Skill) -> KeyBinding | None:
        ...

    @property
    @abstractmethod
    def stand_still_key(self) -> KeyBinding:
        ...

    @abstractmethod
    def adjacent_levels(self) -> list[Level]:
        ...

    @abstractmethod
    def objects(self, area: Area | None = None) -> list[GameObject]:
        """Objects of *area* (default: the current area)."""

    # -- derived helpers --

    def find_monster(self, unit_id: int) -> Monster | None:
        for m in self.monsters():
            if m.unit_id == unit_id:
                return m
        return None

    def alive_enemies(self) -> list[Monster]:
        return [m for m in self.monsters() if m.alive]

    def find_object(self, name: str) -> GameObject | None:
        for o in self.objects():
            if o.name == name:
                return o
        return None

    def must_key_binding_for_skill(self, skill: Skill) -> KeyBinding:
        kb = self.key_binding_for_skill(skill)
        if kb is None:
            raise MissingKeyBindingError(f"no key binding for skill {skill.name}")
        return kb

    def cast_duration(self) -> float:
        return cast_duration(self.player.casting_frames)

    def in_town(self) -> bool:
        return self.player.area.is_town


class PathFinder(ABC):
    """Pathing queries and movement execution."""

    @abstractmethod
    def get_path(self, to: Position) -> Path | None:
        """Path from the player to *to*, or None if unreachable."""

    @abstractmethod
    def distance_from_me(self, pos: Position) -> int:
        ...

    @abstractmethod
    def line_of_sight(self, a: Position, b: Position) -> bool:
        ...

    @abstractmethod
    def move_through_path(self, path: Path, step_duration: float) -> None:
        """Issue one movement step along *path*."""

    @abstractmethod
    def game_coords_to_screen(self, pos: Position) -> tuple[int, int]:
        ...

    @abstractmethod
    def random_movement(self) -> None:
        """Nudge the character in a random direction."""

    def beyond_position(self, start: Position, dest: Position, distance: int) -> Position:
        """Point *distance* tiles past *dest* along the vector start -> dest."""
        dx = dest.x - start.x
        dy = dest.y - start.y
        length = math.sqrt(dx * dx + dy * dy)
        if length == 0:
            return Position(dest.x + distance, dest.y)
        return Position(
            dest.x + round(dx / length * distance),
            dest.y + round(dy / length * distance),
        )


class HID(ABC):
    """Input primitives: the only side effects the engine produces."""

    @abstractmethod
    def click(self, button: MouseButton, x: int, y: int, modifier: KeyBinding | None = None) -> None:
        ...

    @abstractmethod
    def key_down(self, kb: KeyBinding) -> None:
        ...

    @abstractmethod
    def key_up(self, kb: KeyBinding) -> None:
        ...

    @abstractmethod
    def press_key_binding(self, kb: KeyBinding) -> None:
        ...


class Interactor(ABC):
    """Entrance and object interaction, owned by a higher layer."""

    @abstractmethod
    def interact_entrance(self, area: Area) -> None:
        """Enter *area* through its entrance; raises InteractionError on failure."""

    @abstractmethod
    def interact_object(self, obj: GameObject, is_done: Callable[[], bool]) -> None:
        """Use *obj* until *is_done* holds; raises InteractionError on failure."""
