"""Target validity and selection helpers."""

from __future__ import annotations

import logging

from raidbot.core.enums import MonsterType
from raidbot.core.models import Monster, Position
from raidbot.game.interfaces import GameData, PathFinder

logger = logging.getLogger(__name__)

# Seal boss that stands off the walkable grid but must still be attacked.
OFF_GRID_BOSS = "storm_caster"

LOST_SIGHT_TIMEOUT = 1.0


def is_valid_enemy(monster: Monster, data: GameData) -> bool:
    if monster.monster_type == MonsterType.SUPER_UNIQUE and monster.name == OFF_GRID_BOSS:
        return monster.alive
    if not data.is_walkable(monster.position):
        return False
    return monster.alive


def enemies_around(data: GameData, center: Position, radius: int) -> list[Monster]:
    """Living enemies within *radius* of *center*, nearest first."""
    found = [m for m in data.alive_enemies() if center.distance(m.position) <= radius]
    found.sort(key=lambda m: center.distance(m.position))
    return found


def is_any_enemy_around_player(data: GameData, radius: int) -> Monster | None:
    """First living enemy within *radius* of the player, if any."""
    pos = data.player.position
    for m in data.alive_enemies():
        if pos.distance(m.position) <= radius:
            return m
    return None


def nearest_valid_enemy(data: GameData, pathfinder: PathFinder, max_distance: int) -> Monster | None:
    """First valid enemy in roster order within *max_distance* of the player."""
    for m in data.monsters():
        if is_valid_enemy(m, data) and pathfinder.distance_from_me(m.position) <= max_distance:
            return m
    return None


class LineOfSightTracker:
    """Decides when to abandon a target that keeps hiding behind walls."""

    __slots__ = ("_last_seen", "_timeout")

    def __init__(self, timeout: float = LOST_SIGHT_TIMEOUT) -> None:
        self._last_seen: dict[int, float] = {}
        self._timeout = timeout

    def should_switch_target(
        self,
        data: GameData,
        pathfinder: PathFinder,
        target: Monster,
        now: float,
    ) -> bool:
        if not target.alive:
            self._last_seen.pop(target.unit_id, None)
            return True

        if not data.alive_enemies():
            self._last_seen.clear()
            return True

        if pathfinder.line_of_sight(data.player.position, target.position):
            self._last_seen[target.unit_id] = now
            return False

        seen_at = self._last_seen.get(target.unit_id)
        if seen_at is None:
            self._last_seen[target.unit_id] = now
            return False

        if now - seen_at > self._timeout:
            logger.debug("Lost sight of monster %d for %.1fs, switching",
                         target.unit_id, now - seen_at)
            del self._last_seen[target.unit_id]
            return True
        return False

    def forget(self, unit_id: int) -> None:
        self._last_seen.pop(unit_id, None)
