"""Scoring of candidate tiles for retreat / attack positioning.

Pure functions: they read game state through the collaborators and never
issue input.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from raidbot.core.models import Monster, Position
from raidbot.game.interfaces import GameData, PathFinder

logger = logging.getLogger(__name__)

SWEEP_STEP_DEGREES = 5
SWEEP_RADIUS_STEP = 2
SWEEP_RADIUS_EXTRA = 5
AWAY_JITTER = 3      # 7x7 grid around the point directly away from the threat
SWEEP_JITTER = 1     # 3x3 grid around each sweep point

IN_RANGE_FITNESS = 10.0
NEAREST_WEIGHT = 3.0
FITNESS_WEIGHT = 2.0
MOVE_PENALTY = 0.5
CLEAR_OF_DANGER_BONUS = 5.0


def distance_from_closest_enemy(pos: Position, monsters: Iterable[Monster]) -> float:
    """Distance from *pos* to the nearest living monster (inf when none)."""
    nearest = math.inf
    for m in monsters:
        if not m.alive:
            continue
        d = pos.distance(m.position)
        if d < nearest:
            nearest = d
    return nearest


def min_safe_distance(danger_distance: int, safe_distance: int) -> int:
    return math.floor((danger_distance + safe_distance) / 2)


def attack_range_fitness(distance: int, min_attack: int, max_attack: int) -> float:
    if min_attack <= distance <= max_attack:
        return IN_RANGE_FITNESS
    return -abs(distance - (min_attack + max_attack) / 2.0)


def _candidates(
    data: GameData,
    origin: Position,
    threat: Position,
    safe_distance: int,
    min_safe: int,
) -> list[Position]:
    seen: set[Position] = set()
    out: list[Position] = []

    def _add(pos: Position) -> None:
        if pos not in seen and data.is_walkable(pos):
            seen.add(pos)
            out.append(pos)

    # Directly away from the threat
    vx = origin.x - threat.x
    vy = origin.y - threat.y
    length = math.sqrt(vx * vx + vy * vy)
    if length > 0:
        nx = int(vx / length * safe_distance)
        ny = int(vy / length * safe_distance)
        for ox in range(-AWAY_JITTER, AWAY_JITTER + 1):
            for oy in range(-AWAY_JITTER, AWAY_JITTER + 1):
                _add(Position(origin.x + nx + ox, origin.y + ny + oy))

    # Radial sweep around the player
    for angle in range(0, 360, SWEEP_STEP_DEGREES):
        rad = math.radians(angle)
        for radius in range(min_safe, safe_distance + SWEEP_RADIUS_EXTRA + 1, SWEEP_RADIUS_STEP):
            bx = origin.x + int(math.cos(rad) * radius)
            by = origin.y + int(math.sin(rad) * radius)
            for ox in range(-SWEEP_JITTER, SWEEP_JITTER + 1):
                for oy in range(-SWEEP_JITTER, SWEEP_JITTER + 1):
                    _add(Position(bx + ox, by + oy))

    return out


def find_safe_position(
    data: GameData,
    pathfinder: PathFinder,
    threat: Monster,
    danger_distance: int,
    safe_distance: int,
    min_attack: int,
    max_attack: int,
) -> Position | None:
    """Best tile to stand on while fighting *threat*, or None.

    Candidates must see the threat and keep every living enemy at least
    ``floor((danger + safe) / 2)`` tiles away. Among those, the score
    favours distance from the nearest enemy, then a comfortable attack
    range, then a short move.
    """
    origin = data.player.position
    min_safe = min_safe_distance(danger_distance, safe_distance)
    monsters = data.monsters()

    best: Position | None = None
    best_score = -math.inf
    for pos in _candidates(data, origin, threat.position, safe_distance, min_safe):
        if not pathfinder.line_of_sight(pos, threat.position):
            continue
        nearest = distance_from_closest_enemy(pos, monsters)
        if nearest < min_safe:
            continue

        fitness = attack_range_fitness(pos.distance(threat.position), min_attack, max_attack)
        moved = pos.distance(origin)
        score = nearest * NEAREST_WEIGHT + fitness * FITNESS_WEIGHT - moved * MOVE_PENALTY
        if nearest > danger_distance:
            score += CLEAR_OF_DANGER_BONUS

        if score > best_score:
            best, best_score = pos, score

    if best is not None:
        logger.debug("Safe position %s (score %.2f) against monster %d",
                     best, best_score, threat.unit_id)
    return best
