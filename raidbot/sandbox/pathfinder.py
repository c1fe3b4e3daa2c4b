"""A* pathfinding and screen projection over the sandbox grid.

Usage:
    pf = GridPathFinder(world, rng)
    path = pf.get_path(goal)            # Path or None
    pf.move_through_path(path, 0.8)     # walks (or teleports) along it
"""

from __future__ import annotations

import heapq
import logging
import math

from raidbot.core.enums import Domain, Skill
from raidbot.core.models import Path, Position
from raidbot.game.interfaces import PathFinder
from raidbot.sandbox.world import SandboxWorld
from raidbot.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)

# 8-way movement; diagonal steps cost sqrt(2)
_DIRS = (
    (1, 0), (-1, 0), (0, 1), (0, -1),
    (1, 1), (1, -1), (-1, 1), (-1, -1),
)
_DIAGONAL = math.sqrt(2)

# Isometric projection: screen centre is the player's tile
SCREEN_CENTER_X = 640
SCREEN_CENTER_Y = 360
TILE_HALF_WIDTH = 20
TILE_HALF_HEIGHT = 10

NUDGE_DISTANCE = 2


def _octile(ax: int, ay: int, bx: int, by: int) -> float:
    dx = abs(ax - bx)
    dy = abs(ay - by)
    return (dx + dy) + (_DIAGONAL - 2) * min(dx, dy)


class GridPathFinder(PathFinder):
    """A* pathfinder operating on the sandbox world grid.

    Performance-bounded: explores at most ``max_nodes`` before giving up.
    """

    __slots__ = ("_world", "_rng", "_walk_speed", "_teleport_range", "_max_nodes", "_nudges", "_key")

    def __init__(
        self,
        world: SandboxWorld,
        rng: DeterministicRNG,
        walk_speed: float = 8.0,
        teleport_range: int = 10,
        max_nodes: int = 6000,
        session_key: int = 0,
    ) -> None:
        self._world = world
        self._rng = rng
        self._walk_speed = walk_speed
        self._teleport_range = teleport_range
        self._max_nodes = max_nodes
        self._nudges = 0
        self._key = session_key

    # -- queries --

    def get_path(self, to: Position) -> Path | None:
        points = self.find_path(self._world.player.position, to)
        if points is None:
            return None
        return Path(points=tuple(points), distance=len(points))

    def find_path(self, start: Position, goal: Position) -> list[Position] | None:
        """A* from *start* to *goal*; excludes *start*, includes *goal*."""
        if start == goal:
            return []

        grid = self._world.grid
        if not grid.is_walkable(goal):
            return None

        # A* open set: (f_score, counter, x, y)
        counter = 0
        open_heap: list[tuple[float, int, int, int]] = []
        heapq.heappush(open_heap, (0.0, counter, start.x, start.y))

        g_score: dict[tuple[int, int], float] = {(start.x, start.y): 0.0}
        came_from: dict[tuple[int, int], tuple[int, int]] = {}
        closed: set[tuple[int, int]] = set()
        nodes_explored = 0
        gx, gy = goal.x, goal.y

        while open_heap and nodes_explored < self._max_nodes:
            _, _, cx, cy = heapq.heappop(open_heap)
            ckey = (cx, cy)

            if cx == gx and cy == gy:
                return self._reconstruct(came_from, ckey)

            if ckey in closed:
                continue
            closed.add(ckey)
            nodes_explored += 1
            current_g = g_score[ckey]

            for dx, dy in _DIRS:
                nx, ny = cx + dx, cy + dy
                nkey = (nx, ny)
                if nkey in closed or not grid.is_walkable_xy(nx, ny):
                    continue
                # No corner cutting through walls
                if dx and dy and not (grid.is_walkable_xy(cx + dx, cy) and grid.is_walkable_xy(cx, cy + dy)):
                    continue

                tentative_g = current_g + (_DIAGONAL if dx and dy else 1.0)
                if tentative_g < g_score.get(nkey, math.inf):
                    g_score[nkey] = tentative_g
                    came_from[nkey] = ckey
                    counter += 1
                    f = tentative_g + _octile(nx, ny, gx, gy)
                    heapq.heappush(open_heap, (f, counter, nx, ny))

        return None

    def distance_from_me(self, pos: Position) -> int:
        return self._world.player.position.distance(pos)

    def line_of_sight(self, a: Position, b: Position) -> bool:
        return self._world.grid.has_line_of_sight(a, b)

    # -- movement --

    def move_through_path(self, path: Path, step_duration: float) -> None:
        if len(path) == 0:
            return
        world = self._world
        if world.can_teleport() and world.player.right_skill == Skill.TELEPORT:
            reach = self._teleport_range
        else:
            reach = max(1, int(self._walk_speed * step_duration))
        dest = path.points[min(reach, len(path)) - 1]
        world.place_player(dest)

    def random_movement(self) -> None:
        world = self._world
        idx = self._rng.next_int(Domain.NUDGE, self._key, self._nudges, 0, len(_DIRS) - 1)
        self._nudges += 1
        dx, dy = _DIRS[idx]
        here = world.live_position
        target = Position(here.x + dx * NUDGE_DISTANCE, here.y + dy * NUDGE_DISTANCE)
        logger.debug("Nudging player from %s to %s", here, target)
        world.place_player(target)

    # -- projection --

    def game_coords_to_screen(self, pos: Position) -> tuple[int, int]:
        origin = self._world.player.position
        dx = pos.x - origin.x
        dy = pos.y - origin.y
        return (
            SCREEN_CENTER_X + (dx - dy) * TILE_HALF_WIDTH,
            SCREEN_CENTER_Y + (dx + dy) * TILE_HALF_HEIGHT,
        )

    def screen_to_game_coords(self, x: int, y: int) -> Position:
        origin = self._world.player.position
        a = (x - SCREEN_CENTER_X) / TILE_HALF_WIDTH     # dx - dy
        b = (y - SCREEN_CENTER_Y) / TILE_HALF_HEIGHT    # dx + dy
        return Position(origin.x + round((a + b) / 2), origin.y + round((b - a) / 2))

    @staticmethod
    def _reconstruct(
        came_from: dict[tuple[int, int], tuple[int, int]],
        current: tuple[int, int],
    ) -> list[Position]:
        path: list[Position] = []
        while current in came_from:
            path.append(Position(current[0], current[1]))
            current = came_from[current]
        path.reverse()
        return path
