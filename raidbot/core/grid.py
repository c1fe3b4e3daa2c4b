"""Tile grid with walkability and line-of-sight queries."""

from __future__ import annotations

from raidbot.core.enums import Material
from raidbot.core.models import Position

_BLOCKING = (Material.WALL, Material.WATER)


class Grid:
    """2D tile grid backed by a flat list for cache-friendly access."""

    __slots__ = ("width", "height", "_tiles")

    def __init__(self, width: int, height: int, default: Material = Material.FLOOR) -> None:
        self.width = width
        self.height = height
        self._tiles: list[Material] = [default] * (width * height)

    # -- access --

    def _idx(self, x: int, y: int) -> int:
        return y * self.width + x

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def get(self, pos: Position) -> Material:
        return self.get_xy(pos.x, pos.y)

    def set(self, pos: Position, material: Material) -> None:
        if self.in_bounds(pos):
            self._tiles[self._idx(pos.x, pos.y)] = material

    def fill(self, x0: int, y0: int, x1: int, y1: int, material: Material) -> None:
        """Set every tile of the inclusive rectangle (x0,y0)-(x1,y1)."""
        for y in range(min(y0, y1), max(y0, y1) + 1):
            for x in range(min(x0, x1), max(x0, x1) + 1):
                self.set(Position(x, y), material)

    def is_walkable(self, pos: Position) -> bool:
        return self.is_walkable_xy(pos.x, pos.y)

    def is_town(self, pos: Position) -> bool:
        return self.get(pos) == Material.TOWN

    # -- line-of-sight (Bresenham) --

    def has_line_of_sight(self, a: Position, b: Position) -> bool:
        """Check if there is a clear line of sight between two positions.

        Uses Bresenham's line algorithm. Returns False if any WALL tile
        lies on the line between *a* and *b*, exclusive of endpoints.
        Water does not block sight.
        """
        x0, y0, x1, y1 = a.x, a.y, b.x, b.y
        dx = abs(x1 - x0)
        dy = abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1
        err = dx - dy
        cx, cy = x0, y0
        while True:
            if cx == x1 and cy == y1:
                return True
            e2 = 2 * err
            if e2 > -dy:
                err -= dy
                cx += sx
            if e2 < dx:
                err += dx
                cy += sy
            if (cx != x1 or cy != y1) and self.get_xy(cx, cy) == Material.WALL:
                return False

    # -- fast raw-coordinate access (no Position alloc, for hot loops) --

    def in_bounds_xy(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_xy(self, x: int, y: int) -> Material:
        if 0 <= x < self.width and 0 <= y < self.height:
            return self._tiles[y * self.width + x]
        return Material.WALL

    def is_walkable_xy(self, x: int, y: int) -> bool:
        return self.get_xy(x, y) not in _BLOCKING

    # -- copy --

    def copy(self) -> Grid:
        new = Grid.__new__(Grid)
        new.width = self.width
        new.height = self.height
        new._tiles = list(self._tiles)
        return new
