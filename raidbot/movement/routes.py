"""Hand-specified transitions between named area pairs.

Generic pathing handles most area changes. The pairs below either have
exits the pathfinder cannot locate (fixed coordinates, probed exits),
need a looser arrival tolerance to interact with the entrance, or are
reached through objects rather than by walking.
"""

from __future__ import annotations

from dataclasses import dataclass

from raidbot.core.enums import Area
from raidbot.core.models import Position
from raidbot.game.interfaces import PathFinder


@dataclass(frozen=True, slots=True)
class StaticExit:
    """A fixed exit tile, optionally chosen by probing for a path."""

    target: Position
    probe: Position | None = None
    fallback: Position | None = None

    def resolve(self, pathfinder: PathFinder) -> Position:
        if self.probe is None or self.fallback is None:
            return self.target
        if pathfinder.get_path(self.probe) is not None:
            return self.target
        return self.fallback


@dataclass(frozen=True, slots=True)
class PortalStep:
    """Walk to an object and use it.

    The step is done once ``until_object`` shows up in the area, or, when
    it is None, once the player stands in the route's destination.
    """

    object_name: str
    until_object: str | None = None


STATIC_EXITS: dict[tuple[Area, Area], StaticExit] = {
    (Area.TAMOE_HIGHLAND, Area.MONASTERY_GATE): StaticExit(Position(15139, 5056)),
    (Area.MONASTERY_GATE, Area.TAMOE_HIGHLAND): StaticExit(Position(15142, 5118)),
    # Lut Gholein has two exits into the Rocky Waste; only one is open per game
    (Area.LUT_GHOLEIN, Area.ROCKY_WASTE): StaticExit(
        target=Position(4989, 5063),
        probe=Position(5004, 5065),
        fallback=Position(5096, 4997),
    ),
}

PORTAL_ROUTES: dict[tuple[Area, Area], tuple[PortalStep, ...]] = {
    (Area.PALACE_CELLAR_LEVEL_3, Area.ARCANE_SANCTUARY): (
        PortalStep("arcane_sanctuary_portal"),
    ),
    (Area.ARCANE_SANCTUARY, Area.CANYON_OF_THE_MAGI): (
        PortalStep("yet_another_tome", until_object="permanent_town_portal"),
        PortalStep("permanent_town_portal"),
    ),
}

# Entrances that sit inside large objects; arrive within a wider radius.
DISTANCE_OVERRIDE_ROUTES: frozenset[tuple[Area, Area]] = frozenset({
    (Area.LUT_GHOLEIN, Area.HAREM_LEVEL_1),
    (Area.SEWERS_LEVEL_2_ACT_2, Area.SEWERS_LEVEL_3_ACT_2),
    (Area.FORGOTTEN_TOWER, Area.TOWER_CELLAR_LEVEL_1),
    (Area.TOWER_CELLAR_LEVEL_1, Area.TOWER_CELLAR_LEVEL_2),
    (Area.TOWER_CELLAR_LEVEL_2, Area.TOWER_CELLAR_LEVEL_3),
    (Area.TOWER_CELLAR_LEVEL_3, Area.TOWER_CELLAR_LEVEL_4),
    (Area.TOWER_CELLAR_LEVEL_4, Area.TOWER_CELLAR_LEVEL_5),
})
