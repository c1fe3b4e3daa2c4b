"""Demo sandbox: town -> Blood Moor -> Den of Evil.

Layout (x grows right, one global grid):

    | Rogue Encampment | Blood Moor (wilderness)          |#| Den of Evil |
    |   town tiles     |  walls, monsters, cave entrance  |#|  (cave)     |

The encampment and the moor share an open border; the den is walled off
and entered through the entrance at the far end of the moor.
"""

from __future__ import annotations

import logging

from raidbot.config import BotConfig
from raidbot.core.clock import Clock
from raidbot.core.enums import Area, Domain, Material
from raidbot.core.grid import Grid
from raidbot.core.models import GameObject, Level, Position
from raidbot.sandbox.world import Entrance, SandboxArea, SandboxWorld
from raidbot.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)

TOWN_WIDTH = 24
DEN_WIDTH = 32
GAP = 2                   # Solid rock between the moor and the den
BORDER_GATE = (12, 27)    # Open rows in the town/moor border wall

MONSTER_NAMES = ("fallen", "zombie", "quill_rat", "dark_hunter")


def build_demo_world(config: BotConfig, clock: Clock | None = None) -> SandboxWorld:
    """Build the demo world and populate it from ``config.seed``."""
    rng = DeterministicRNG(config.seed)
    height = config.sandbox_height
    moor_x0 = TOWN_WIDTH
    moor_x1 = moor_x0 + config.sandbox_width - 1
    den_x0 = moor_x1 + 1 + GAP
    den_x1 = den_x0 + DEN_WIDTH - 1
    width = den_x1 + 1

    grid = Grid(width, height, default=Material.FLOOR)

    # Outer walls
    grid.fill(0, 0, width - 1, 0, Material.WALL)
    grid.fill(0, height - 1, width - 1, height - 1, Material.WALL)
    grid.fill(0, 0, 0, height - 1, Material.WALL)
    grid.fill(width - 1, 0, width - 1, height - 1, Material.WALL)

    # Town
    grid.fill(1, 1, TOWN_WIDTH - 2, height - 2, Material.TOWN)
    grid.fill(TOWN_WIDTH - 1, 1, TOWN_WIDTH - 1, height - 2, Material.WALL)
    grid.fill(TOWN_WIDTH - 1, BORDER_GATE[0], TOWN_WIDTH - 1, BORDER_GATE[1], Material.TOWN)

    # Moor obstacles: two wall spurs and a pond
    spur_x = moor_x0 + config.sandbox_width // 3
    grid.fill(spur_x, 1, spur_x, height // 2, Material.WALL)
    spur2_x = moor_x0 + 2 * config.sandbox_width // 3
    grid.fill(spur2_x, height // 2, spur2_x, height - 2, Material.WALL)
    grid.fill(spur_x + 4, height - 8, spur_x + 8, height - 5, Material.WATER)

    # Rock between moor and den, den walls
    grid.fill(moor_x1 + 1, 0, den_x0 - 1, height - 1, Material.WALL)
    grid.fill(den_x0 + DEN_WIDTH // 2, 1, den_x0 + DEN_WIDTH // 2, height // 2 - 3, Material.WALL)

    town_exit = Position(TOWN_WIDTH + 3, (BORDER_GATE[0] + BORDER_GATE[1]) // 2)
    den_entrance = Position(moor_x1 - 4, height // 2)
    den_arrival = Position(den_x0 + 3, height // 2)

    town = SandboxArea(
        Area.ROGUE_ENCAMPMENT, 0, 0, TOWN_WIDTH - 1, height - 1,
        levels=[Level(Area.BLOOD_MOOR, town_exit)],
    )
    moor = SandboxArea(
        Area.BLOOD_MOOR, moor_x0, 0, moor_x1, height - 1,
        levels=[Level(Area.ROGUE_ENCAMPMENT, Position(TOWN_WIDTH - 3, town_exit.y))],
        entrances=[Entrance(Level(Area.DEN_OF_EVIL, den_entrance, is_entrance=True), den_arrival)],
    )
    den = SandboxArea(
        Area.DEN_OF_EVIL, moor_x1 + 1, 0, den_x1, height - 1,
        entrances=[Entrance(Level(Area.BLOOD_MOOR, den_arrival, is_entrance=True), den_entrance)],
    )

    world = SandboxWorld(
        grid,
        [town, moor, den],
        start=Position(TOWN_WIDTH // 2, town_exit.y),
        clock=clock,
        load_delay=config.area_load_delay,
        use_teleport=config.use_teleport,
    )
    world.add_object(Area.BLOOD_MOOR, GameObject(1, "waypoint", Position(moor_x0 + 4, town_exit.y)))

    _spawn(world, grid, rng, moor, config.sandbox_monsters, config.monster_life, key=1)
    _spawn(world, grid, rng, den, max(1, config.sandbox_monsters // 2), config.monster_life, key=2)
    return world


def _spawn(
    world: SandboxWorld,
    grid: Grid,
    rng: DeterministicRNG,
    area: SandboxArea,
    count: int,
    life: int,
    key: int,
) -> None:
    placed = 0
    for attempt in range(count * 40):
        if placed >= count:
            break
        x = rng.next_int(Domain.SPAWN, key, attempt * 2, area.x0 + 6, area.x1 - 6)
        y = rng.next_int(Domain.SPAWN, key, attempt * 2 + 1, 2, grid.height - 3)
        pos = Position(x, y)
        if not grid.is_walkable(pos):
            continue
        name = MONSTER_NAMES[placed % len(MONSTER_NAMES)]
        world.add_monster(name, pos, life)
        placed += 1
    if placed < count:
        logger.warning("Placed only %d of %d monsters in %s", placed, count, area.area.name)
    logger.info("Spawned %d monsters in %s", placed, area.area.name)
