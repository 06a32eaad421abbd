"""Secret rooms: small vaults dug into solid rock, reached by one narrow passage.

The passage is planned before anything is carved. It may cross the new room's
wall ring exactly once and must stay clear of every earlier secret room and
its ring, so each vault keeps a single entrance.
"""
from typing import Iterable, List, Optional, Tuple

from .config import LevelConfig
from .rooms import SECRET_ROOM, Room, carve_room
from .tiles import FLOOR, PASSABLE, WALL
from .tunnels import carve_direct_passage, direct_passage_path

Coord = Tuple[int, int]


def is_solid_rock(grid, config: LevelConfig, room: Room) -> bool:
    """Footprint plus a one tile ring must be untouched wall."""
    for ix in range(room.x - 1, room.x + room.width + 1):
        for iy in range(room.y - 1, room.y + room.height + 1):
            if not (0 <= ix < config.width and 0 <= iy < config.height):
                continue
            if grid[ix][iy].type != WALL:
                return False
    return True


def floors_by_distance(grid, config: LevelConfig, target: Coord) -> List[Coord]:
    """Interior FLOOR tiles ordered by Manhattan distance, row-major on ties."""
    tx, ty = target
    found = [
        (abs(x - tx) + abs(y - ty), y, x)
        for y in range(1, config.height - 1)
        for x in range(1, config.width - 1)
        if grid[x][y].type == FLOOR
    ]
    found.sort()
    return [(x, y) for _, y, x in found]


def passage_is_clean(path: Iterable[Coord], room: Room, others: List[Room]) -> bool:
    ring_tiles = 0
    for x, y in path:
        if any(other.within_ring(x, y) for other in others):
            return False
        if room.within_ring(x, y) and not room.contains(x, y):
            ring_tiles += 1
    return ring_tiles == 1


def plan_secret_passage(
    grid, config: LevelConfig, room: Room, others: List[Room]
) -> Optional[Tuple[Coord, bool]]:
    """Nearest usable floor for ``room``'s passage and whether the x leg goes first."""
    goal = room.center
    for entry in floors_by_distance(grid, config, goal):
        if any(other.within_ring(*entry) for other in others):
            continue
        for x_first in (True, False):
            if passage_is_clean(direct_passage_path(entry, goal, x_first), room, others):
                return entry, x_first
    return None


def create_secret_room(grid, rooms: List[Room], config: LevelConfig, rng) -> Optional[Room]:
    lo, hi = config.secret_room_size
    for _ in range(config.secret_room_attempts):
        w = rng.randint(lo, hi)
        h = rng.randint(lo, hi)
        span_x = config.width - w - 4
        span_y = config.height - h - 4
        if span_x <= 0 or span_y <= 0:
            continue
        room = Room(2 + rng.randrange(span_x), 2 + rng.randrange(span_y), w, h, SECRET_ROOM)
        if not is_solid_rock(grid, config, room):
            continue
        plan = plan_secret_passage(grid, config, room, [r for r in rooms if r.is_secret])
        if plan is None:
            continue
        entry, x_first = plan
        carve_room(grid, room)
        carve_direct_passage(grid, config, entry, room.center, x_first=x_first)
        rooms.append(room)
        return room
    return None


def add_secret_rooms(grid, rooms: List[Room], config: LevelConfig, rng) -> int:
    lo, hi = config.secret_rooms
    wanted = rng.randint(lo, hi)
    placed = 0
    for _ in range(wanted):
        if create_secret_room(grid, rooms, config, rng) is not None:
            placed += 1
    return placed


def secret_room_entrances(grid, room: Room) -> List[Coord]:
    """Walkable ring tiles that lead straight into ``room``."""
    width, height = len(grid), len(grid[0])
    edges = [(x, room.y - 1) for x in range(room.x, room.x + room.width)]
    edges += [(x, room.y + room.height) for x in range(room.x, room.x + room.width)]
    edges += [(room.x - 1, y) for y in range(room.y, room.y + room.height)]
    edges += [(room.x + room.width, y) for y in range(room.y, room.y + room.height)]
    return [(x, y) for x, y in edges if 0 <= x < width and 0 <= y < height and grid[x][y].type in PASSABLE]


__all__ = [
    "add_secret_rooms",
    "create_secret_room",
    "floors_by_distance",
    "is_solid_rock",
    "passage_is_clean",
    "plan_secret_passage",
    "secret_room_entrances",
]
