"""Corridor network: sequential L-shaped links, extra loops and winding passages.

Carving only ever turns WALL into FLOOR, so running a corridor through a room
or over an earlier corridor is harmless.
"""
from typing import List, Tuple

from .config import LevelConfig
from .rooms import Room
from .tiles import FLOOR, WALL

CARDINALS: Tuple[Tuple[int, int], ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))


def _interior(config: LevelConfig, x: int, y: int) -> bool:
    return 0 < x < config.width - 1 and 0 < y < config.height - 1


def carve_if_wall(grid, x: int, y: int) -> bool:
    tile = grid[x][y]
    if tile.type == WALL:
        tile.become(FLOOR)
        return True
    return False


def carve_horizontal(grid, config: LevelConfig, x1: int, x2: int, y: int) -> int:
    if y < 1 or y >= config.height - 1:
        return 0
    start = max(1, min(x1, x2))
    end = min(config.width - 2, max(x1, x2))
    return sum(carve_if_wall(grid, x, y) for x in range(start, end + 1))


def carve_vertical(grid, config: LevelConfig, y1: int, y2: int, x: int) -> int:
    if x < 1 or x >= config.width - 1:
        return 0
    start = max(1, min(y1, y2))
    end = min(config.height - 2, max(y1, y2))
    return sum(carve_if_wall(grid, x, y) for y in range(start, end + 1))


def carve_l_corridor(grid, config: LevelConfig, a: Room, b: Room, rng) -> int:
    """Classic Rogue corridor between room centres, leg order picked at random."""
    x1, y1 = a.center
    x2, y2 = b.center
    if rng.random() > 0.5:
        carved = carve_horizontal(grid, config, x1, x2, y1)
        carved += carve_vertical(grid, config, y1, y2, x2)
    else:
        carved = carve_vertical(grid, config, y1, y2, x1)
        carved += carve_horizontal(grid, config, x1, x2, y2)
    return carved


def connect_rooms(grid, rooms: List[Room], config: LevelConfig, rng) -> int:
    """Chain room i to room i+1, then add a few random extra links for loops.

    Returns the number of corridors carved.
    """
    if len(rooms) < 2:
        return 0
    corridors = 0
    for a, b in zip(rooms, rooms[1:]):
        carve_l_corridor(grid, config, a, b, rng)
        corridors += 1
    lo, hi = config.extra_connections
    extra = rng.randint(lo, hi)
    if len(rooms) > 2:
        for _ in range(extra):
            a = rooms[rng.randrange(len(rooms))]
            b = rooms[rng.randrange(len(rooms))]
            if a is not b:
                carve_l_corridor(grid, config, a, b, rng)
                corridors += 1
    return corridors


def carve_winding_passage(grid, rooms: List[Room], config: LevelConfig, rng) -> int:
    """Random walk out of a random room; returns the number of steps taken."""
    if not rooms:
        return 0
    room = rooms[rng.randrange(len(rooms))]
    x = room.x + rng.randrange(room.width)
    y = room.y + rng.randrange(room.height)
    lo, hi = config.passage_steps
    max_steps = rng.randint(lo, hi)
    steps = 0
    for _ in range(max_steps):
        directions = list(CARDINALS)
        rng.shuffle(directions)
        moved = False
        for dx, dy in directions:
            nx, ny = x + dx, y + dy
            if not _interior(config, nx, ny):
                continue
            tile = grid[nx][ny]
            # Walls are always dug; existing floor only sometimes, to avoid merging open areas
            if tile.type == WALL or (tile.type == FLOOR and rng.random() < config.passage_floor_chance):
                if tile.type == WALL:
                    tile.become(FLOOR)
                x, y = nx, ny
                moved = True
                break
        if not moved:
            break
        steps += 1
    return steps


def add_winding_passages(grid, rooms: List[Room], config: LevelConfig, rng) -> int:
    lo, hi = config.passages
    count = rng.randint(lo, hi)
    carved = 0
    for _ in range(count):
        if carve_winding_passage(grid, rooms, config, rng):
            carved += 1
    return carved


def direct_passage_path(start: Tuple[int, int], goal: Tuple[int, int], x_first: bool = True) -> List[Tuple[int, int]]:
    """Tiles a Manhattan walk from start to goal steps on, start excluded."""
    x, y = start
    gx, gy = goal
    path: List[Tuple[int, int]] = []
    while (x, y) != (gx, gy):
        move_x = x != gx if x_first else y == gy
        if move_x:
            x += 1 if x < gx else -1
        else:
            y += 1 if y < gy else -1
        path.append((x, y))
    return path


def carve_direct_passage(
    grid, config: LevelConfig, start: Tuple[int, int], goal: Tuple[int, int], x_first: bool = True
) -> int:
    """Dig the Manhattan walk from start to goal (x leg first unless told otherwise)."""
    carved = 0
    for x, y in direct_passage_path(start, goal, x_first):
        if 0 <= x < config.width and 0 <= y < config.height and carve_if_wall(grid, x, y):
            carved += 1
    return carved


__all__ = [
    "CARDINALS",
    "carve_if_wall",
    "carve_horizontal",
    "carve_vertical",
    "carve_l_corridor",
    "connect_rooms",
    "carve_winding_passage",
    "add_winding_passages",
    "carve_direct_passage",
    "direct_passage_path",
]
