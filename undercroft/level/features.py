"""Late decorative passes: dead-end stubs and the two staircases."""
from typing import List, Optional, Tuple

from .config import LevelConfig
from .rooms import START_ROOM, Room
from .tiles import FLOOR, STAIRS_DOWN, STAIRS_UP, WALL
from .tunnels import CARDINALS


def in_any_room(rooms: List[Room], x: int, y: int) -> bool:
    return any(r.contains(x, y) for r in rooms)


def _touches_door(grid, config: LevelConfig, x: int, y: int) -> bool:
    for dx, dy in CARDINALS:
        nx, ny = x + dx, y + dy
        if 0 <= nx < config.width and 0 <= ny < config.height and grid[nx][ny].is_door:
            return True
    return False


def _in_secret_ring(rooms: List[Room], x: int, y: int) -> bool:
    for r in rooms:
        if r.is_secret and r.within_ring(x, y):
            return True
    return False


def _pick_dead_end_start(grid, rooms: List[Room], config: LevelConfig, rng) -> Optional[Tuple[int, int]]:
    for _ in range(config.dead_end_start_attempts):
        x = 1 + rng.randrange(config.width - 2)
        y = 1 + rng.randrange(config.height - 2)
        if grid[x][y].type == FLOOR and not in_any_room(rooms, x, y):
            return x, y
    return None


def carve_dead_end(grid, rooms: List[Room], config: LevelConfig, rng) -> int:
    """Dig one straight stub off a corridor; returns the tiles carved."""
    start = _pick_dead_end_start(grid, rooms, config, rng)
    if start is None:
        return 0
    x, y = start
    lo, hi = config.dead_end_length
    length = rng.randint(lo, hi)
    dx, dy = CARDINALS[rng.randrange(4)]
    carved = 0
    for _ in range(length):
        x += dx
        y += dy
        if not (0 < x < config.width - 1 and 0 < y < config.height - 1):
            break
        if grid[x][y].type != WALL:
            break
        if _touches_door(grid, config, x, y) or _in_secret_ring(rooms, x, y):
            break
        grid[x][y].become(FLOOR)
        carved += 1
    return carved


def add_dead_ends(grid, rooms: List[Room], config: LevelConfig, rng) -> int:
    """Returns how many stubs carved at least one tile."""
    if config.width < 3 or config.height < 3:
        return 0
    lo, hi = config.dead_ends
    count = rng.randint(lo, hi)
    stubs = 0
    for _ in range(count):
        if carve_dead_end(grid, rooms, config, rng):
            stubs += 1
    return stubs


def _stairs_spot(room: Room, rng) -> Tuple[int, int]:
    return (
        room.x + 1 + rng.randrange(max(1, room.width - 2)),
        room.y + 1 + rng.randrange(max(1, room.height - 2)),
    )


def place_stairs(grid, rooms: List[Room], rng) -> Tuple[Optional[Tuple[int, int]], Optional[Tuple[int, int]]]:
    """Up-stairs in the start room, down-stairs in the last ordinary room.

    Returns (up, down); either may be None on a degenerate level.
    """
    ordinary = [r for r in rooms if not r.is_secret]
    if not ordinary:
        return None, None
    start = next((r for r in ordinary if r.kind == START_ROOM), ordinary[0])
    ux, uy = _stairs_spot(start, rng)
    grid[ux][uy].become(STAIRS_UP)
    down = None
    if len(ordinary) >= 2:
        dx, dy = _stairs_spot(ordinary[-1], rng)
        grid[dx][dy].become(STAIRS_DOWN)
        down = (dx, dy)
    return (ux, uy), down


__all__ = ["add_dead_ends", "carve_dead_end", "in_any_room", "place_stairs"]
