"""Door placement: find corridor/room seams and hang doors on the clean ones.

A seam qualifies only when it is a one tile wide passage through the room's
outline: one room floor and one corridor floor orthogonally, walls on the
perpendicular axis, and no diagonal squeeze past the door. Functions read
and mutate ``grid`` (column-major, ``grid[x][y]``) in place.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

from .config import LevelConfig
from .rooms import Room
from .tiles import DOOR, FLOOR, LOCKED, SECRET, WALL

Coord = Tuple[int, int]

_CARDINALS = ((0, -1), (1, 0), (0, 1), (-1, 0))
_DIAGONALS = ((-1, -1), (1, -1), (-1, 1), (1, 1))


def _type_at(grid, config: LevelConfig, x: int, y: int) -> str:
    # Off-map counts as solid rock
    if 0 <= x < config.width and 0 <= y < config.height:
        return grid[x][y].type
    return WALL


def is_adjacent_to_room(x: int, y: int, room: Room) -> bool:
    """On the one tile ring around ``room`` but not on one of its corners."""
    beside = (x == room.x - 1 or x == room.x + room.width) and room.y <= y < room.y + room.height
    above_below = (y == room.y - 1 or y == room.y + room.height) and room.x <= x < room.x + room.width
    return beside or above_below


def count_floor_neighbours(grid, config: LevelConfig, x: int, y: int, room: Room, offsets) -> Tuple[int, int]:
    room_floors = corridor_floors = 0
    for dx, dy in offsets:
        nx, ny = x + dx, y + dy
        if not (0 <= nx < config.width and 0 <= ny < config.height):
            continue
        if grid[nx][ny].type != FLOOR:
            continue
        if room.contains(nx, ny):
            room_floors += 1
        else:
            corridor_floors += 1
    return room_floors, corridor_floors


def is_proper_door_connection(grid, config: LevelConfig, x: int, y: int, room: Room) -> bool:
    """Exactly one room floor and one corridor floor orthogonally, at most one of each diagonally."""
    room_floors, corridor_floors = count_floor_neighbours(grid, config, x, y, room, _CARDINALS)
    if room_floors != 1 or corridor_floors != 1:
        return False
    room_floors, corridor_floors = count_floor_neighbours(grid, config, x, y, room, _DIAGONALS)
    return room_floors <= 1 and corridor_floors <= 1


def has_proper_wall_enclosure(grid, config: LevelConfig, x: int, y: int) -> bool:
    left = _type_at(grid, config, x - 1, y)
    right = _type_at(grid, config, x + 1, y)
    up = _type_at(grid, config, x, y - 1)
    down = _type_at(grid, config, x, y + 1)
    horizontal_walls = left == WALL and right == WALL
    vertical_walls = up == WALL and down == WALL
    if not (horizontal_walls or vertical_walls):
        return False

    nw = _type_at(grid, config, x - 1, y - 1)
    ne = _type_at(grid, config, x + 1, y - 1)
    sw = _type_at(grid, config, x - 1, y + 1)
    se = _type_at(grid, config, x + 1, y + 1)
    if horizontal_walls:
        up_open = up == FLOOR and FLOOR in (nw, ne)
        down_open = down == FLOOR and FLOOR in (sw, se)
        if up_open and down_open:
            return False
    if vertical_walls:
        left_open = left == FLOOR and FLOOR in (nw, sw)
        right_open = right == FLOOR and FLOOR in (ne, se)
        if left_open and right_open:
            return False
    return True


def is_valid_door_position(grid, config: LevelConfig, x: int, y: int, room: Room) -> bool:
    if _type_at(grid, config, x, y) != FLOOR:
        return False
    if not is_adjacent_to_room(x, y, room):
        return False
    if not is_proper_door_connection(grid, config, x, y, room):
        return False
    return has_proper_wall_enclosure(grid, config, x, y)


def find_door_candidates(grid, config: LevelConfig, room: Room) -> List[Coord]:
    candidates: List[Coord] = []
    for x in range(room.x - 1, room.x + room.width + 1):
        for y in range(room.y - 1, room.y + room.height + 1):
            if room.contains(x, y):
                continue
            if not (0 <= x < config.width and 0 <= y < config.height):
                continue
            if is_valid_door_position(grid, config, x, y, room):
                candidates.append((x, y))
    return candidates


def filter_adjacent_doors(candidates: List[Coord]) -> List[Coord]:
    """Greedy spacing pass: drop any candidate touching one already kept."""
    kept: List[Coord] = []
    for cx, cy in candidates:
        if all(abs(cx - kx) + abs(cy - ky) > 1 for kx, ky in kept):
            kept.append((cx, cy))
    return kept


def _hang_door(grid, config: LevelConfig, x: int, y: int, rng) -> None:
    tile = grid[x][y]
    tile.become(DOOR)
    if config.secret_door_chance <= 0 and config.locked_door_chance <= 0:
        return
    roll = rng.random()
    if roll < config.secret_door_chance:
        tile.door_type = SECRET
    elif roll < config.secret_door_chance + config.locked_door_chance:
        tile.door_state = LOCKED


def add_doors_to_room(grid, room: Room, config: LevelConfig, rng) -> Tuple[int, int]:
    """Returns (valid candidates, doors hung) for one room."""
    candidates = filter_adjacent_doors(find_door_candidates(grid, config, room))
    placed = 0
    for x, y in candidates:
        if rng.random() < config.door_chance:
            _hang_door(grid, config, x, y, rng)
            placed += 1
    return len(candidates), placed


def add_doors(grid, rooms: List[Room], config: LevelConfig, rng, metrics: Dict | None = None) -> int:
    """Hang doors on every non-secret room; returns the number of doors placed."""
    total = 0
    seen = 0
    for room in rooms:
        if room.is_secret:
            continue
        found, placed = add_doors_to_room(grid, room, config, rng)
        seen += found
        total += placed
    if metrics is not None:
        metrics["door_candidates"] = seen
        metrics["doors_placed"] = total
    return total


__all__ = [
    "count_floor_neighbours",
    "is_adjacent_to_room",
    "is_proper_door_connection",
    "has_proper_wall_enclosure",
    "is_valid_door_position",
    "find_door_candidates",
    "filter_adjacent_doors",
    "add_doors_to_room",
    "add_doors",
]
