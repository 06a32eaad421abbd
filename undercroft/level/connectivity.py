"""Flood fill and structural checks for generated levels.

``validate_level`` returns human readable violations rather than raising so
the CLI ``check`` command and the seed diagnostics can report every problem
in one pass.
"""
from __future__ import annotations

from collections import deque
from typing import List, Optional, Set, Tuple

from .doors import count_floor_neighbours, is_adjacent_to_room
from .secrets import secret_room_entrances
from .tiles import DOOR, PASSABLE, STAIRS, STAIRS_DOWN, STAIRS_UP, WALL

Coord2D = Tuple[int, int]

_CARDINALS = ((-1, 0), (1, 0), (0, -1), (0, 1))


def reachable_from(level, start: Optional[Coord2D]) -> Set[Coord2D]:
    """Tiles reachable 4-directionally over floor, stairs and doors (any state)."""
    if start is None or level.get_tile(*start).type not in PASSABLE:
        return set()
    visited = {start}
    q = deque([start])
    while q:
        cx, cy = q.popleft()
        for dx, dy in _CARDINALS:
            nx, ny = cx + dx, cy + dy
            if (nx, ny) in visited or not level.is_in_bounds(nx, ny):
                continue
            if level.grid[nx][ny].type in PASSABLE:
                visited.add((nx, ny))
                q.append((nx, ny))
    return visited


def passable_tiles(level) -> Set[Coord2D]:
    return {
        (x, y)
        for x in range(level.width)
        for y in range(level.height)
        if level.grid[x][y].type in PASSABLE
    }


def _check_connectivity(level, problems: List[str]) -> None:
    start = level.find_tile_of_type(STAIRS_UP)
    if start is None:
        return
    unreachable = passable_tiles(level) - reachable_from(level, start)
    if unreachable:
        sample = sorted(unreachable)[:5]
        problems.append(f"{len(unreachable)} walkable tiles unreachable from stairs_up, e.g. {sample}")


def _check_room_overlap(level, problems: List[str]) -> None:
    ordinary = [r for r in level.rooms if not r.is_secret]
    gap = level.config.room_gap
    for i, a in enumerate(ordinary):
        for b in ordinary[i + 1:]:
            if not a.separated_from(b, gap):
                problems.append(f"rooms {a.to_dict()} and {b.to_dict()} closer than {gap} tiles")


def _door_is_sound(level, x: int, y: int) -> bool:
    grid = level.grid
    config = level.config
    seam = any(
        is_adjacent_to_room(x, y, room) and count_floor_neighbours(grid, config, x, y, room, _CARDINALS) == (1, 1)
        for room in level.rooms
        if not room.is_secret
    )
    if not seam:
        return False
    left, right = level.get_tile(x - 1, y).type, level.get_tile(x + 1, y).type
    up, down = level.get_tile(x, y - 1).type, level.get_tile(x, y + 1).type
    return (left == WALL and right == WALL) or (up == WALL and down == WALL)


def _check_doors(level, problems: List[str]) -> None:
    doors = [
        (x, y)
        for x in range(level.width)
        for y in range(level.height)
        if level.grid[x][y].type == DOOR
    ]
    door_set = set(doors)
    for x, y in doors:
        if not _door_is_sound(level, x, y):
            problems.append(f"door at {(x, y)} is not a clean room/corridor seam")
        for dx, dy in ((1, 0), (0, 1)):
            if (x + dx, y + dy) in door_set:
                problems.append(f"doors at {(x, y)} and {(x + dx, y + dy)} are adjacent")


def _check_secret_rooms(level, problems: List[str]) -> None:
    for room in level.rooms:
        if not room.is_secret:
            continue
        entrances = secret_room_entrances(level.grid, room)
        if len(entrances) != 1:
            problems.append(f"secret room {room.to_dict()} has {len(entrances)} entrances {entrances}, expected 1")


def _check_stairs(level, problems: List[str]) -> None:
    ups = downs = 0
    for column in level.grid:
        for tile in column:
            if tile.type == STAIRS_UP:
                ups += 1
            elif tile.type == STAIRS_DOWN:
                downs += 1
    ordinary = sum(1 for r in level.rooms if not r.is_secret)
    if ordinary and ups != 1:
        problems.append(f"expected exactly one stairs_up, found {ups}")
    if downs > 1:
        problems.append(f"expected at most one stairs_down, found {downs}")
    if ordinary >= 2 and downs != 1:
        problems.append("stairs_down missing although two or more rooms exist")


def _check_traps(level, problems: List[str]) -> None:
    for x in range(level.width):
        for y in range(level.height):
            if not level.grid[x][y].has_trap:
                continue
            for dx in (-1, 0, 1):
                for dy in (-1, 0, 1):
                    t = level.get_tile(x + dx, y + dy).type
                    if t == DOOR or t in STAIRS:
                        problems.append(f"trap at {(x, y)} next to {t} at {(x + dx, y + dy)}")


def validate_level(level) -> List[str]:
    """Run every structural check; an empty list means the level is sound."""
    problems: List[str] = []
    _check_connectivity(level, problems)
    _check_room_overlap(level, problems)
    _check_doors(level, problems)
    _check_secret_rooms(level, problems)
    _check_stairs(level, problems)
    _check_traps(level, problems)
    return problems


__all__ = ["passable_tiles", "reachable_from", "validate_level"]
