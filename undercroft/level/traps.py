"""Hidden trap placement.

Traps prefer corridors and junctions and keep clear of doors and stairs so a
player is never forced to step on one to enter a room or change level.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

from .config import LevelConfig
from .rooms import Room
from .tiles import (
    ALARM,
    DART,
    DOOR,
    FLOOR,
    GAS_CONFUSE,
    GAS_POISON,
    OPEN,
    PIT,
    SNARE,
    STAIRS,
    Trap,
)

GAS = "gas"

# (kind, weight, difficulty); weights sum to 100
TRAP_TABLE: Tuple[Tuple[str, int, int], ...] = (
    (DART, 30, 30),
    (SNARE, 25, 40),
    (GAS, 20, 45),
    (PIT, 15, 35),
    (ALARM, 10, 25),
)
GAS_POISON_SHARE = 0.6


def roll_trap(rng) -> Trap:
    """Draw a fresh hidden trap from the weighted table."""
    total = sum(weight for _, weight, _ in TRAP_TABLE)
    roll = rng.random() * total
    upto = 0
    kind, difficulty = TRAP_TABLE[-1][0], TRAP_TABLE[-1][2]
    for name, weight, diff in TRAP_TABLE:
        upto += weight
        if roll < upto:
            kind, difficulty = name, diff
            break
    if kind == GAS:
        kind = GAS_POISON if rng.random() < GAS_POISON_SHARE else GAS_CONFUSE
    return Trap(kind=kind, difficulty=difficulty)


def trap_target(config: LevelConfig) -> int:
    return max(config.min_traps, int(config.area * config.trap_density))


def near_door_or_stairs(grid, config: LevelConfig, x: int, y: int) -> bool:
    for dx in (-1, 0, 1):
        for dy in (-1, 0, 1):
            nx, ny = x + dx, y + dy
            if not (0 <= nx < config.width and 0 <= ny < config.height):
                continue
            t = grid[nx][ny].type
            if t == DOOR or t in STAIRS:
                return True
    return False


def is_junction(grid, config: LevelConfig, x: int, y: int) -> bool:
    open_sides = 0
    for dx, dy in ((0, -1), (1, 0), (0, 1), (-1, 0)):
        nx, ny = x + dx, y + dy
        if not (0 <= nx < config.width and 0 <= ny < config.height):
            continue
        tile = grid[nx][ny]
        if tile.type == FLOOR or (tile.is_door and tile.door_state == OPEN):
            open_sides += 1
    return open_sides >= 3


def _placement_chance(grid, rooms: List[Room], config: LevelConfig, x: int, y: int) -> float:
    chance = config.trap_chance
    if not any(r.contains(x, y) for r in rooms):
        chance *= config.trap_bias
    if is_junction(grid, config, x, y):
        chance *= config.trap_bias
    return chance


def try_place_trap(grid, rooms: List[Room], config: LevelConfig, rng) -> Optional[Tuple[int, int]]:
    """One sampling attempt; returns the trapped coordinate or None."""
    x = 1 + rng.randrange(config.width - 2)
    y = 1 + rng.randrange(config.height - 2)
    tile = grid[x][y]
    if tile.type != FLOOR or tile.has_trap:
        return None
    if near_door_or_stairs(grid, config, x, y):
        return None
    if rng.random() > _placement_chance(grid, rooms, config, x, y):
        return None
    tile.trap = roll_trap(rng)
    return x, y


def add_traps(grid, rooms: List[Room], config: LevelConfig, rng) -> Tuple[int, int]:
    """Returns (traps placed, attempts used)."""
    if config.width < 3 or config.height < 3:
        return 0, 0
    target = trap_target(config)
    budget = target * config.trap_attempt_factor
    placed = attempts = 0
    while placed < target and attempts < budget:
        attempts += 1
        if try_place_trap(grid, rooms, config, rng) is not None:
            placed += 1
    return placed, attempts


__all__ = [
    "TRAP_TABLE",
    "add_traps",
    "is_junction",
    "near_door_or_stairs",
    "roll_trap",
    "trap_target",
    "try_place_trap",
]
