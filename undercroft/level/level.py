"""The Level object: owner of one generated floor of the undercroft.

A ``Level`` holds the column-major tile grid (``grid[x][y]``), the ordered
room list and the generation metrics. It is generated once, synchronously,
inside the constructor; afterwards other systems read it and flip door and
trap state through the accessors below. None of the accessors raise:
out-of-bounds reads yield a synthetic wall and refused writes return False.
"""
from __future__ import annotations

import random
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from .config import LevelConfig
from .rooms import Room
from .tiles import (
    ASCII_CHARS,
    CLOSED,
    FLOOR,
    LOCKED,
    NORMAL,
    SECRET,
    STAIRS,
    STAIRS_UP,
    TILE_TYPES,
    OPEN,
    Tile,
    can_transition,
    out_of_bounds_tile,
)

Coord = Tuple[int, int]

START_POSITION_TRIES = 20


def derive_depth_seed(seed: int, depth: int) -> int:
    """Seed for ``depth`` of a run started with ``seed``; depth 1 keeps the seed."""
    if depth <= 1:
        return seed
    return (seed * 1_000_003 + depth) & 0x7FFFFFFF


class Level:
    def __init__(
        self,
        config: Optional[LevelConfig] = None,
        *,
        seed: Optional[int] = None,
        depth: int = 1,
        width: Optional[int] = None,
        height: Optional[int] = None,
        rng: Optional[random.Random] = None,
        generate: bool = True,
    ):
        config = config or LevelConfig()
        overrides: Dict[str, Any] = {}
        if width is not None:
            overrides["width"] = width
        if height is not None:
            overrides["height"] = height
        if seed is not None:
            overrides["seed"] = seed
        if overrides:
            config = replace(config, **overrides)
        # 0 is a valid deterministic seed; None picks one at random
        if config.seed is None:
            config = replace(config, seed=random.randint(1, 1_000_000))
        self.config = config
        self.seed: int = config.seed
        self.depth = max(1, int(depth))
        self._width = config.width
        self._height = config.height
        self.rng = rng if rng is not None else random.Random(derive_depth_seed(self.seed, self.depth))
        self.grid: List[List[Tile]] = [[Tile() for _ in range(self._height)] for _ in range(self._width)]
        self._rooms: List[Room] = []
        self.metrics: Dict[str, Any] = {}
        if generate:
            from .pipeline import generate_level

            generate_level(self)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def rooms(self) -> Tuple[Room, ...]:
        return tuple(self._rooms)

    # --- grid accessors -------------------------------------------------

    def is_in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def get_tile(self, x: int, y: int) -> Tile:
        if not self.is_in_bounds(x, y):
            return out_of_bounds_tile()
        return self.grid[x][y]

    def set_tile(self, x: int, y: int, tile_type: str) -> bool:
        if not self.is_in_bounds(x, y) or tile_type not in TILE_TYPES:
            return False
        self.grid[x][y].become(tile_type)
        return True

    def is_walkable(self, x: int, y: int) -> bool:
        tile = self.get_tile(x, y)
        if tile.type == FLOOR or tile.type in STAIRS:
            return True
        return tile.is_door and tile.door_state == OPEN

    def has_door(self, x: int, y: int) -> bool:
        return self.get_tile(x, y).is_door

    def get_door_state(self, x: int, y: int) -> Optional[str]:
        tile = self.get_tile(x, y)
        return tile.door_state if tile.is_door else None

    def set_door_state(self, x: int, y: int, state: str) -> bool:
        """Move a door along closed <-> open or locked -> closed."""
        tile = self.get_tile(x, y)
        if not tile.is_door or not can_transition(tile.door_state, state):
            return False
        tile.door_state = state
        return True

    def lock_door(self, x: int, y: int) -> bool:
        tile = self.get_tile(x, y)
        if not tile.is_door or tile.door_state not in (CLOSED, LOCKED):
            return False
        tile.door_state = LOCKED
        return True

    def reveal_secret_door(self, x: int, y: int) -> bool:
        tile = self.get_tile(x, y)
        if not tile.is_door or tile.door_type != SECRET:
            return False
        tile.door_type = NORMAL
        return True

    def remove_door(self, x: int, y: int) -> bool:
        if not self.has_door(x, y):
            return False
        self.grid[x][y].become(FLOOR)
        return True

    # --- queries --------------------------------------------------------

    def find_tile_of_type(self, tile_type: str) -> Optional[Coord]:
        for y in range(self._height):
            for x in range(self._width):
                if self.grid[x][y].type == tile_type:
                    return x, y
        return None

    def get_start_position(self) -> Coord:
        stairs = self.find_tile_of_type(STAIRS_UP)
        if stairs is not None:
            return stairs
        if self._rooms:
            room = self._rooms[0]
            for _ in range(START_POSITION_TRIES):
                x = room.x + 1 + self.rng.randrange(max(1, room.width - 2))
                y = room.y + 1 + self.rng.randrange(max(1, room.height - 2))
                if self.get_tile(x, y).type == FLOOR:
                    return x, y
            return room.x + 1, room.y + 1
        return 1, 1

    def random_walkable_position(self, rng: Optional[random.Random] = None) -> Coord:
        """A random tile of a random room; (1, 1) when the level has no rooms."""
        rng = rng or self.rng
        if not self._rooms:
            return 1, 1
        room = self._rooms[rng.randrange(len(self._rooms))]
        return room.x + rng.randrange(room.width), room.y + rng.randrange(room.height)

    def room_at(self, x: int, y: int) -> Optional[Room]:
        for room in self._rooms:
            if room.contains(x, y):
                return room
        return None

    def is_in_room(self, x: int, y: int) -> bool:
        return self.room_at(x, y) is not None

    # --- snapshots ------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self._width,
            "height": self._height,
            "seed": self.seed,
            "depth": self.depth,
            "tiles": [[self.grid[x][y].to_dict() for x in range(self._width)] for y in range(self._height)],
            "rooms": [room.to_dict() for room in self._rooms],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[LevelConfig] = None) -> "Level":
        """Rebuild a level from ``to_dict`` output without re-running generation."""
        width = int(data["width"])
        height = int(data["height"])
        seed = data.get("seed")
        level = cls(
            config,
            width=width,
            height=height,
            seed=int(seed) if seed is not None else None,
            depth=int(data.get("depth", 1)),
            generate=False,
        )
        tiles = data.get("tiles") or []
        for y, row in enumerate(tiles[:height]):
            for x, cell in enumerate(row[:width]):
                level.grid[x][y] = Tile.from_dict(cell)
        level._rooms = [Room.from_dict(r) for r in data.get("rooms", [])]
        return level

    def to_ascii(self, show_traps: bool = False) -> str:
        rows = []
        for y in range(self._height):
            chars = []
            for x in range(self._width):
                tile = self.grid[x][y]
                if show_traps and tile.trap is not None:
                    chars.append("^")
                else:
                    chars.append(ASCII_CHARS.get(tile.type, "?"))
            rows.append("".join(chars))
        return "\n".join(rows)

    def __repr__(self) -> str:
        return f"Level(seed={self.seed}, depth={self.depth}, size={self._width}x{self._height}, rooms={len(self._rooms)})"


# Older callers know the level as a dungeon
Dungeon = Level

__all__ = ["Dungeon", "Level", "derive_depth_seed"]
