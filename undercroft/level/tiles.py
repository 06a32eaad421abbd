"""Tile, door and trap primitives shared by every generation phase.

Tile types are plain string constants (the values double as the persisted
form). Door fields only exist on door tiles; a trap may only sit on a floor.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

WALL = "wall"
FLOOR = "floor"
DOOR = "door"
STAIRS_UP = "stairs_up"
STAIRS_DOWN = "stairs_down"

TILE_TYPES = frozenset({WALL, FLOOR, DOOR, STAIRS_UP, STAIRS_DOWN})
STAIRS = frozenset({STAIRS_UP, STAIRS_DOWN})
# Tiles a walker may stand on once every door is open
PASSABLE = frozenset({FLOOR, DOOR, STAIRS_UP, STAIRS_DOWN})

# Door states
CLOSED = "closed"
OPEN = "open"
LOCKED = "locked"
DOOR_STATES = frozenset({CLOSED, OPEN, LOCKED})

# Door types
NORMAL = "normal"
SECRET = "secret"
DOOR_TYPES = frozenset({NORMAL, SECRET})

# closed <-> open (player action), locked -> closed (key / force)
DOOR_TRANSITIONS = {
    CLOSED: frozenset({OPEN}),
    OPEN: frozenset({CLOSED}),
    LOCKED: frozenset({CLOSED}),
}

# Trap kinds
DART = "dart"
SNARE = "snare"
GAS_POISON = "gas_poison"
GAS_CONFUSE = "gas_confuse"
PIT = "pit"
ALARM = "alarm"
TRAP_KINDS = frozenset({DART, SNARE, GAS_POISON, GAS_CONFUSE, PIT, ALARM})

ASCII_CHARS = {
    WALL: "#",
    FLOOR: ".",
    DOOR: "+",
    STAIRS_UP: "<",
    STAIRS_DOWN: ">",
}


def can_transition(current: str, target: str) -> bool:
    """Return True when a door may move from ``current`` to ``target``.

    Re-asserting the current state is always allowed.
    """
    if current == target:
        return current in DOOR_STATES
    return target in DOOR_TRANSITIONS.get(current, ())


@dataclass
class Trap:
    kind: str
    difficulty: int
    hidden: bool = True
    revealed: bool = False
    disarmed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Trap":
        return cls(
            kind=data["kind"],
            difficulty=int(data["difficulty"]),
            hidden=bool(data.get("hidden", True)),
            revealed=bool(data.get("revealed", False)),
            disarmed=bool(data.get("disarmed", False)),
        )


class Tile:
    """One grid cell.

    ``door_state`` / ``door_type`` are ``None`` unless ``type == DOOR``.
    ``visible`` / ``explored`` belong to the field-of-view collaborator.
    """

    __slots__ = ("type", "door_state", "door_type", "trap", "visible", "explored")

    def __init__(
        self,
        type: str = WALL,
        door_state: Optional[str] = None,
        door_type: Optional[str] = None,
        trap: Optional[Trap] = None,
        visible: bool = False,
        explored: bool = False,
    ):
        self.type = type
        self.door_state = door_state
        self.door_type = door_type
        self.trap = trap
        self.visible = visible
        self.explored = explored

    @property
    def is_door(self) -> bool:
        return self.type == DOOR

    @property
    def has_trap(self) -> bool:
        return self.trap is not None

    def become(self, tile_type: str) -> None:
        """Switch type, initialising door fields on entry and dropping them on exit."""
        self.type = tile_type
        if tile_type == DOOR:
            self.door_state = CLOSED
            self.door_type = NORMAL
        else:
            self.door_state = None
            self.door_type = None
        if tile_type != FLOOR:
            self.trap = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "visible": self.visible,
            "explored": self.explored,
        }
        if self.type == DOOR:
            data["door_state"] = self.door_state
            data["door_type"] = self.door_type
        if self.trap is not None:
            data["trap"] = self.trap.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tile":
        tile_type = data.get("type", WALL)
        if tile_type not in TILE_TYPES:
            tile_type = WALL
        tile = cls(tile_type, visible=bool(data.get("visible")), explored=bool(data.get("explored")))
        if tile_type == DOOR:
            state = data.get("door_state", CLOSED)
            kind = data.get("door_type", NORMAL)
            tile.door_state = state if state in DOOR_STATES else CLOSED
            tile.door_type = kind if kind in DOOR_TYPES else NORMAL
        trap = data.get("trap")
        if trap and tile_type == FLOOR:
            tile.trap = Trap.from_dict(trap)
        return tile

    def __repr__(self) -> str:
        if self.type == DOOR:
            return f"Tile({self.type!r}, {self.door_state!r}, {self.door_type!r})"
        return f"Tile({self.type!r})"


def out_of_bounds_tile() -> Tile:
    """Synthetic wall handed out for coordinates outside the grid."""
    return Tile(WALL)


__all__ = [
    "WALL",
    "FLOOR",
    "DOOR",
    "STAIRS_UP",
    "STAIRS_DOWN",
    "TILE_TYPES",
    "STAIRS",
    "PASSABLE",
    "CLOSED",
    "OPEN",
    "LOCKED",
    "DOOR_STATES",
    "NORMAL",
    "SECRET",
    "DOOR_TYPES",
    "DOOR_TRANSITIONS",
    "DART",
    "SNARE",
    "GAS_POISON",
    "GAS_CONFUSE",
    "PIT",
    "ALARM",
    "TRAP_KINDS",
    "ASCII_CHARS",
    "Tile",
    "Trap",
    "can_transition",
    "out_of_bounds_tile",
]
