import random
from dataclasses import asdict, dataclass
from typing import Iterator, List, Tuple

from .config import LevelConfig
from .tiles import FLOOR

START_ROOM = "start"
NORMAL_ROOM = "normal"
SECRET_ROOM = "secret"
ROOM_KINDS = (START_ROOM, NORMAL_ROOM, SECRET_ROOM)


@dataclass
class Room:
    x: int
    y: int
    width: int
    height: int
    kind: str = NORMAL_ROOM

    def cells(self) -> Iterator[Tuple[int, int]]:
        for ix in range(self.x, self.x + self.width):
            for iy in range(self.y, self.y + self.height):
                yield ix, iy

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def within_ring(self, x: int, y: int) -> bool:
        """Footprint plus the one tile ring of wall around it."""
        return self.x - 1 <= x <= self.x + self.width and self.y - 1 <= y <= self.y + self.height

    @property
    def center(self) -> Tuple[int, int]:
        return (self.x + self.width // 2, self.y + self.height // 2)

    @property
    def is_secret(self) -> bool:
        return self.kind == SECRET_ROOM

    def separated_from(self, other: "Room", gap: int) -> bool:
        """True when at least ``gap`` wall tiles lie between the two rectangles."""
        return (
            self.x + self.width + gap <= other.x
            or self.x >= other.x + other.width + gap
            or self.y + self.height + gap <= other.y
            or self.y >= other.y + other.height + gap
        )

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data) -> "Room":
        kind = data.get("kind", NORMAL_ROOM)
        return cls(
            int(data["x"]),
            int(data["y"]),
            int(data["width"]),
            int(data["height"]),
            kind if kind in ROOM_KINDS else NORMAL_ROOM,
        )


def pick_room_size(rng) -> Tuple[int, int]:
    """Size classes: 30% small chambers, 30% medium, 40% large halls."""
    roll = rng.random()
    if roll < 0.3:
        return 3 + rng.randrange(3), 3 + rng.randrange(3)
    if roll < 0.6:
        return 5 + rng.randrange(4), 4 + rng.randrange(4)
    return 7 + rng.randrange(6), 5 + rng.randrange(5)


def can_place_room(candidate: Room, rooms: List[Room], config: LevelConfig) -> bool:
    if (
        candidate.x < 1
        or candidate.y < 1
        or candidate.x + candidate.width >= config.width - 1
        or candidate.y + candidate.height >= config.height - 1
    ):
        return False
    return all(candidate.separated_from(r, config.room_gap) for r in rooms)


def carve_room(grid, room: Room) -> None:
    for ix, iy in room.cells():
        grid[ix][iy].become(FLOOR)


def place_rooms(grid, config: LevelConfig, rng=None):
    """Rejection-sample rooms into the interior band and carve them.

    Returns (rooms, target). Rooms whose attempt budget runs out are skipped.
    """
    if rng is None:
        rng = random
    lo, hi = config.room_count
    target = rng.randint(lo, hi)
    margin_x = int(config.width * config.margin_ratio)
    margin_y = int(config.height * config.margin_ratio)
    rooms: List[Room] = []
    for _ in range(target):
        for _attempt in range(config.room_attempts):
            w, h = pick_room_size(rng)
            span_x = config.width - w - margin_x * 2
            span_y = config.height - h - margin_y * 2
            if span_x <= 0 or span_y <= 0:
                continue
            candidate = Room(
                margin_x + rng.randrange(span_x),
                margin_y + rng.randrange(span_y),
                w,
                h,
                START_ROOM if not rooms else NORMAL_ROOM,
            )
            if can_place_room(candidate, rooms, config):
                rooms.append(candidate)
                carve_room(grid, candidate)
                break
    return rooms, target


__all__ = ["Room", "START_ROOM", "NORMAL_ROOM", "SECRET_ROOM", "place_rooms", "can_place_room", "carve_room", "pick_room_size"]
