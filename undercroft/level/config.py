from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional, Tuple

IntRange = Tuple[int, int]


@dataclass
class LevelConfig:
    width: int = 80
    height: int = 50
    seed: Optional[int] = None
    # Rooms
    room_count: IntRange = (8, 12)
    room_attempts: int = 150
    margin_ratio: float = 0.08
    room_gap: int = 2
    # Corridors / maze texture
    extra_connections: IntRange = (0, 2)
    passages: IntRange = (3, 6)
    passage_steps: IntRange = (15, 24)
    passage_floor_chance: float = 0.3
    # Secret rooms
    secret_rooms: IntRange = (1, 3)
    secret_room_size: IntRange = (3, 5)
    secret_room_attempts: int = 50
    # Doors
    door_chance: float = 0.7
    secret_door_chance: float = 0.0
    locked_door_chance: float = 0.0
    # Dead ends
    dead_ends: IntRange = (2, 5)
    dead_end_length: IntRange = (3, 7)
    dead_end_start_attempts: int = 50
    # Traps
    trap_density: float = 0.005
    min_traps: int = 5
    trap_attempt_factor: int = 50
    trap_chance: float = 0.35
    trap_bias: float = 1.5
    enable_metrics: bool = True

    def __post_init__(self) -> None:
        if self.width < 3 or self.height < 3:
            raise ValueError("LevelConfig width and height must be at least 3")
        for name in (
            "room_count",
            "extra_connections",
            "passages",
            "passage_steps",
            "secret_rooms",
            "secret_room_size",
            "dead_ends",
            "dead_end_length",
        ):
            lo, hi = (int(v) for v in getattr(self, name))
            if lo < 0 or hi < lo:
                raise ValueError(f"LevelConfig {name} must be a non-negative (min, max) pair, got {(lo, hi)}")
            setattr(self, name, (lo, hi))
        if self.secret_room_size[0] < 1:
            raise ValueError("LevelConfig secret_room_size must be positive")
        for name in ("room_attempts", "secret_room_attempts", "dead_end_start_attempts", "trap_attempt_factor"):
            if getattr(self, name) < 0:
                raise ValueError(f"LevelConfig {name} cannot be negative")
        if self.room_gap < 0 or self.min_traps < 0:
            raise ValueError("LevelConfig room_gap and min_traps cannot be negative")
        if not 0 <= self.margin_ratio < 0.5:
            raise ValueError("LevelConfig margin_ratio must lie in [0, 0.5)")
        for name in (
            "passage_floor_chance",
            "door_chance",
            "secret_door_chance",
            "locked_door_chance",
            "trap_density",
            "trap_chance",
        ):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ValueError(f"LevelConfig {name} must lie in [0, 1]")
        if self.secret_door_chance + self.locked_door_chance > 1.0:
            raise ValueError("LevelConfig secret_door_chance + locked_door_chance cannot exceed 1")

    @property
    def area(self) -> int:
        return self.width * self.height

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], prefix: str = "UNDERCROFT_LEVEL_") -> "LevelConfig":
        """Build a config from env-style keys, e.g. ``UNDERCROFT_LEVEL_WIDTH=100``.

        Range fields accept ``"min,max"``; booleans accept 1/true/yes/on.
        Unknown keys are ignored, malformed values raise ValueError.
        """
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            key = prefix + f.name.upper()
            if key not in mapping:
                continue
            raw = mapping[key]
            default = f.default
            if isinstance(default, tuple):
                if isinstance(raw, str):
                    parts = [p for p in raw.replace(" ", "").split(",") if p]
                else:
                    parts = list(raw)
                if len(parts) != 2:
                    raise ValueError(f"{key} must be 'min,max', got {raw!r}")
                kwargs[f.name] = (int(parts[0]), int(parts[1]))
            elif isinstance(default, bool):
                kwargs[f.name] = str(raw).lower() in ("1", "true", "yes", "on")
            elif isinstance(default, float):
                kwargs[f.name] = float(raw)
            elif f.name == "seed":
                kwargs[f.name] = None if raw in (None, "") else int(raw)
            else:
                kwargs[f.name] = int(raw)
        return cls(**kwargs)


__all__ = ["LevelConfig"]
