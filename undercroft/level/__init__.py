"""Level generation package.

``Level`` is the public entry point; the stage modules (rooms, tunnels,
secrets, doors, features, traps) are importable for targeted tests.
"""
from .config import LevelConfig
from .connectivity import reachable_from, validate_level
from .level import Dungeon, Level, derive_depth_seed
from .rooms import Room
from .tiles import Tile, Trap

__all__ = [
    "Dungeon",
    "Level",
    "LevelConfig",
    "Room",
    "Tile",
    "Trap",
    "derive_depth_seed",
    "reachable_from",
    "validate_level",
]
