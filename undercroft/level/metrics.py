from typing import Dict

from .tiles import TILE_TYPES


def init_metrics() -> Dict[str, int | float | dict]:
    return {
        'rooms_attempted': 0,
        'rooms_placed': 0,
        'corridors_carved': 0,
        'passages_carved': 0,
        'secret_rooms_placed': 0,
        'door_candidates': 0,
        'doors_placed': 0,
        'dead_ends_carved': 0,
        'traps_placed': 0,
        'trap_attempts': 0,
        'tile_counts': {},
        'runtime_ms': 0.0,
    }


def count_tiles(grid) -> Dict[str, int]:
    counts = {t: 0 for t in sorted(TILE_TYPES)}
    for column in grid:
        for tile in column:
            counts[tile.type] += 1
    return counts
