"""Pipeline orchestration for level generation.

Runs the generation phases strictly in order against one ``Level``; each
phase reads what earlier phases carved. Per-phase timing lands in
``metrics['phase_ms']`` when metrics are enabled.
"""
from __future__ import annotations

import time

from ..logging_utils import get_logger
from .doors import add_doors
from .features import add_dead_ends, place_stairs
from .metrics import count_tiles, init_metrics
from .rooms import place_rooms
from .secrets import add_secret_rooms
from .traps import add_traps
from .tunnels import add_winding_passages, connect_rooms

log = get_logger("undercroft.level")


def generate_level(level) -> None:
    config = level.config
    grid = level.grid
    rng = level.rng
    run_log = log.bind(seed=level.seed, depth=level.depth)
    metrics = init_metrics() if config.enable_metrics else {}
    phase_times = {}
    start = time.perf_counter()

    def _phase(label, fn, *a, **k):
        ps = time.perf_counter()
        r = fn(*a, **k)
        phase_times[label] = round((time.perf_counter() - ps) * 1000, 3)
        return r

    rooms, target = _phase("rooms", place_rooms, grid, config, rng)
    if len(rooms) < target:
        run_log.debug(event="rooms_underplaced", target=target, placed=len(rooms))
    corridors = _phase("corridors", connect_rooms, grid, rooms, config, rng)
    passages = _phase("passages", add_winding_passages, grid, rooms, config, rng)
    secret_rooms = _phase("secret_rooms", add_secret_rooms, grid, rooms, config, rng)
    doors = _phase("doors", add_doors, grid, rooms, config, rng, metrics if config.enable_metrics else None)
    dead_ends = _phase("dead_ends", add_dead_ends, grid, rooms, config, rng)
    up, down = _phase("stairs", place_stairs, grid, rooms, rng)
    if up is None:
        run_log.warn(event="level_without_rooms")
    traps, trap_attempts = _phase("traps", add_traps, grid, rooms, config, rng)
    level._rooms = rooms
    runtime_ms = round((time.perf_counter() - start) * 1000, 3)

    if config.enable_metrics:
        metrics.update(
            rooms_attempted=target,
            rooms_placed=len(rooms) - secret_rooms,
            corridors_carved=corridors,
            passages_carved=passages,
            secret_rooms_placed=secret_rooms,
            dead_ends_carved=dead_ends,
            traps_placed=traps,
            trap_attempts=trap_attempts,
            tile_counts=count_tiles(grid),
            phase_ms=phase_times,
            runtime_ms=runtime_ms,
        )
    level.metrics = metrics
    run_log.info(
        event="level_generated",
        width=config.width,
        height=config.height,
        rooms=len(rooms),
        secret_rooms=secret_rooms,
        doors=doors,
        traps=traps,
        stairs_down=down is not None,
        runtime_ms=runtime_ms,
    )
    run_log.debug(event="level_phases", phase_ms=phase_times)


__all__ = ["generate_level"]
