import statistics
import time

import pytest

from undercroft.level import Level, LevelConfig

# Guardrail against large regressions only. Thresholds are loose so shared
# CI runners do not flake.

SEEDS = [0, 7, 13, 42, 12345]
MEDIAN_MAX_MS = 400.0
WORST_MAX_SECONDS = 2.0


@pytest.mark.performance
def test_default_level_median_runtime_ms():
    runtimes = [Level(seed=s).metrics["runtime_ms"] for s in SEEDS]
    median_rt = statistics.median(runtimes)
    assert median_rt < MEDIAN_MAX_MS, f"Median runtime {median_rt}ms exceeded {MEDIAN_MAX_MS}ms (runtimes={runtimes})"


@pytest.mark.performance
def test_large_level_wall_clock():
    start = time.perf_counter()
    level = Level(LevelConfig(width=200, height=200), seed=10101)
    elapsed = time.perf_counter() - start
    assert level.rooms
    assert elapsed < WORST_MAX_SECONDS, f"200x200 took {elapsed:.3f}s"
