import random

import pytest

from undercroft.level import LevelConfig
from undercroft.level.rooms import (
    NORMAL_ROOM,
    START_ROOM,
    Room,
    can_place_room,
    pick_room_size,
    place_rooms,
)
from undercroft.level.tiles import FLOOR

from level_test_utils import ScriptedRng, blank_grid


def test_room_geometry_helpers():
    r = Room(2, 3, 5, 4)
    assert r.center == (4, 5)
    assert r.contains(2, 3) and r.contains(6, 6)
    assert not r.contains(7, 3) and not r.contains(2, 7)
    assert len(list(r.cells())) == 20


def test_separation_needs_full_gap():
    a = Room(1, 1, 3, 3)
    assert a.separated_from(Room(6, 1, 3, 3), 2)  # columns 4 and 5 between
    assert not a.separated_from(Room(5, 1, 3, 3), 2)
    assert a.separated_from(Room(5, 1, 3, 3), 1)


def test_pick_room_size_classes_stay_in_range():
    rng = random.Random(5)
    for _ in range(500):
        w, h = pick_room_size(rng)
        assert 3 <= w <= 12
        assert 3 <= h <= 9


def test_pick_room_size_split_is_30_30_40():
    rng = random.Random(21)
    widths = [pick_room_size(rng)[0] for _ in range(6000)]
    n = len(widths)
    # widths 3-4 only come from small rooms, 6 only from medium, 9-12 only from large
    assert 0.17 < sum(w <= 4 for w in widths) / n < 0.23
    assert 0.055 < sum(w == 6 for w in widths) / n < 0.095
    assert 0.235 < sum(w >= 9 for w in widths) / n < 0.30


@pytest.mark.parametrize(
    "roll, expected",
    [(0.0, (3, 3)), (0.2999, (3, 3)), (0.3, (5, 4)), (0.5999, (5, 4)), (0.6, (7, 5)), (0.9999, (7, 5))],
)
def test_pick_room_size_uses_a_single_class_roll(roll, expected):
    rng = ScriptedRng(random=[roll])
    assert pick_room_size(rng) == expected


def test_can_place_room_respects_border_and_gap():
    cfg = LevelConfig(width=20, height=15)
    placed = [Room(2, 2, 4, 4)]
    assert not can_place_room(Room(0, 5, 3, 3), [], cfg)
    assert not can_place_room(Room(16, 5, 3, 3), [], cfg)  # x + w == width - 1
    assert can_place_room(Room(15, 5, 3, 3), [], cfg)
    assert not can_place_room(Room(7, 2, 3, 3), placed, cfg)
    assert can_place_room(Room(8, 2, 3, 3), placed, cfg)


@pytest.mark.parametrize("seed", [1, 2, 3, 99])
def test_place_rooms_carves_separated_rooms(seed):
    cfg = LevelConfig()
    grid = blank_grid(cfg.width, cfg.height)
    rooms, target = place_rooms(grid, cfg, random.Random(seed))
    assert 8 <= target <= 12
    assert 1 <= len(rooms) <= target
    assert rooms[0].kind == START_ROOM
    assert all(r.kind == NORMAL_ROOM for r in rooms[1:])
    for i, a in enumerate(rooms):
        for b in rooms[i + 1:]:
            assert a.separated_from(b, cfg.room_gap)
        assert all(grid[x][y].type == FLOOR for x, y in a.cells())


def test_tiny_map_places_no_rooms():
    cfg = LevelConfig(width=5, height=5)
    grid = blank_grid(5, 5)
    rooms, _ = place_rooms(grid, cfg, random.Random(1))
    assert rooms == []


def test_room_dict_round_trip_defaults_unknown_kind():
    r = Room.from_dict({"x": 1, "y": 2, "width": 3, "height": 4, "kind": "vault"})
    assert r == Room(1, 2, 3, 4, NORMAL_ROOM)
    assert Room.from_dict(Room(1, 2, 3, 4, START_ROOM).to_dict()).kind == START_ROOM
