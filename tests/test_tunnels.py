import random

import pytest

from undercroft.level import LevelConfig
from undercroft.level.rooms import Room, carve_room
from undercroft.level.tiles import DOOR, FLOOR, WALL
from undercroft.level.tunnels import (
    add_winding_passages,
    carve_direct_passage,
    carve_horizontal,
    carve_l_corridor,
    carve_vertical,
    carve_winding_passage,
    connect_rooms,
)

from level_test_utils import ScriptedRng, bfs_reachable, blank_grid, types_at


def test_horizontal_carve_is_clamped_to_interior():
    cfg = LevelConfig(width=10, height=6)
    grid = blank_grid(10, 6)
    carved = carve_horizontal(grid, cfg, -5, 20, 2)
    assert carved == 8
    assert grid[0][2].type == WALL and grid[9][2].type == WALL
    assert carve_horizontal(grid, cfg, 1, 8, 0) == 0


def test_vertical_carve_only_turns_walls_into_floor():
    cfg = LevelConfig(width=6, height=10)
    grid = blank_grid(6, 10)
    grid[2][4].become(DOOR)
    carved = carve_vertical(grid, cfg, 1, 8, 2)
    assert carved == 7
    assert grid[2][4].type == DOOR


def test_l_corridor_leg_order_follows_rng():
    cfg = LevelConfig(width=20, height=12)
    a, b = Room(2, 2, 3, 3), Room(12, 7, 3, 3)
    grid = blank_grid(20, 12)
    carve_l_corridor(grid, cfg, a, b, ScriptedRng(random=[0.9]))
    # horizontal first: along a's centre row, then down b's centre column
    assert grid[8][3].type == FLOOR and grid[13][5].type == FLOOR
    assert grid[3][8].type == WALL

    grid = blank_grid(20, 12)
    carve_l_corridor(grid, cfg, a, b, ScriptedRng(random=[0.1]))
    assert grid[3][6].type == FLOOR and grid[8][8].type == FLOOR
    assert grid[8][3].type == WALL


@pytest.mark.parametrize("seed", [1, 7, 23])
def test_connect_rooms_links_every_room(seed):
    cfg = LevelConfig(width=40, height=30)
    rooms = [Room(2, 2, 4, 3), Room(30, 3, 5, 4), Room(5, 22, 3, 3), Room(25, 20, 6, 5)]
    grid = blank_grid(40, 30)
    for r in rooms:
        carve_room(grid, r)
    corridors = connect_rooms(grid, rooms, cfg, random.Random(seed))
    assert corridors >= 3
    reach = bfs_reachable(grid, rooms[0].center)
    assert all(r.center in reach for r in rooms)


def test_connect_rooms_needs_two_rooms():
    cfg = LevelConfig(width=20, height=12)
    grid = blank_grid(20, 12)
    assert connect_rooms(grid, [Room(2, 2, 3, 3)], cfg, random.Random(1)) == 0


def test_winding_passages_stay_inside_border():
    cfg = LevelConfig(width=30, height=20, passages=(6, 6), passage_steps=(40, 40))
    rooms = [Room(12, 8, 4, 4)]
    grid = blank_grid(30, 20)
    carve_room(grid, rooms[0])
    count = add_winding_passages(grid, rooms, cfg, random.Random(3))
    assert count <= 6
    for x in range(30):
        assert grid[x][0].type == WALL and grid[x][19].type == WALL
    for y in range(20):
        assert grid[0][y].type == WALL and grid[29][y].type == WALL
    # every floor tile still joins the room
    floors = {(x, y) for x in range(30) for y in range(20) if grid[x][y].type == FLOOR}
    assert floors <= bfs_reachable(grid, rooms[0].center)


def test_direct_passage_walks_x_then_y():
    cfg = LevelConfig(width=12, height=10)
    grid = blank_grid(12, 10)
    grid[2][2].become(FLOOR)
    carved = carve_direct_passage(grid, cfg, (2, 2), (6, 7))
    assert carved == 9
    assert types_at(grid, [(x, 2) for x in range(2, 7)]) == [FLOOR] * 5
    assert types_at(grid, [(6, y) for y in range(2, 8)]) == [FLOOR] * 6
    assert grid[2][7].type == WALL


def _one_step_walk():
    # single tile room at (4, 4) with open floor to the north; walks try N, E, S, W in order
    cfg = LevelConfig(width=10, height=10, passage_steps=(1, 1))
    grid = blank_grid(10, 10)
    grid[4][4].become(FLOOR)
    grid[4][3].become(FLOOR)
    return cfg, grid, [Room(4, 4, 1, 1)]


@pytest.mark.parametrize("roll", [0.0, 0.29])
def test_winding_passage_steps_onto_floor_below_chance(roll):
    cfg, grid, rooms = _one_step_walk()
    assert carve_winding_passage(grid, rooms, cfg, ScriptedRng(random=[roll])) == 1
    # moved north over existing floor, nothing new dug
    assert grid[5][4].type == WALL


@pytest.mark.parametrize("roll", [0.3, 0.9])
def test_winding_passage_skips_floor_at_or_above_chance(roll):
    cfg, grid, rooms = _one_step_walk()
    assert carve_winding_passage(grid, rooms, cfg, ScriptedRng(random=[roll])) == 1
    # refused the floor to the north, dug east instead
    assert grid[5][4].type == FLOOR
