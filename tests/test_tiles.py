from undercroft.level.tiles import (
    CLOSED,
    DART,
    DOOR,
    FLOOR,
    LOCKED,
    NORMAL,
    OPEN,
    SECRET,
    STAIRS_UP,
    WALL,
    Tile,
    Trap,
    can_transition,
)


def test_new_tile_is_plain_wall():
    t = Tile()
    assert t.type == WALL
    assert t.door_state is None and t.door_type is None
    assert t.trap is None
    assert not t.visible and not t.explored


def test_become_door_initialises_door_fields():
    t = Tile()
    t.become(DOOR)
    assert t.is_door
    assert t.door_state == CLOSED
    assert t.door_type == NORMAL


def test_leaving_door_clears_door_fields():
    t = Tile(DOOR, door_state=OPEN, door_type=SECRET)
    t.become(FLOOR)
    assert t.door_state is None and t.door_type is None


def test_trap_dropped_when_floor_changes_type():
    t = Tile(FLOOR, trap=Trap(DART, 30))
    t.become(STAIRS_UP)
    assert not t.has_trap


def test_door_transitions():
    assert can_transition(CLOSED, OPEN)
    assert can_transition(OPEN, CLOSED)
    assert can_transition(LOCKED, CLOSED)
    assert can_transition(OPEN, OPEN)
    assert not can_transition(CLOSED, LOCKED)
    assert not can_transition(OPEN, LOCKED)
    assert not can_transition(LOCKED, OPEN)
    assert not can_transition(CLOSED, "ajar")


def test_tile_dict_only_carries_door_fields_for_doors():
    assert set(Tile(FLOOR).to_dict()) == {"type", "visible", "explored"}
    d = Tile(DOOR, door_state=LOCKED, door_type=SECRET).to_dict()
    assert d["door_state"] == LOCKED and d["door_type"] == SECRET


def test_tile_from_dict_sanitises_input():
    t = Tile.from_dict({"type": "lava"})
    assert t.type == WALL
    t = Tile.from_dict({"type": DOOR, "door_state": "ajar", "door_type": "weird"})
    assert (t.door_state, t.door_type) == (CLOSED, NORMAL)
    # traps only survive on floor tiles
    t = Tile.from_dict({"type": WALL, "trap": {"kind": DART, "difficulty": 30}})
    assert t.trap is None


def test_trapped_floor_restores_trap_flags():
    src = Tile(FLOOR, trap=Trap(DART, 30, hidden=False, revealed=True))
    t = Tile.from_dict(src.to_dict())
    assert t.trap == Trap(DART, 30, hidden=False, revealed=True, disarmed=False)
