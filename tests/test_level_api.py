import pytest

from undercroft.level import LevelConfig
from undercroft.routes import level_api
from undercroft.routes.level_api import get_cached_level


def _find_door(client, width=80, height=50, seeds=range(1, 60)):
    for seed in seeds:
        data = client.get(f"/api/level/map?seed={seed}&width={width}&height={height}").get_json()
        for y, row in enumerate(data["tiles"]):
            for x, cell in enumerate(row):
                if cell["type"] == "door" and cell["door_state"] == "closed":
                    return seed, x, y
    return None


def test_map_endpoint_returns_snapshot(client):
    r = client.get("/api/level/map?seed=42")
    assert r.status_code == 200
    data = r.get_json()
    assert data["seed"] == 42 and data["depth"] == 1
    assert data["width"] == 80 and data["height"] == 50
    assert len(data["tiles"]) == 50 and len(data["tiles"][0]) == 80
    sx, sy = data["start"]
    assert data["tiles"][sy][sx]["type"] == "stairs_up"
    assert data["rooms"][0]["kind"] == "start"


def test_map_endpoint_is_deterministic_per_seed_and_depth(client):
    a = client.get("/api/level/map?seed=7&depth=2&width=40&height=30").get_json()
    level_api.clear_level_cache()
    b = client.get("/api/level/map?seed=7&depth=2&width=40&height=30").get_json()
    assert a == b
    c = client.get("/api/level/map?seed=7&depth=3&width=40&height=30").get_json()
    assert c["tiles"] != a["tiles"]


def test_string_seed_is_hashed(client):
    a = client.get("/api/level/map?seed=crypt&width=30&height=20").get_json()
    b = client.get("/api/level/map?seed=crypt&width=30&height=20").get_json()
    assert isinstance(a["seed"], int)
    assert a["seed"] == b["seed"]


@pytest.mark.parametrize(
    "query",
    [
        "seed=1&width=abc",
        "seed=1&width=2",
        "seed=1&height=5000",
        "seed=1&depth=0",
    ],
)
def test_bad_query_is_400(client, query):
    r = client.get(f"/api/level/map?{query}")
    assert r.status_code == 400
    assert "error" in r.get_json()


def test_ascii_endpoint(client):
    r = client.get("/api/level/ascii?seed=3&width=30&height=20")
    assert r.status_code == 200
    assert r.mimetype == "text/plain"
    rows = r.get_data(as_text=True).rstrip("\n").split("\n")
    assert len(rows) == 20 and all(len(row) == 30 for row in rows)


def test_metrics_endpoint(client):
    r = client.get("/api/level/metrics?seed=3")
    assert r.status_code == 200
    data = r.get_json()
    assert data["seed"] == 3
    for k in ("rooms_placed", "doors_placed", "traps_placed", "runtime_ms", "phase_ms"):
        assert k in data["metrics"]


def test_door_endpoint_changes_cached_level(client, test_app):
    test_app.config["LEVEL_CONFIG"] = LevelConfig(door_chance=1.0)
    found = _find_door(client)
    assert found is not None, "no door found in 59 seeds"
    seed, x, y = found
    body = {"seed": seed, "x": x, "y": y, "state": "open"}
    r = client.post("/api/level/door", json=body)
    assert r.status_code == 200
    assert r.get_json() == {"x": x, "y": y, "state": "open", "previous": "closed"}
    # change is visible to later reads of the same cached level
    data = client.get(f"/api/level/map?seed={seed}").get_json()
    assert data["tiles"][y][x]["door_state"] == "open"
    # open -> locked is not a legal transition
    r = client.post("/api/level/door", json={**body, "state": "locked"})
    assert r.status_code == 409
    assert r.get_json()["from"] == "open"


def test_door_endpoint_404_without_door(client):
    r = client.post("/api/level/door", json={"seed": 5, "x": 0, "y": 0, "state": "open"})
    assert r.status_code == 404


@pytest.mark.parametrize(
    "body",
    [
        {"seed": 5, "x": 1, "state": "open"},
        {"seed": 5, "x": 1, "y": 1, "state": "ajar"},
        {"seed": 5, "x": 1, "y": 1, "state": ["open"]},
        {"seed": 5, "x": 500, "y": 1, "state": "open"},
        {"seed": 5, "x": "a", "y": 1, "state": "open"},
        {"seed": 5, "x": 2.7, "y": 1, "state": "open"},
        {"seed": 5, "x": 1, "y": "1.5", "state": "open"},
        {"seed": 5, "x": True, "y": 1, "state": "open"},
    ],
)
def test_door_endpoint_400_on_bad_body(client, body):
    r = client.post("/api/level/door", json=body)
    assert r.status_code == 400


def test_cache_is_bounded_and_reused(monkeypatch):
    monkeypatch.delenv("UNDERCROFT_DISABLE_CACHE", raising=False)
    level_api.clear_level_cache()
    cfg = LevelConfig(width=20, height=15)
    first = get_cached_level(1, 1, 20, 15, cfg)
    assert get_cached_level(1, 1, 20, 15, cfg) is first
    for seed in range(2, 12):
        get_cached_level(seed, 1, 20, 15, cfg)
    assert len(level_api._level_cache) == level_api._LEVEL_CACHE_MAX
    assert get_cached_level(1, 1, 20, 15, cfg) is not first
    level_api.clear_level_cache()


def test_cache_can_be_disabled(monkeypatch):
    monkeypatch.setenv("UNDERCROFT_DISABLE_CACHE", "1")
    cfg = LevelConfig(width=20, height=15)
    a = get_cached_level(1, 1, 20, 15, cfg)
    b = get_cached_level(1, 1, 20, 15, cfg)
    assert a is not b
    assert a.to_dict() == b.to_dict()


@pytest.mark.parametrize("body", [[1, 2], "open", 7, None])
def test_door_endpoint_400_on_non_object_body(client, body):
    r = client.post("/api/level/door", json=body)
    assert r.status_code == 400
    assert r.get_json()["error"] == "JSON object body required"


def test_fractional_query_size_is_400(client):
    r = client.get("/api/level/map?seed=1&width=40.5")
    assert r.status_code == 400
