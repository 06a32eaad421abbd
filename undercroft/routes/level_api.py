"""
project: Undercroft
module: level_api.py
License: MIT

Level map, ASCII dump, metrics and door state API routes.

Levels are generated on demand and memoised per (seed, depth, width, height)
so that door changes made through POST /api/level/door are visible to later
map requests for the same level.
"""

import hashlib
import os
import random
import threading

from flask import Blueprint, Response, current_app, jsonify, request

from undercroft.level import Level, LevelConfig
from undercroft.level.tiles import DOOR_STATES
from undercroft.logging_utils import get_logger

log = get_logger("undercroft.api")

MAX_SEED = 0x7FFFFFFF
MAX_DIMENSION = 200
MAX_DEPTH = 999


class BadRequest(ValueError):
    """Client supplied an unusable parameter."""


# Simple in-process cache key->Level instance. Thread-safe with a lock because
# the dev server handles requests on worker threads.
_level_cache = {}
_level_cache_lock = threading.Lock()
_LEVEL_CACHE_MAX = 8  # small LRU-ish manual cap


def clear_level_cache():
    with _level_cache_lock:
        _level_cache.clear()


def get_cached_level(seed: int, depth: int, width: int, height: int, config: LevelConfig | None = None) -> Level:
    config = config or LevelConfig()
    if os.environ.get("UNDERCROFT_DISABLE_CACHE") == "1":
        return Level(config, seed=seed, depth=depth, width=width, height=height)
    key = (seed, depth, width, height)
    with _level_cache_lock:
        level = _level_cache.get(key)
        if level is not None:
            # Refresh recency
            _level_cache.pop(key)
            _level_cache[key] = level
            return level
    level = Level(config, seed=seed, depth=depth, width=width, height=height)
    with _level_cache_lock:
        # Another thread may have generated the same level meanwhile; keep the first
        level = _level_cache.setdefault(key, level)
        while len(_level_cache) > _LEVEL_CACHE_MAX:
            oldest = next(iter(_level_cache))
            _level_cache.pop(oldest)
    return level


def _coerce_seed(raw):
    """Convert a provided seed (int or str) into a bounded non-negative int."""
    if raw is None:
        return random.randint(1, 1_000_000)
    if isinstance(raw, bool):
        raise BadRequest("seed must be an integer or string")
    if isinstance(raw, int):
        return raw % MAX_SEED
    if isinstance(raw, str):
        s = raw.strip()
        if not s:
            return random.randint(1, 1_000_000)
        if s.lstrip("-").isdecimal():
            return int(s) % MAX_SEED
        h = hashlib.sha256(s.encode("utf-8")).digest()
        return int.from_bytes(h[:8], "big") % MAX_SEED
    raise BadRequest("seed must be an integer or string")


def _int_param(source, name: str, default: int, lo: int, hi: int) -> int:
    raw = source.get(name)
    if raw is None or raw == "":
        return default
    if isinstance(raw, int) and not isinstance(raw, bool):
        value = raw
    elif isinstance(raw, str) and raw.strip().lstrip("-").isdecimal():
        value = int(raw)
    else:
        raise BadRequest(f"{name} must be an integer")
    if not lo <= value <= hi:
        raise BadRequest(f"{name} must be between {lo} and {hi}")
    return value


def _level_from(source):
    """Resolve (seed, level) from query args or a JSON body."""
    config = current_app.config.get("LEVEL_CONFIG") or LevelConfig()
    raw_seed = source.get("seed")
    seed = _coerce_seed(raw_seed if raw_seed is not None else config.seed)
    depth = _int_param(source, "depth", 1, 1, MAX_DEPTH)
    width = _int_param(source, "width", config.width, 3, MAX_DIMENSION)
    height = _int_param(source, "height", config.height, 3, MAX_DIMENSION)
    try:
        level = get_cached_level(seed, depth, width, height, config)
    except ValueError as e:
        raise BadRequest(str(e)) from None
    return seed, level


bp_level = Blueprint("level", __name__)


@bp_level.errorhandler(BadRequest)
def _bad_request(e):
    return jsonify({"error": str(e)}), 400


@bp_level.route("/api/level/map")
def level_map():
    """
    Return a generated level snapshot.
    Response: { width, height, tiles: [[...]] (row-major), rooms, seed, depth, start: [x, y] }
    """
    seed, level = _level_from(request.args)
    payload = level.to_dict()
    payload["seed"] = seed
    payload["start"] = list(level.get_start_position())
    return jsonify(payload)


@bp_level.route("/api/level/ascii")
def level_ascii():
    seed, level = _level_from(request.args)
    show_traps = request.args.get("traps", "0").lower() in ("1", "true", "yes", "on")
    return Response(level.to_ascii(show_traps=show_traps) + "\n", mimetype="text/plain")


@bp_level.route("/api/level/metrics")
def level_metrics():
    seed, level = _level_from(request.args)
    return jsonify({"seed": seed, "depth": level.depth, "metrics": level.metrics})


@bp_level.route("/api/level/door", methods=["POST"])
def level_door():
    """Change a door's state.

    Body JSON: { "seed", "depth", "x", "y", "state": "open" | "closed" | "locked" }
    404 when no door sits at (x, y), 409 when the transition is not allowed.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("JSON object body required")
    seed, level = _level_from(data)
    if data.get("x") is None or data.get("y") is None:
        raise BadRequest("x and y are required")
    x = _int_param(data, "x", 0, 0, level.width - 1)
    y = _int_param(data, "y", 0, 0, level.height - 1)
    state = data.get("state")
    if not isinstance(state, str) or state not in DOOR_STATES:
        raise BadRequest(f"state must be one of {sorted(DOOR_STATES)}")
    if not level.has_door(x, y):
        return jsonify({"error": "no door at position", "x": x, "y": y}), 404
    current = level.get_door_state(x, y)
    if not level.set_door_state(x, y, state):
        return jsonify({"error": "transition not allowed", "from": current, "to": state}), 409
    log.bind(seed=seed, depth=level.depth).info(event="door_state_changed", at=(x, y), previous=current, state=state)
    return jsonify({"x": x, "y": y, "state": state, "previous": current})
