"""Structured key=value logging for the generator and its server.

One record per line: ``level=info ts=... logger=... event=...`` followed by
the caller's fields, or one JSON object per line when ``UNDERCROFT_LOG_JSON``
is truthy. The threshold comes from ``UNDERCROFT_LOG_LEVEL`` (debug, info,
warn, error) and is read on every call so a .env file loaded after import
still applies.

Usage:
    from undercroft.logging_utils import get_logger
    log = get_logger("undercroft.level").bind(seed=42, depth=3)
    log.info(event="level_generated", rooms=11, phase_ms={"rooms": 0.4})

In key=value mode coordinates render as ``x,y``, mappings as ``k:v,k:v``,
floats with three decimals, and spaces in text become underscores. Fields
set to None are dropped. Reserved keys: level, ts.
"""

from __future__ import annotations

import json
import os
import sys
import time
from typing import Any, Dict, Mapping, Optional

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}


def current_level() -> int:
    return LEVELS.get(os.getenv("UNDERCROFT_LOG_LEVEL", "info").lower(), 20)


def json_mode() -> bool:
    return os.getenv("UNDERCROFT_LOG_JSON", "0").lower() in ("1", "true", "yes", "on")


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return f"{value:.3f}".rstrip("0").rstrip(".")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Mapping):
        return ",".join(f"{k}:{_render(v)}" for k, v in value.items())
    if isinstance(value, (tuple, list)):
        return ",".join(_render(v) for v in value)
    return str(value).replace(" ", "_")


def format_record(level: str, fields: Mapping[str, Any]) -> str:
    kept = {k: v for k, v in fields.items() if v is not None}
    ts = int(time.time())
    if json_mode():
        return json.dumps({**kept, "level": level, "ts": ts}, separators=(",", ":"), default=repr)
    head = [f"level={level}", f"ts={ts}"]
    return " ".join(head + [f"{k}={_render(v)}" for k, v in kept.items()])


class _Logger:
    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        self.name = name
        self.context = dict(context or {})

    def bind(self, **context) -> "_Logger":
        """Child logger that stamps ``context`` onto every record."""
        return _Logger(self.name, {**self.context, **context})

    def _emit(self, level: str, fields: Dict[str, Any]) -> None:
        if LEVELS[level] < current_level():
            return
        record = {"logger": self.name, **self.context, **fields}
        stream = sys.stderr if level == "error" else sys.stdout
        print(format_record(level, record), file=stream)

    def debug(self, **fields):
        self._emit("debug", fields)

    def info(self, **fields):
        self._emit("info", fields)

    def warn(self, **fields):
        self._emit("warn", fields)

    def error(self, **fields):
        self._emit("error", fields)


_LOGGER_CACHE: Dict[str, _Logger] = {}


def get_logger(name: str) -> _Logger:
    if name not in _LOGGER_CACHE:
        _LOGGER_CACHE[name] = _Logger(name)
    return _LOGGER_CACHE[name]


log = get_logger("undercroft")
