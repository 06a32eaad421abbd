"""
project: Undercroft
module: __init__.py
License: MIT

Flask application factory for the level generation service.

Configuration is sourced from environment variables (optionally loaded from a
.env file). ``UNDERCROFT_LEVEL_*`` keys shape the default ``LevelConfig``
handed to every generated level. A local `instance/` directory holds the
rotating log file.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify

from undercroft.level import LevelConfig

__version__ = "0.3.0"

# Load .env if present so HOST, PORT and UNDERCROFT_* can be supplied
# without exporting shell variables during development.
load_dotenv()

app = Flask(__name__, instance_relative_config=True)
os.makedirs(app.instance_path, exist_ok=True)

app.config["LEVEL_CONFIG"] = LevelConfig.from_mapping(os.environ)

from undercroft.routes.level_api import bp_level  # noqa: E402

app.register_blueprint(bp_level)


def create_app(level_config: LevelConfig | None = None, **overrides):
    """Return the Flask app, optionally swapping the default level config.

    Extra keyword arguments are applied to ``app.config`` (e.g. TESTING=True).
    """
    if level_config is not None:
        app.config["LEVEL_CONFIG"] = level_config
    app.config.update(overrides)
    return app


@app.errorhandler(500)
def internal_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.exception("Unhandled exception (id=%s)", error_id)
    return jsonify({"error": "internal server error", "error_id": error_id}), 500
