import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from undercroft import create_app  # noqa: E402
from undercroft.level import LevelConfig  # noqa: E402
from undercroft.routes.level_api import clear_level_cache  # noqa: E402


@pytest.fixture(autouse=True)
def _quiet_generation_logs(monkeypatch):
    # Keep per-level info records out of captured stdout unless a test opts in
    monkeypatch.setenv("UNDERCROFT_LOG_LEVEL", "warn")


@pytest.fixture()
def test_app():
    app = create_app(TESTING=True)
    previous = app.config["LEVEL_CONFIG"]
    app.config["LEVEL_CONFIG"] = LevelConfig()
    clear_level_cache()
    yield app
    app.config["LEVEL_CONFIG"] = previous
    clear_level_cache()


@pytest.fixture()
def client(test_app):
    return test_app.test_client()
