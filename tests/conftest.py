import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from delve import create_app  # noqa: E402
from delve.dungeon import Dungeon  # noqa: E402

TEST_SEED = 12345


@pytest.fixture()
def app(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("DUNGEON_") or key.startswith("DELVE_"):
            monkeypatch.delenv(key, raising=False)
    app = create_app({"TESTING": True, "DUNGEON_SEED": TEST_SEED})
    monkeypatch.setattr(app, "instance_path", str(tmp_path))
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def dungeon():
    return Dungeon(seed=TEST_SEED)
