from __future__ import annotations

import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from tests.factories import FakeUpstream


@pytest.fixture()
def settings_env(tmp_path: Path):
    previous = dict(os.environ)
    os.environ["HOTHAND_DB_PATH"] = str(tmp_path / "ncaamb-test.db")
    os.environ["SPORTRADAR_API_KEY"] = "test-key"
    os.environ["HOTHAND_SEASON_YEAR"] = "2024"

    import src.hothand.config as config

    config.reset_settings_cache()
    yield config.get_settings()

    os.environ.clear()
    os.environ.update(previous)
    config.reset_settings_cache()


@pytest.fixture()
def store(tmp_path: Path):
    from src.hothand.db.store import CacheStore

    cache = CacheStore.open(tmp_path / "store-test.db")
    yield cache
    cache.close()


@pytest.fixture()
def fake_upstream():
    return FakeUpstream()


@pytest.fixture()
def app_client(settings_env, fake_upstream):
    from src.hothand.main import create_app

    app = create_app(client=fake_upstream)
    with TestClient(app) as client:
        yield client
