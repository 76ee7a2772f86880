from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import pytest


@pytest.fixture(scope="session", autouse=True)
def _init_catalog_from_test_fixtures() -> None:
    """Load the catalog from `tests/assets` and forbid the built-in fallback.

    This keeps tests hermetic and proves the fixture CSVs are actually loaded.
    """

    os.environ["ADVENTURE_STRICT_ASSETS"] = "1"
    # tests/ contains an assets/ dir, so it stands in for the repo root.
    os.environ["ADVENTURE_ASSETS_ROOT"] = str(Path(__file__).resolve().parent)

    from adventure.assets.registry import get_catalog

    get_catalog.cache_clear()
    get_catalog()


@pytest.fixture()
def client_and_redis(monkeypatch: pytest.MonkeyPatch):
    """FastAPI TestClient wired to fakeredis, with every game delay scaled to zero."""

    import fakeredis
    from fastapi.testclient import TestClient

    from adventure.api.deps import get_redis
    from adventure.main import app

    monkeypatch.setenv("ADVENTURE_TIME_SCALE", "0")
    monkeypatch.setenv("ADVENTURE_SESSION_GRACE_S", "0")

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> fakeredis.FakeRedis:
        return r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()


@pytest.fixture()
def client(client_and_redis) -> Generator[object, None, None]:
    c, _ = client_and_redis
    yield c
