"""
Pytest fixtures for pgrep tests. Uses a temporary SQLite DB for the moderation store.
"""

from __future__ import annotations

import pytest

ADMIN_ID = "76561198000000001"


@pytest.fixture
def moderation_db(tmp_path, monkeypatch):
    """
    Point the moderation store at a temporary SQLite DB and init tables.
    Resets engine cache so each test gets a fresh DB. Unset DATABASE_URL so we use SQLite.
    """
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("PGREP_DB_PATH", str(tmp_path / "pgrep.db"))

    import backend_pgrep.api_server.db_moderation as db

    db.reset_engine_for_test()
    db.init_db()
    yield db
    db.reset_engine_for_test()


@pytest.fixture
def rate_limiter():
    """Small window so tests can hit the limit quickly."""
    from backend_pgrep.api_server.rate_limit import RateLimiter

    return RateLimiter(max_requests=3, window_sec=60)


@pytest.fixture
def client(moderation_db, rate_limiter, monkeypatch):
    """FastAPI TestClient. Depends on moderation_db so the temp DB is set before the app runs."""
    from fastapi.testclient import TestClient

    from backend_pgrep.api_server.server import create_app

    monkeypatch.setenv("ADMIN_STEAM_IDS", ADMIN_ID)
    return TestClient(create_app(rate_limiter=rate_limiter))
