"""Shared pytest fixtures: a temporary SQLite database, the app and an authed client."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from wealth_tracker.api.server import create_app
from wealth_tracker.config import Config
from wealth_tracker.store import PortfolioStore

PASSWORD = "s3cret-test"


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "wealth.db")


@pytest.fixture
def cfg(db_path) -> Config:
    return Config(DB_DSN=db_path, APP_PASSWORD=PASSWORD, CORS_ALLOW_ORIGINS="", LOG_REQUESTS=False)


@pytest.fixture
def store(db_path) -> PortfolioStore:
    s = PortfolioStore(db_path)
    s.init()
    return s


@pytest.fixture
def api(cfg):
    """TestClient with startup run (schema created) but no auth header."""
    with TestClient(create_app(cfg)) as c:
        yield c


@pytest.fixture
def auth() -> dict:
    return {"Authorization": f"Bearer {PASSWORD}"}


@pytest.fixture
def sample_tx() -> dict:
    return {
        "scheme_name": "Axis Bluechip Fund",
        "asset_type": "Mutual Funds",
        "transaction_type": "Buy",
        "units": 10.5,
        "nav": 45.25,
        "amount": 475.125,
        "date": "2024-01-15",
        "platform": "Zerodha",
        "account": "Joint",
    }
