"""Shared pytest fixtures.

Every test that touches storage gets its own SQLite file under tmp_path
and a configuration built from defaults plus test environment variables.
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from yogashna.config.app_config import DEV_USER_UID, clear_config_cache
from yogashna.db.database import init_db
from yogashna.db.seed import seed_database
from yogashna.db.users_repository import get_or_create_user

R2_BASE_URL = "https://media.example.com"
STREAM_SUBDOMAIN = "customer-test"


@pytest.fixture
def app_env(tmp_path, monkeypatch) -> Path:
    """Isolated working directory, database path and config."""
    monkeypatch.chdir(tmp_path)
    db_path = tmp_path / "db" / "test.db"
    monkeypatch.setenv("AUTH_DISABLED", "true")
    monkeypatch.setenv("DATABASE_PATH", str(db_path))
    monkeypatch.setenv("CLOUDFLARE_R2_PUBLIC_BASE_URL", R2_BASE_URL)
    monkeypatch.setenv("CLOUDFLARE_STREAM_CUSTOMER_SUBDOMAIN", STREAM_SUBDOMAIN)
    clear_config_cache()
    yield db_path
    clear_config_cache()


@pytest.fixture
def db(app_env) -> Path:
    """Empty database with the full schema."""
    init_db(app_env)
    return app_env


@pytest.fixture
def seeded_db(db) -> Path:
    """Database with the development seed data."""
    seed_database()
    return db


@pytest.fixture
def user_id(db) -> str:
    """Internal id of a freshly created user."""
    return get_or_create_user("uid-test-user", "+15550100").id


@pytest.fixture
def dev_user_id(seeded_db) -> str:
    """Internal id of the user that requests run as when auth is disabled."""
    return get_or_create_user(DEV_USER_UID).id


@pytest.fixture
def client(seeded_db):
    """Test client over a seeded database, auth disabled."""
    from yogashna.web.api import create_app

    with TestClient(create_app()) as test_client:
        yield test_client
