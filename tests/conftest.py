"""
This file contains shared fixtures for the test suite.
"""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio

# Set env vars before any application modules are imported
os.environ.setdefault("DATABASE_BACKEND", "sqlite")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("PYTHONIOENCODING", "utf-8")

from truthordare.config import DatabaseSettings, get_settings  # noqa: E402
from truthordare.db.service import create_database_service  # noqa: E402

USERS_DDL = """
    CREATE TABLE users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT,
        age INTEGER
    )
"""

QUESTIONS_DDL = """
    CREATE TABLE core.questions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        type TEXT NOT NULL CHECK(type IN ('truth', 'dare')),
        question TEXT NOT NULL,
        user_id TEXT NOT NULL,
        server_id TEXT NOT NULL,
        is_approved INTEGER NOT NULL DEFAULT 0,
        approved_by TEXT,
        datetime_approved TIMESTAMP,
        is_banned INTEGER NOT NULL DEFAULT 0,
        ban_reason TEXT,
        banned_by TEXT,
        datetime_banned TIMESTAMP,
        message_id TEXT,
        is_deleted INTEGER NOT NULL DEFAULT 0,
        datetime_deleted TIMESTAMP,
        created TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Make every test read settings from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sqlite_settings(tmp_path):
    """File-backed SQLite settings with a small pool."""
    return DatabaseSettings(
        backend="sqlite",
        path=str(tmp_path / "test.db"),
        pool_size=3,
        pool_timeout=2,
    )


@pytest_asyncio.fixture
async def db(sqlite_settings):
    """Service over a fresh SQLite file containing an empty ``users`` table."""
    service = create_database_service(sqlite_settings)
    await service.execute(USERS_DDL)
    yield service
    await service.close()


@pytest_asyncio.fixture
async def questions_db():
    """In-memory service with the ``core`` schema attached and a ``questions`` table."""
    service = create_database_service(DatabaseSettings(backend="sqlite", path=":memory:"))
    await service.execute("ATTACH DATABASE ':memory:' AS core")
    await service.execute(QUESTIONS_DDL)
    yield service
    await service.close()


@pytest.fixture
def pg_conn():
    """Stand-in for an ``asyncpg.Connection``."""
    conn = MagicMock(name="asyncpg.Connection")
    conn.fetch = AsyncMock(return_value=[])
    conn.execute = AsyncMock(return_value="SELECT 0")
    return conn


@pytest.fixture
def pg_pool(pg_conn):
    """Stand-in for an ``asyncpg.Pool`` handing out ``pg_conn``."""
    pool = MagicMock(name="asyncpg.Pool")
    pool.acquire = AsyncMock(return_value=pg_conn)
    pool.release = AsyncMock()
    pool.close = AsyncMock()
    return pool


@pytest.fixture
def pg_settings():
    return DatabaseSettings(
        backend="postgres",
        host="db.internal",
        user="bot",
        password="s3cret",
        name="truthordare",
        pool_size=2,
        pool_timeout=1,
    )


@pytest.fixture
def create_pool_mock(pg_pool):
    """Patch ``asyncpg.create_pool`` to return ``pg_pool``."""
    with patch("truthordare.db.connection.asyncpg.create_pool", new=AsyncMock(return_value=pg_pool)) as mock:
        yield mock


@pytest_asyncio.fixture
async def pg_db(pg_settings, create_pool_mock):
    service = create_database_service(pg_settings)
    yield service
    await service.close()
