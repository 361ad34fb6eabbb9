"""
GreenLog Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the whole suite.
How:   Service and route tests run against a real SQLite file database
       (through aiosqlite) created fresh for every test, so the SQL the
       services send is actually executed. Wrapper failure paths use mocks.

Fixture Hierarchy (all function-scoped):
    ├── database:      initialized Database over an empty, freshly created schema
    ├── seeded:        `database` after populate_all()
    ├── test_client:   HTTPX AsyncClient bound to an app using `database`
    └── mock_engine:   AsyncMock engine for Database.connection() unit tests
"""

import os

# Settings are read at import time; point them at throwaway values first.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./greenlog-test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from greenlog.database import Database
from greenlog.services.schema_service import schema_service


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """
    An initialized Database with every table created and empty.

    Each test gets its own file under tmp_path, so tests never share rows.
    """
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'greenlog.db'}", pool_min=1, pool_max=3)
    assert db.initialize()
    await schema_service.initiate_all(db)
    yield db
    await db.shutdown(grace_period=1)


@pytest_asyncio.fixture
async def seeded(database: Database) -> Database:
    """`database` with all sample rows inserted."""
    await schema_service.populate_all(database)
    return database


@pytest_asyncio.fixture
async def test_client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to a fresh app built around `database`.

    ASGITransport does not run the lifespan; the `database` fixture has
    already opened the pool.

    Usage:
        async def test_count(test_client):
            response = await test_client.get("/count-appusers")
            assert response.json() == {"success": True, "count": 0}
    """
    from greenlog.main import create_app

    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_engine():
    """
    An engine stand-in whose connect() hands out `mock_engine.conn`.

    Usage:
        db = Database("sqlite+aiosqlite://")
        db._engine = mock_engine
        mock_engine.conn.close.side_effect = RuntimeError("socket gone")
    """
    conn = AsyncMock()
    engine = MagicMock()
    engine.connect = AsyncMock(return_value=conn)
    engine.dispose = AsyncMock()
    engine.conn = conn
    return engine
