"""Service test fixtures - SQLite event store + FastAPI test client.

Invariants:
    - Every test gets a fresh SQLite database file with the event table created
    - get_db_manager overridden to a DatabaseSessionManager bound to that file
    - db_manager singleton patched for the /health route, restored afterwards
    - get_geolocator overridden with an in-memory fake (no network)

Design Decisions:
    - File-backed SQLite rather than :memory: so concurrent requests get
      their own pooled connections, like the production pool
"""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from tracker.api.dependencies import get_geolocator
from tracker.db.base import Base
from tracker.infrastructure.database import DatabaseSessionManager, get_db_manager
from tracker.models.event import event_table
import tracker.infrastructure.database as db_module
from tracker.main import app

from tests.services.fakes import FakeGeolocator


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'events.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
def test_manager(test_engine, test_session_factory):
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
def geolocator():
    return FakeGeolocator()


@pytest.fixture
async def client(test_manager, geolocator):
    """FastAPI test client with store and geolocator overridden."""
    app.dependency_overrides[get_db_manager] = lambda: test_manager
    app.dependency_overrides[get_geolocator] = lambda: geolocator

    original_manager = db_module.db_manager
    db_module.db_manager = test_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def stored_events(test_session_factory):
    """Async callable returning every stored (created_at, details) row."""
    async def _fetch():
        async with test_session_factory() as session:
            result = await session.execute(
                select(event_table.c.created_at, event_table.c.details),
            )
            return result.all()
    return _fetch
