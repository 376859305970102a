"""Service test fixtures - async DB, event store and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB
    - database.db_manager patched so the rotation route and store share the test engine
"""

from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from merzah.db.base import Base
from merzah.core.recurrence import utc_offset_minutes
from merzah.infrastructure.database import get_db, DatabaseSessionManager
from merzah.infrastructure.event_store import SqlAlchemyEventStore
from merzah.models.event import Event
import merzah.infrastructure.database as db_module
from merzah.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def test_db_manager(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)


@pytest.fixture
def event_store(test_db_manager):
    return SqlAlchemyEventStore(test_db_manager)


@pytest.fixture
async def client(test_session_factory, test_db_manager):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    db_module.db_manager = test_db_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_event(test_db):
    """Insert an Event row; returns the refreshed ORM object."""
    async def _make(
        occurrence_date: datetime,
        recurrence_pattern: str | None = None,
        recurrence_end_date: datetime | None = None,
        title: str = "Weekly halaqah",
    ) -> Event:
        event = Event(
            title=title,
            description="Tafsir study circle after maghrib",
            category="halaqah",
            occurrence_date=occurrence_date,
            utc_offset_minutes=utc_offset_minutes(occurrence_date),
            recurrence_pattern=recurrence_pattern,
            recurrence_end_date=recurrence_end_date,
        )
        test_db.add(event)
        await test_db.commit()
        await test_db.refresh(event)
        return event

    return _make
