"""Service test fixtures — async DB, command collaborators and worker doubles.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Commands run against the same session the test asserts with
    - Downstream jobs land in an InMemoryWorkQueue, sinks are in-memory doubles

Design Decisions:
    - SQLite in-memory: fast, no external dependency; row locks are no-ops there,
      so serialization tests target KeyedLock directly
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from content_sync.config import Settings
from content_sync.core.keyed_lock import KeyedLock
from content_sync.db.base import Base
import content_sync.models  # noqa: F401
import content_sync.infrastructure.database as db_module
from content_sync.infrastructure.database import DatabaseSessionManager, get_db
from content_sync.main import app
from content_sync.services.downstream_dispatch import DownstreamDispatch
from content_sync.services.downstream_worker import DownstreamWorker
from content_sync.services.work_queue import InMemoryWorkQueue

from tests.fakes import InMemoryContentStore, InMemoryPublisher, RecordingReporter
from tests.services.commands import Commands


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
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
def settings():
    return Settings(dependency_page_size=2)


@pytest.fixture
def queue():
    return InMemoryWorkQueue()


@pytest.fixture
def dispatch(queue):
    return DownstreamDispatch(queue)


@pytest.fixture
def locks():
    return KeyedLock()


@pytest.fixture
def draft_store():
    return InMemoryContentStore("draft-content-store")


@pytest.fixture
def live_store():
    return InMemoryContentStore("content-store")


@pytest.fixture
def publisher():
    return InMemoryPublisher()


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def worker(test_db, draft_store, live_store, publisher, queue, reporter, settings):
    return DownstreamWorker(
        test_db, draft_store, live_store, publisher, queue, reporter, settings,
    )


@pytest.fixture
def commands(test_db, dispatch, locks, settings):
    return Commands(test_db, dispatch, locks, settings)


@pytest.fixture
async def client(test_engine, test_session_factory, queue, locks, draft_store):
    """FastAPI test client with DB dependency and app.state collaborators replaced."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.locks = locks
    app.state.work_queue = queue
    app.state.draft_store = draft_store

    # Readiness probe reads db_manager directly
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
