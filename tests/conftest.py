"""
Pytest configuration and fixtures for TaskTrack API tests

Every test gets a fresh in-memory SQLite database (aiosqlite) with the
schema created from the models.
"""
import os

# Settings require DATABASE_URL at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tasktrack.core.cache import InMemoryCache, get_cache
from tasktrack.core.database import Base, get_db, run_after_commit
from tasktrack.main import app
from tasktrack.models import User
from tasktrack.repositories.tag import SqlAlchemyTagRepository
from tasktrack.repositories.task import SqlAlchemyTaskRepository
from tasktrack.repositories.user import SqlAlchemyUserRepository
from tasktrack.services.statistics import TaskStatisticsService
from tasktrack.services.tag import TagService
from tasktrack.services.task import TaskService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def naive(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite returns naive datetimes; compare everything as naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class FixedClock:
    """Clock pinned to a settable instant"""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta) -> datetime:
        self.current = self.current + timedelta(**delta)
        return self.current


class FailingCache:
    """Cache whose every operation fails, as during a Redis outage"""

    def __init__(self):
        self.calls = 0

    async def get(self, key: str) -> Optional[str]:
        self.calls += 1
        raise RuntimeError("cache unavailable")

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.calls += 1
        raise RuntimeError("cache unavailable")

    async def delete(self, key: str) -> None:
        self.calls += 1
        raise RuntimeError("cache unavailable")


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database and session for each test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def task_repository(db_session: AsyncSession) -> SqlAlchemyTaskRepository:
    return SqlAlchemyTaskRepository(db_session)


@pytest.fixture
def tag_repository(db_session: AsyncSession) -> SqlAlchemyTagRepository:
    return SqlAlchemyTagRepository(db_session)


@pytest.fixture
def statistics_service(db_session: AsyncSession, task_repository, cache) -> TaskStatisticsService:
    return TaskStatisticsService(
        task_repository,
        SqlAlchemyUserRepository(db_session),
        cache,
        ttl_seconds=600,
    )


@pytest.fixture
def task_service(task_repository, tag_repository, statistics_service, clock) -> TaskService:
    return TaskService(task_repository, tag_repository, statistics_service, clock)


@pytest.fixture
def tag_service(tag_repository, clock) -> TagService:
    return TagService(tag_repository, clock)


@pytest.fixture
async def users(db_session: AsyncSession) -> list[User]:
    """Three users: alice (1), bob (2), carol (3)"""
    people = [
        User(id=1, name="Alice", email="alice@example.com", password_hash="x"),
        User(id=2, name="Bob", email="bob@example.com", password_hash="x"),
        User(id=3, name="Carol", email="carol@example.com", password_hash="x"),
    ]
    db_session.add_all(people)
    await db_session.flush()
    return people


@pytest.fixture
async def client(db_session: AsyncSession, cache: InMemoryCache) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the database session and cache overridden"""

    async def override_get_db():
        yield db_session
        await db_session.commit()
        await run_after_commit(db_session)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
