"""
Test Configuration and Fixtures

Provides an in-memory SQLite database, in-memory accessor fakes and an
async test client wired to them.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backend.db.session import get_db
from backend.dependencies import (
    get_bonus_service,
    get_pool_admin_service,
    get_pool_cache,
    get_salary_service,
)
from backend.main import app
from backend.models.base import Base
from backend.services.bonus_service import BonusService
from backend.services.cache import MonthlyPoolCache
from backend.services.pool_admin import PoolAdministrationService
from backend.services.salary_history import SalaryHistoryService
from tests.fakes import FakeEmployeeDirectory, FakeLeadAccessor, FakePoolAccessor, FakeRedis

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a clean database session for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def lead_accessor() -> FakeLeadAccessor:
    return FakeLeadAccessor()


@pytest.fixture
def pool_accessor() -> FakePoolAccessor:
    return FakePoolAccessor()


@pytest.fixture
def directory() -> FakeEmployeeDirectory:
    return FakeEmployeeDirectory()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def pool_cache(fake_redis: FakeRedis) -> MonthlyPoolCache:
    return MonthlyPoolCache(fake_redis, ttl=60)


@pytest.fixture
def bonus_service(
    lead_accessor: FakeLeadAccessor,
    pool_accessor: FakePoolAccessor,
    directory: FakeEmployeeDirectory,
    pool_cache: MonthlyPoolCache,
) -> BonusService:
    return BonusService(
        leads=lead_accessor,
        pools=pool_accessor,
        directory=directory,
        pool_cache=pool_cache,
        max_concurrency=2,
    )


@pytest.fixture
def pool_admin(
    pool_accessor: FakePoolAccessor,
    lead_accessor: FakeLeadAccessor,
    pool_cache: MonthlyPoolCache,
) -> PoolAdministrationService:
    return PoolAdministrationService(pools=pool_accessor, leads=lead_accessor, pool_cache=pool_cache)


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    bonus_service: BonusService,
    pool_admin: PoolAdministrationService,
    pool_cache: MonthlyPoolCache,
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async test client with fake-backed services."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_pool_cache] = lambda: pool_cache
    app.dependency_overrides[get_bonus_service] = lambda: bonus_service
    app.dependency_overrides[get_pool_admin_service] = lambda: pool_admin
    app.dependency_overrides[get_salary_service] = lambda: SalaryHistoryService(db_session)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
