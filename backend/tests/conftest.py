"""Pytest configuration and fixtures."""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401 - register all models with Base.metadata
from app.api.deps import get_demo_data, get_entitlements, get_reminders
from app.core.database import Base, enable_sqlite_foreign_keys, get_db
from app.main import app
from app.services.entitlements import EntitlementService
from app.services.reminders import ReminderScheduler
from app.services.sample_data import DemoDataService

# In-memory SQLite shared by every session of one test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def demo_data():
    return DemoDataService(enabled=False, seed=7)


@pytest.fixture
def reminders():
    return ReminderScheduler(authorized=True)


@pytest.fixture
def entitlements():
    """Subscribed, so API tests are not capped by the free tier unless they say so."""
    return EntitlementService(is_subscribed=True, stock_limit=5, category_limit=2)


@pytest_asyncio.fixture
async def client(session_maker, demo_data, reminders, entitlements):
    """API client on the test database; lifespan services are replaced by fixtures."""
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_demo_data] = lambda: demo_data
    app.dependency_overrides[get_reminders] = lambda: reminders
    app.dependency_overrides[get_entitlements] = lambda: entitlements
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
