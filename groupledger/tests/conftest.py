"""
Centralized Test Configuration.
"""

import os

# Must be set before the app modules build the engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from groupledger.app.main import app
from groupledger.app.db.session import get_db, Base
from groupledger.app.core.redis_client import get_redis
from groupledger.app.domain.ledger.memory_store import MemoryLedgerStore
from groupledger.app.domain.ledger.records import NewGroup, NewUser
from groupledger.app.domain.ledger.service import GroupLocks, LedgerService
from groupledger.app.domain.ledger.sql_store import SqlLedgerStore

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)).lower():
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        return not self._closed

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def incr(self, key):
        if self._closed:
            return 0
        self.store[key] = int(self.store.get(key) or 0) + 1
        return self.store[key]

    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


@pytest.fixture(scope="session")
def redis_client_session():
    return MockRedis()


@pytest.fixture(scope="session", autouse=True)
def apply_overrides(redis_client_session):
    """Apply overrides once for the session."""

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    async def override_get_redis():
        return redis_client_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    yield

    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database(redis_client_session):
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await redis_client_session.flushdb()

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def memory_store():
    return MemoryLedgerStore()


@pytest.fixture
def sql_store(db_session):
    return SqlLedgerStore(db_session)


@pytest.fixture(params=["memory", "sql"])
def store(request, db_session):
    """Run a test once against each Ledger Store implementation."""
    if request.param == "memory":
        return MemoryLedgerStore()
    return SqlLedgerStore(db_session)


@pytest.fixture
def ledger(store):
    return LedgerService(store, locks=GroupLocks())


@pytest.fixture
async def trio_group(store):
    """Group G with members u1 (creator), u2, u3. Returns the group id."""
    for user_id in ("u1", "u2", "u3"):
        await store.create_user(NewUser(
            id=user_id, email=f"{user_id}@test.com", display_name=user_id.upper()
        ))
    group = await store.create_group(NewGroup(name="Flat", code="FLAT01", created_by="u1"))
    await store.add_member(group.id, "u2")
    await store.add_member(group.id, "u3")
    return group.id
