"""
Test infrastructure for the board API.

Strategy
--------
- SQLite in-memory via aiosqlite, so no Postgres is needed in CI.
- StaticPool makes every async task share the one in-memory connection;
  a second connection would see an empty database.
- ``get_db`` is overridden with a ``session_scope`` over the test session
  factory, so requests run in the same commit/rollback boundary as
  production.
- Tables are created before and dropped after each test.
- Redis is disabled by setting ``cache._redis = None``; the CacheManager
  treats that as "always miss, never store".
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from board.cache import cache
from board.database import Base, get_db, session_scope
from board.main import app
from board.middleware import install_query_counter

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with session_scope(async_session_test) as session:
        yield session


app.dependency_overrides[get_db] = override_get_db


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    cache._redis = None
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live session for tests that call services or repositories directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """An httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register():
    """
    Return a coroutine that registers a user over HTTP and yields
    ``(user_id, auth)`` where *auth* is a Basic-auth tuple for httpx.
    """

    async def _register(client: AsyncClient, username: str, password: str = "secret-pw"):
        resp = await client.post("/api/v1/users", json={
            "username": username,
            "password": password,
            "email": f"{username}@example.com",
            "nickname": username.title(),
        })
        assert resp.status_code == 201, resp.text
        return resp.json()["id"], (username, password)

    return _register
