"""
Test infrastructure for blogstore.

Strategy
--------
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- Each test gets its own engine with every table created from
  ``Base.metadata``, so tests never see each other's rows.  Tests that
  exercise Alembic use ``bare_engine`` instead, which has no tables yet.
- The statement counter is installed on the test engines so service tests
  can assert how many round-trips an operation costs.
"""
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from blogstore.database import Base
from blogstore.instrumentation import install_query_counter
import blogstore.models  # noqa: F401  (registers tables on Base.metadata)

# ---------------------------------------------------------------------------
# Test database engine — SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    install_query_counter(engine)
    return engine


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def bare_engine():
    """An empty in-memory database (no tables)."""
    engine = make_engine()
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def engine_test():
    """An in-memory database with every table created."""
    engine = make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine_test):
    return async_sessionmaker(engine_test, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncSession:
    """
    Yield a live AsyncSession for tests that need to interact with the
    database directly (e.g. seeding data, asserting ORM state).
    """
    async with session_factory() as session:
        yield session
