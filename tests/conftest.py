"""Test configuration and fixtures for berrybind."""

import warnings
# Silence Strawberry's LazyType deprecation warnings to keep test output clean
warnings.filterwarnings("ignore", category=DeprecationWarning, message=r"LazyType is deprecated.*")

from dotenv import load_dotenv
import pytest
import asyncio
import os
import sys
from typing import AsyncGenerator
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from tests.models import Base
from tests.handlers import HANDLER_CALLS
from tests.schema import RESOLVER_CALLS

# Try to load environment variables from .env file
load_dotenv()


@pytest.fixture(scope="session", autouse=True)
def event_loop_policy():
    """Set event loop policy for Windows compatibility."""
    if sys.platform.startswith("win"):
        # Use SelectorEventLoop instead of ProactorEventLoop on Windows
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    yield


@pytest.fixture(scope="function")
async def engine():
    """Create a test database engine for each test function."""
    test_db_url = os.getenv('BERRYBIND_TEST_DATABASE_URL')

    if test_db_url:
        engine = create_async_engine(
            test_db_url,
            echo=False,
            future=True,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
        )
        # Ensure a clean slate before tests: drop then create all tables
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        is_external_db = True
    else:
        # Use in-memory SQLite for tests
        engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            echo=os.getenv("SQL_ECHO", "0") == "1",
            future=True,
        )
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        is_external_db = False

    yield engine

    # Clean up: for external databases, drop all tables
    if is_external_db:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new database session for each test function."""
    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session


@pytest.fixture(scope="function")
def sql_statements(engine):
    """Collect SQL statements executed on the engine while the test runs."""
    statements: list[str] = []

    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine.sync_engine, "before_cursor_execute", _before_cursor_execute)
    yield statements
    event.remove(engine.sync_engine, "before_cursor_execute", _before_cursor_execute)


@pytest.fixture(autouse=True)
def reset_call_logs():
    RESOLVER_CALLS.clear()
    HANDLER_CALLS.clear()
    yield


# Import fixtures from fixtures module
from tests.fixtures import (
    sample_companies,
    sample_users,
    populated_db,
)
