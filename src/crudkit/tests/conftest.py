"""
Core pytest configuration for the entire test suite.

Provides the logging setup and the database fixtures every test type needs.
Each test gets its own SQLite file under `tmp_path`, so tests are isolated
even when the code under test commits.

Domain-specific fixtures (repositories, services, ...) live in
tests/test_fixtures/ and are imported at the bottom of this module.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncGenerator

# -------------------------------
# Early logging tuning
# -------------------------------
# Silence noisy third-party loggers before importing anything that may configure them.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "aiosqlite",
    "asyncio",
    "httpx",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from crudkit.config.settings import Settings
from crudkit.core.logging.builder import setup_logging
from crudkit.database.base import Base
from crudkit.database.session import build_engine
from .test_fixtures import models  # noqa: F401  registers the test models on Base.metadata

logger = logging.getLogger(__name__)


# -------------------------------
# Logging
# -------------------------------
TEST_LOG_SETTINGS = Settings(LOG_FORMAT="text", LOG_LEVEL="DEBUG", LOG_TO_STDOUT=True)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Install crudkit's logging configuration once for the whole session.

    Text format keeps failing-test output readable; caplog attaches its own
    handler per test, so nothing else is needed for log assertions.
    """
    setup_logging(TEST_LOG_SETTINGS)
    yield


@pytest.fixture()
def reinstall_logging():
    """For tests that call setup_logging() themselves: restore the session configuration afterwards."""
    yield
    setup_logging(TEST_LOG_SETTINGS)


# -------------------------------
# Database
# -------------------------------
def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture()
async def async_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """A fresh SQLite database with all tables created, disposed after the test."""
    engine = build_engine(sqlite_url(tmp_path / "test.db"))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture()
def session_maker(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """The session under test. Use `session_maker` for a second, independent session."""
    async with session_maker() as session:
        yield session


# Shared domain fixtures
from .test_fixtures.repository_fixtures import (  # noqa: E402
    widget_repository,
    tag_repository,
    note_repository,
    unit_of_work,
    widget_service,
    create_widget,
    created_widget,
    multiple_widgets,
    read_in_new_session,
)
