"""
Engine and session factories.

`build_engine()` creates an AsyncEngine for any URL. The process-wide engine and
session maker are built lazily from settings (`get_engine()`, `get_session_maker()`)
so importing this module never opens a connection.

SQLite note: pysqlite/aiosqlite begin transactions on their own, which breaks
SAVEPOINT (`session.begin_nested()`). `enable_sqlite_savepoints()` applies the
workaround documented by SQLAlchemy: disable the driver's transaction handling
and emit BEGIN ourselves.
"""

import logging
from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config.settings import get_settings

logger = logging.getLogger(__name__)


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy, not the sqlite driver, control BEGIN so SAVEPOINT works."""

    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    engine = create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,  # connection health checks
    )
    if engine.dialect.name == "sqlite":
        enable_sqlite_savepoints(engine)

    logger.debug(
        "db.engine.created",
        extra={"dialect": engine.dialect.name, "driver": engine.dialect.driver},
    )
    return engine


@lru_cache()
def get_engine() -> AsyncEngine:
    settings = get_settings()
    return build_engine(settings.SQLALCHEMY_DATABASE_URL, echo=settings.SQLALCHEMY_ECHO)


@lru_cache()
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency. Yields a session and makes sure it is closed after the request.

    Usage:
        async def endpoint(db: AsyncSession = Depends(get_async_session)):
            await db.execute(...)
    """
    async with get_session_maker()() as session:
        yield session
