"""Async SQLAlchemy engine and session factory.

Engines are built from ``DatabaseSettings`` on demand rather than at
import time, so the CLI and tests can point at different databases.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from nested_tree.core.settings import get_db_settings
from nested_tree.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from nested_tree.core.settings import DatabaseSettings

logger = logging.getLogger(__name__)
_lazy = get_lazy_logger(__name__)


def _before_cursor_execute(
    conn: Any, cursor: Any, statement: str, parameters: Any, context: Any, executemany: Any
) -> None:
    _ = conn, cursor, statement, parameters, executemany
    context._query_start_time = time.perf_counter()


def _after_cursor_execute(
    conn: Any, cursor: Any, statement: str, parameters: Any, context: Any, executemany: Any
) -> None:
    _ = conn, cursor, parameters, executemany
    duration_ms = (time.perf_counter() - context._query_start_time) * 1000
    operation = statement.lstrip().split(" ", 1)[0].upper() if statement else "UNKNOWN"
    _lazy.debug(lambda: f"db.query: {operation} {duration_ms:.2f}ms")


def build_engine(settings: DatabaseSettings | None = None) -> AsyncEngine:
    """Create an async engine from database settings.

    Args:
        settings: Connection settings (defaults to the cached DB_ settings)

    Returns:
        Engine with query timing hooks attached
    """
    settings = settings or get_db_settings()
    engine = create_async_engine(
        settings.dsn,
        echo=settings.echo,
        pool_pre_ping=settings.pool_pre_ping,
    )
    event.listen(engine.sync_engine, "before_cursor_execute", _before_cursor_execute)
    event.listen(engine.sync_engine, "after_cursor_execute", _after_cursor_execute)

    logger.debug("Database engine created", extra={"dialect": engine.dialect.name})
    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by the CLI and tests.

    ``expire_on_commit`` is off: tree operations commit internally and
    callers keep using the returned instances afterwards.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def get_async_session(settings: DatabaseSettings | None = None) -> AsyncIterator[AsyncSession]:
    """Open a short-lived engine and yield one session on it.

    The session is closed and the engine disposed on exit. Tree operations
    commit themselves; anything else left pending is rolled back.

    Example:
        async with get_async_session() as session:
            repo = NestedSetRepository(Category)
            print(await repo.verify(session))
    """
    engine = build_engine(settings)
    factory = build_sessionmaker(engine)
    try:
        async with factory() as session:
            yield session
    finally:
        await engine.dispose()


async def create_tables(engine: AsyncEngine, metadata: Any, tables: list[Any] | None = None) -> None:
    """Create tables from ``metadata`` (all, or just ``tables``) that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all, tables=tables, checkfirst=True)
    names = sorted(t.name for t in tables) if tables is not None else sorted(metadata.tables)
    logger.info("Tables created", extra={"tables": names})


__all__ = [
    "build_engine",
    "build_sessionmaker",
    "create_tables",
    "get_async_session",
]
