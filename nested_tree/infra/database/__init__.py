"""Database infrastructure: engine and session management.

Example:
    from nested_tree.infra.database import get_async_session

    async with get_async_session() as session:
        result = await session.execute(...)
"""

from .session import build_engine, build_sessionmaker, create_tables, get_async_session

__all__ = [
    "build_engine",
    "build_sessionmaker",
    "create_tables",
    "get_async_session",
]
