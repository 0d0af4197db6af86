"""Pytest configuration and shared fixtures.

Organization:
    - Database Fixtures: in-memory SQLite engine and session
    - Settings Fixtures: cache isolation for pydantic-settings loaders
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from nested_tree.core.database import Base
from nested_tree.core.settings import clear_settings_cache

# Register test models on Base.metadata before tables are created
from tests.fixtures import tree as _tree_models  # noqa: F401

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create async SQLAlchemy engine with in-memory SQLite.

    A fresh database per test; all tables from ``Base.metadata``.
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create async database session for testing.

    ``expire_on_commit=False`` so instances stay usable after the tree
    operations commit.
    """
    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Clear cached settings before and after every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
