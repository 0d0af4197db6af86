"""Tests for engine and session construction from settings."""

from __future__ import annotations

from sqlalchemy import func, select, text

from nested_tree.core.database import Base
from nested_tree.core.settings import DatabaseSettings
from nested_tree.infra.database import build_engine, build_sessionmaker, create_tables, get_async_session
from tests.fixtures.tree import Category


def file_settings(tmp_path):
    return DatabaseSettings(dsn=f"sqlite+aiosqlite:///{tmp_path / 'session.db'}")


async def test_build_engine_uses_settings(tmp_path):
    engine = build_engine(file_settings(tmp_path))
    try:
        assert engine.dialect.name == "sqlite"
        assert engine.echo is False
    finally:
        await engine.dispose()


async def test_sessionmaker_keeps_instances_after_commit(tmp_path):
    engine = build_engine(file_settings(tmp_path))
    try:
        await create_tables(engine, Base.metadata, tables=[Category.__table__])
        factory = build_sessionmaker(engine)
        async with factory() as session:
            node = Category(name="kept")
            session.add(node)
            await session.commit()
            assert node.name == "kept"
            assert "name" in node.__dict__
    finally:
        await engine.dispose()


async def test_get_async_session_round_trip(tmp_path):
    settings = file_settings(tmp_path)
    engine = build_engine(settings)
    await create_tables(engine, Base.metadata)
    await engine.dispose()

    async with get_async_session(settings) as session:
        session.add(Category(name="root", lft=1, rgt=2))
        await session.commit()

    async with get_async_session(settings) as session:
        assert (await session.execute(select(func.count(Category.id)))).scalar_one() == 1
        assert (await session.execute(text("SELECT 1"))).scalar_one() == 1
