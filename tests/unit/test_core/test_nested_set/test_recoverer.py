"""Tests for rebuilding bounds from parent references."""

from __future__ import annotations

import logging

import pytest

from nested_tree.core.database import TreeIntegrityError
from nested_tree.core.database.nested_set.recoverer import recover_tree
from nested_tree.core.database.nested_set.verifier import verify_tree
from tests.fixtures.tree import Category, corrupt, snapshot

INITIAL = {"A": (1, 8), "B": (2, 3), "C": (4, 7), "D": (5, 6)}


async def test_valid_tree_is_untouched(db_session, acc, tree):
    assert await recover_tree(db_session, acc) is False
    assert await snapshot(db_session) == INITIAL


async def test_overlapping_bounds_are_rebuilt(db_session, acc, tree, caplog):
    await corrupt(db_session, 2, rgt=4)

    with caplog.at_level(logging.INFO):
        assert await recover_tree(db_session, acc) is True

    assert await snapshot(db_session) == INITIAL
    assert await verify_tree(db_session, acc) is True
    assert "Tree recovered" in caplog.text


async def test_all_bounds_lost(db_session, acc, tree):
    for node_id in range(1, 5):
        await corrupt(db_session, node_id, lft=None, rgt=None)

    assert await recover_tree(db_session, acc) is True

    assert await snapshot(db_session) == INITIAL


async def test_new_rows_without_bounds_are_placed(db_session, acc, tree):
    db_session.add(Category(id=5, name="E", parent_id=2))
    db_session.add(Category(id=6, name="F"))
    await db_session.commit()

    assert await recover_tree(db_session, acc) is True

    assert await snapshot(db_session) == {
        "A": (1, 10),
        "B": (2, 5),
        "E": (3, 4),
        "C": (6, 9),
        "D": (7, 8),
        "F": (11, 12),
    }
    assert await verify_tree(db_session, acc) is True


async def test_missing_parent_rolls_back(db_session, acc, tree):
    await corrupt(db_session, 2, rgt=4)
    db_session.add(Category(id=5, name="E", lft=9, rgt=10, parent_id=99))
    await db_session.commit()
    before = await snapshot(db_session)

    with pytest.raises(TreeIntegrityError):
        await recover_tree(db_session, acc)

    assert await snapshot(db_session) == before


async def test_parent_cycle_rolls_back(db_session, acc, tree):
    # A and C name each other as parent
    await corrupt(db_session, 1, parent_id=3, lft=9)
    before = await snapshot(db_session)

    with pytest.raises(TreeIntegrityError, match="cycle"):
        await recover_tree(db_session, acc)

    assert await snapshot(db_session) == before
    assert await verify_tree(db_session, acc) is not True


async def test_self_parent_rolls_back(db_session, acc, tree):
    await corrupt(db_session, 2, parent_id=2, rgt=4)
    before = await snapshot(db_session)

    with pytest.raises(TreeIntegrityError, match="its own parent"):
        await recover_tree(db_session, acc)

    assert await snapshot(db_session) == before
