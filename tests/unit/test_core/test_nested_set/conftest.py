"""Fixtures for nested-set algorithm tests.

The scenario tree used throughout::

    A (1, 8)
    ├── B (2, 3)
    └── C (4, 7)
        └── D (5, 6)
"""

from __future__ import annotations

import pytest

from nested_tree.core.database.nested_set import NestedSetRepository, get_accessor
from tests.fixtures.tree import MENU, ROOTS, SCENARIO, Category, seed_tree


@pytest.fixture
def acc():
    return get_accessor(Category)


@pytest.fixture
def repo() -> NestedSetRepository[Category]:
    return NestedSetRepository(Category)


@pytest.fixture
async def tree(db_session) -> dict[str, Category]:
    return await seed_tree(db_session, SCENARIO)


@pytest.fixture
async def roots(db_session) -> dict[str, Category]:
    return await seed_tree(db_session, ROOTS)


@pytest.fixture
async def menu(db_session) -> dict[str, Category]:
    return await seed_tree(db_session, MENU)
