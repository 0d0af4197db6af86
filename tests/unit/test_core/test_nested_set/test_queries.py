"""Tests for paths, child listings and counts."""

from __future__ import annotations

import pytest

from nested_tree.core.database import InvalidSortError
from nested_tree.core.database.nested_set.queries import child_count, get_children, get_path
from nested_tree.core.database.nested_set.sync import between, shift_bounds
from tests.fixtures.tree import Category


def names(nodes):
    return [n.name for n in nodes]


class TestGetPath:
    async def test_path_runs_from_root_to_node(self, db_session, acc, tree):
        path = await get_path(db_session, acc, tree["D"])

        assert names(path) == ["A", "C", "D"]

    async def test_root_path_is_itself(self, db_session, acc, tree):
        assert names(await get_path(db_session, acc, tree["A"])) == ["A"]

    async def test_unattached_node_has_empty_path(self, db_session, acc, tree):
        assert await get_path(db_session, acc, Category(name="loose")) == []


class TestGetChildren:
    async def test_all_descendants_in_preorder(self, db_session, acc, tree):
        assert names(await get_children(db_session, acc, tree["A"])) == ["B", "C", "D"]

    async def test_direct_children_only(self, db_session, acc, tree):
        assert names(await get_children(db_session, acc, tree["A"], direct=True)) == ["B", "C"]

    async def test_whole_tree(self, db_session, acc, tree):
        assert names(await get_children(db_session, acc)) == ["A", "B", "C", "D"]

    async def test_roots(self, db_session, acc, roots):
        assert names(await get_children(db_session, acc, direct=True)) == ["R1", "R2", "R3"]

    async def test_leaf_has_no_children(self, db_session, acc, tree):
        assert await get_children(db_session, acc, tree["D"]) == []

    async def test_unattached_node_has_no_children(self, db_session, acc, tree):
        assert await get_children(db_session, acc, Category(name="loose")) == []

    async def test_custom_sort(self, db_session, acc, tree):
        children = await get_children(
            db_session, acc, tree["A"], direct=True, sort_field="name", direction="DESC"
        )

        assert names(children) == ["C", "B"]

    @pytest.mark.parametrize(
        ("sort_field", "direction"),
        [("colour", "asc"), ("name", "sideways"), ("name", None)],
    )
    async def test_invalid_sort_raises(self, db_session, acc, tree, sort_field, direction):
        with pytest.raises(InvalidSortError) as exc_info:
            await get_children(db_session, acc, tree["A"], sort_field=sort_field, direction=direction)

        assert str(exc_info.value).startswith(
            f"Invalid sort options specified: field - {sort_field}, direction - {direction}"
        )

    async def test_reads_bypass_stale_instances(self, db_session, acc, tree):
        await shift_bounds(db_session, acc, 10, between(2, 3))

        children = await get_children(db_session, acc)

        assert tree["B"] in children
        assert (tree["B"].lft, tree["B"].rgt) == (12, 13)


class TestChildCount:
    async def test_descendants_from_bounds(self, db_session, acc, tree):
        assert await child_count(db_session, acc, tree["A"]) == 3
        assert await child_count(db_session, acc, tree["C"]) == 1
        assert await child_count(db_session, acc, tree["D"]) == 0

    async def test_direct_children(self, db_session, acc, tree):
        assert await child_count(db_session, acc, tree["A"], direct=True) == 2

    async def test_whole_tree_and_roots(self, db_session, acc, tree):
        assert await child_count(db_session, acc) == 4
        assert await child_count(db_session, acc, direct=True) == 1


class TestCountsAgreeWithListings:
    async def test_every_node(self, db_session, acc, menu):
        for name, node in menu.items():
            descendants = await get_children(db_session, acc, node)
            direct = await get_children(db_session, acc, node, direct=True)

            assert await child_count(db_session, acc, node) == len(descendants), name
            assert len(descendants) == (node.rgt - node.lft - 1) // 2, name
            assert await child_count(db_session, acc, node, direct=True) == len(direct), name

    async def test_whole_tree(self, db_session, acc, menu):
        assert await child_count(db_session, acc) == len(await get_children(db_session, acc)) == 6
        roots = await get_children(db_session, acc, direct=True)
        assert await child_count(db_session, acc, direct=True) == len(roots) == 1
