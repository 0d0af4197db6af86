"""Tests for sibling moves and reordering."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from nested_tree.core.database import InvalidSortError, InvalidTreeOperationError, TreeIntegrityError
from nested_tree.core.database.nested_set import sync
from nested_tree.core.database.nested_set.mover import move_down, move_up, next_sibling, previous_sibling, reorder
from nested_tree.core.database.nested_set.verifier import verify_tree
from tests.fixtures.tree import Category, corrupt, fail_after, snapshot

INITIAL = {"A": (1, 8), "B": (2, 3), "C": (4, 7), "D": (5, 6)}


class TestSiblings:
    async def test_next_and_previous(self, db_session, acc, tree):
        assert (await next_sibling(db_session, acc, tree["B"])).name == "C"
        assert (await previous_sibling(db_session, acc, tree["C"])).name == "B"

    async def test_parent_boundary_stops_search(self, db_session, acc, tree):
        assert await next_sibling(db_session, acc, tree["C"]) is None
        assert await next_sibling(db_session, acc, tree["D"]) is None
        assert await previous_sibling(db_session, acc, tree["B"]) is None
        assert await previous_sibling(db_session, acc, tree["D"]) is None

    async def test_roots_are_siblings(self, db_session, acc, roots):
        assert (await next_sibling(db_session, acc, roots["R1"])).name == "R2"
        assert await next_sibling(db_session, acc, roots["R3"]) is None


class TestMoveDownUp:
    async def test_move_down_swaps_subtrees(self, db_session, acc, tree):
        assert await move_down(db_session, acc, tree["B"]) is True

        assert await snapshot(db_session) == {"A": (1, 8), "B": (6, 7), "C": (2, 5), "D": (3, 4)}
        assert (tree["B"].lft, tree["B"].rgt) == (6, 7)
        assert await verify_tree(db_session, acc) is True

    async def test_move_up_restores(self, db_session, acc, tree):
        await move_down(db_session, acc, tree["B"])

        assert await move_up(db_session, acc, tree["B"]) is True
        assert await snapshot(db_session) == INITIAL

    async def test_last_sibling_cannot_move_down(self, db_session, acc, tree):
        assert await move_down(db_session, acc, tree["C"]) is False
        assert await move_down(db_session, acc, tree["D"]) is False
        assert await snapshot(db_session) == INITIAL

    async def test_first_sibling_cannot_move_up(self, db_session, acc, tree):
        assert await move_up(db_session, acc, tree["B"]) is False
        assert await snapshot(db_session) == INITIAL

    @pytest.mark.parametrize("count", [0, False])
    async def test_zero_count_is_noop(self, db_session, acc, tree, count):
        assert await move_down(db_session, acc, tree["B"], count) is False
        assert await snapshot(db_session) == INITIAL

    async def test_negative_count_rejected(self, db_session, acc, tree):
        with pytest.raises(InvalidTreeOperationError):
            await move_down(db_session, acc, tree["B"], -1)

    async def test_unattached_node_rejected(self, db_session, acc, tree):
        loose = Category(name="loose")
        db_session.add(loose)
        await db_session.flush()

        with pytest.raises(TreeIntegrityError):
            await move_up(db_session, acc, loose)

    async def test_move_by_count(self, db_session, acc, roots):
        assert await move_down(db_session, acc, roots["R1"], 1) is True

        assert await snapshot(db_session) == {"R1": (3, 4), "R2": (1, 2), "R3": (5, 6)}

    async def test_count_larger_than_run_stops_at_end(self, db_session, acc, roots):
        assert await move_down(db_session, acc, roots["R1"], 5) is True

        assert await snapshot(db_session) == {"R1": (5, 6), "R2": (1, 2), "R3": (3, 4)}

    async def test_move_to_first_position(self, db_session, acc, roots):
        assert await move_up(db_session, acc, roots["R3"], True) is True

        assert await snapshot(db_session) == {"R1": (3, 4), "R2": (5, 6), "R3": (1, 2)}

    async def test_commits(self, db_session, acc, tree):
        await move_down(db_session, acc, tree["B"])
        await db_session.rollback()

        assert (await snapshot(db_session))["B"] == (6, 7)


class TestReorder:
    async def test_whole_tree_ascending(self, db_session, acc, menu):
        assert await reorder(db_session, acc, None, "name", "asc") is True

        assert await snapshot(db_session) == {
            "root": (1, 12),
            "alpha": (2, 7),
            "xray": (3, 4),
            "yankee": (5, 6),
            "bravo": (8, 9),
            "charlie": (10, 11),
        }
        assert await verify_tree(db_session, acc) is True

    async def test_whole_tree_descending(self, db_session, acc, menu):
        assert await reorder(db_session, acc, None, "name", "desc") is True

        assert await snapshot(db_session) == {
            "root": (1, 12),
            "charlie": (2, 3),
            "bravo": (4, 5),
            "alpha": (6, 11),
            "yankee": (7, 8),
            "xray": (9, 10),
        }

    async def test_subtree_only(self, db_session, acc, menu):
        assert await reorder(db_session, acc, menu["alpha"], "name", "asc") is True

        bounds = await snapshot(db_session)
        assert bounds["xray"] == (5, 6)
        assert bounds["yankee"] == (7, 8)
        assert bounds["charlie"] == (2, 3)
        assert bounds["bravo"] == (10, 11)

    async def test_invalid_tree_is_left_alone(self, db_session, acc, menu):
        await corrupt(db_session, 2, rgt=4)
        before = await snapshot(db_session)

        assert await reorder(db_session, acc, None, "name") is False
        assert await snapshot(db_session) == before

    async def test_invalid_sort_raises_before_any_change(self, db_session, acc, menu):
        with pytest.raises(InvalidSortError):
            await reorder(db_session, acc, None, "colour")

        assert (await snapshot(db_session))["charlie"] == (2, 3)


class TestStorageFailure:
    async def test_failed_swap_leaves_bounds_unchanged(self, db_session, acc, tree):
        # The subtree is staged past the edge, then the second shift fails
        failing = fail_after(sync.shift_bounds, 1)

        with patch("nested_tree.core.database.nested_set.mover.shift_bounds", failing), pytest.raises(OperationalError):
            await move_down(db_session, acc, tree["B"])

        assert await snapshot(db_session) == INITIAL
        assert await verify_tree(db_session, acc) is True
