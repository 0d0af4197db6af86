"""Sibling reordering: move a node up or down among its siblings.

Swapping two adjacent sibling subtrees cannot be done with two plain
subtractions, because the intermediate state would reuse bound values
that are still taken. Instead every swap runs three bulk shifts inside
one transaction:

1. stage the moving subtree past the current edge of the tree,
2. slide the neighbouring sibling subtree into the freed position,
3. land the staged subtree right after (or before) the neighbour.

Nothing is ever written into a value that another node still holds.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from nested_tree.core.database.exceptions import InvalidTreeOperationError, TreeIntegrityError
from nested_tree.core.database.nested_set.queries import fetch_node, fetch_nodes, get_children, order_clause
from nested_tree.core.database.nested_set.sync import above, between, get_tree_edge, shift_bounds
from nested_tree.core.database.nested_set.transaction import tree_transaction
from nested_tree.core.database.nested_set.verifier import verify_tree

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession

    from nested_tree.core.database.nested_set.config import NodeAccessor

logger = logging.getLogger(__name__)

# ``True`` as a move count means "as far as possible"
MoveCount = int | bool


async def next_sibling(session: AsyncSession, acc: NodeAccessor, node: Any) -> Any | None:
    """Return the sibling immediately after ``node``, or None if it is last."""
    right = acc.right_of(node)
    parent = await fetch_node(session, acc, acc.parent_id_of(node))
    if parent is not None and right + 1 == acc.right_of(parent):
        return None
    stmt = select(acc.model).where(acc.left == right + 1).limit(1)
    found = await fetch_nodes(session, stmt)
    return found[0] if found else None


async def previous_sibling(session: AsyncSession, acc: NodeAccessor, node: Any) -> Any | None:
    """Return the sibling immediately before ``node``, or None if it is first."""
    left = acc.left_of(node)
    parent = await fetch_node(session, acc, acc.parent_id_of(node))
    if parent is not None and left - 1 == acc.left_of(parent):
        return None
    stmt = select(acc.model).where(acc.right == left - 1).limit(1)
    found = await fetch_nodes(session, stmt)
    return found[0] if found else None


async def _swap_with_next(session: AsyncSession, acc: NodeAccessor, node: Any, sibling: Any) -> None:
    left, right = acc.bounds(node)
    next_left, next_right = acc.bounds(sibling)
    edge = await get_tree_edge(session, acc)

    await shift_bounds(session, acc, edge - left + 1, between(left, right))
    await shift_bounds(session, acc, -(next_left - left), between(next_left, next_right))
    await shift_bounds(session, acc, -(edge - left - (next_right - next_left)), above(edge))


async def _swap_with_previous(session: AsyncSession, acc: NodeAccessor, node: Any, sibling: Any) -> None:
    left, right = acc.bounds(node)
    prev_left, prev_right = acc.bounds(sibling)
    edge = await get_tree_edge(session, acc)

    await shift_bounds(session, acc, edge - prev_left + 1, between(prev_left, prev_right))
    await shift_bounds(session, acc, -(left - prev_left), between(left, right))
    await shift_bounds(session, acc, -(edge - prev_left - (right - left)), above(edge))


async def _move(
    session: AsyncSession,
    acc: NodeAccessor,
    node: Any,
    count: MoveCount,
    find_sibling: Callable[[AsyncSession, NodeAccessor, Any], Awaitable[Any | None]],
    swap: Callable[[AsyncSession, NodeAccessor, Any, Any], Awaitable[None]],
) -> bool:
    if count is False or count == 0:
        return False
    if count is not True and count < 0:
        raise InvalidTreeOperationError("Move count must not be negative", {"count": count})

    await session.refresh(node)
    if not acc.is_attached(node):
        raise TreeIntegrityError(
            "Cannot move a node that is not attached to the tree",
            {"model": acc.model_name, "id": acc.id_of(node)},
        )

    sibling = await find_sibling(session, acc, node)
    if sibling is None:
        return False

    remaining = count
    async with tree_transaction(session):
        while sibling is not None:
            await swap(session, acc, node, sibling)
            if remaining is not True:
                remaining -= 1
                if not remaining:
                    break
            await session.refresh(node)
            sibling = await find_sibling(session, acc, node)

    await session.refresh(node)
    return True


async def move_down(session: AsyncSession, acc: NodeAccessor, node: Any, count: MoveCount = 1) -> bool:
    """Move ``node`` down ``count`` positions among its siblings.

    Args:
        session: Database session
        acc: Node accessor of the model
        node: Node to move (refreshed before use)
        count: Number of positions, or ``True`` to move to the last position

    Returns:
        True if at least one swap happened, False for a no-op (zero count,
        already last, or no next sibling)

    Raises:
        InvalidTreeOperationError: Negative count
        TreeIntegrityError: The node is not attached
    """
    return await _move(session, acc, node, count, next_sibling, _swap_with_next)


async def move_up(session: AsyncSession, acc: NodeAccessor, node: Any, count: MoveCount = 1) -> bool:
    """Move ``node`` up ``count`` positions among its siblings.

    Mirror image of ``move_down``; ``True`` moves to the first position.
    """
    return await _move(session, acc, node, count, previous_sibling, _swap_with_previous)


async def reorder(
    session: AsyncSession,
    acc: NodeAccessor,
    node: Any | None = None,
    sort_field: str | None = None,
    direction: str = "asc",
    *,
    verify: bool = True,
) -> bool:
    """Re-sort the children of ``node`` (or the roots) and all their subtrees.

    Each child, taken in the desired order, is moved to the end of its
    sibling run; once all have moved the run is sorted. Children with
    descendants are queued and sorted the same way.

    Args:
        session: Database session
        acc: Node accessor of the model
        node: Node whose subtree is reordered, or None for the whole tree
        sort_field: Column to sort by (default: left bound)
        direction: "asc" or "desc"
        verify: Run the verifier first and give up if the tree is invalid

    Returns:
        True when reordered, False when verification failed

    Raises:
        InvalidSortError: Unknown sort column or direction
    """
    order_clause(acc, sort_field, direction)

    if verify:
        diagnostics = await verify_tree(session, acc)
        if diagnostics is not True:
            logger.warning(
                "Refusing to reorder an invalid tree",
                extra={"model": acc.model_name, "errors": len(diagnostics)},
            )
            return False

    async with tree_transaction(session):
        pending: deque[Any | None] = deque([node])
        while pending:
            parent = pending.popleft()
            children = await get_children(
                session, acc, parent, direct=True, sort_field=sort_field, direction=direction
            )
            for child in children:
                await session.refresh(child)
                left, right = acc.bounds(child)
                await move_down(session, acc, child, True)
                if left != right - 1:
                    pending.append(child)

    return True


__all__ = [
    "MoveCount",
    "move_down",
    "move_up",
    "next_sibling",
    "previous_sibling",
    "reorder",
]
