"""Attaching and reparenting nodes.

``adjust_node_with_parent`` folds a node into the position its parent
reference calls for: the new rightmost root when there is no parent,
otherwise the parent's last child. It is the single routine behind first
attachment (``insert_node``), explicit reparenting (``set_parent``) and
full recovery (``recover_tree``).

A node that already holds bounds is moved with the same staging pattern
as a sibling swap: its subtree is shifted past the edge, the gap it leaves
and the room it needs are closed/opened by one bulk shift of the region
between its old position and the parent's right bound, and the staged
subtree is then landed just before the parent's (shifted) right bound.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select, update

from nested_tree.core.database.exceptions import InvalidTreeOperationError, TreeIntegrityError
from nested_tree.core.database.nested_set.sync import above, at_least, between, get_tree_edge, shift_bounds
from nested_tree.core.database.nested_set.transaction import tree_transaction

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from nested_tree.core.database.nested_set.config import NodeAccessor

logger = logging.getLogger(__name__)


async def assign_bounds(session: AsyncSession, acc: NodeAccessor, node: Any, left: int, right: int) -> None:
    """Write literal bounds for one node by identifier."""
    stmt = (
        update(acc.model)
        .where(acc.id == acc.id_of(node))
        .values({acc.left.key: left, acc.right.key: right})
        .execution_options(synchronize_session=False)
    )
    await session.execute(stmt)


async def _is_direct_child_position(
    session: AsyncSession,
    acc: NodeAccessor,
    parent_left: int,
    left: int,
    right: int,
) -> bool:
    """True when no node nested inside the parent also encloses the node."""
    stmt = select(func.count(acc.id)).where(
        acc.left > parent_left,
        acc.left < left,
        acc.right > right,
    )
    return not (await session.execute(stmt)).scalar_one()


async def _attach_as_root(session: AsyncSession, acc: NodeAccessor, node: Any, edge: int) -> None:
    if not acc.is_attached(node):
        await assign_bounds(session, acc, node, edge + 1, edge + 2)
        return
    left, right = acc.bounds(node)
    await shift_bounds(session, acc, edge - left + 1, between(left, right))
    await shift_bounds(session, acc, -(right - left + 1), above(left))


async def adjust_node_with_parent(
    session: AsyncSession,
    acc: NodeAccessor,
    parent: Any | None,
    node: Any,
) -> None:
    """Relocate ``node``'s interval to match ``parent``.

    Must run inside a tree transaction. Both nodes are refreshed before any
    shift is computed.

    Cases:
        - ``parent`` is None: the node becomes the rightmost root.
        - node has no bounds: two slots are opened at the parent's right
          bound and the node takes them.
        - node already sits directly under the parent: nothing to do.
        - node encloses the parent: refused (no-op), since the parent
          cannot be moved under its own descendant.
        - otherwise the subtree is staged past the edge and landed as the
          parent's last child; the intervening shift depends on whether the
          node lay inside the parent, after it, or before it.

    Raises:
        InvalidTreeOperationError: ``parent`` is ``node`` itself
        TreeIntegrityError: ``parent`` has no bounds
    """
    await session.refresh(node)
    edge = await get_tree_edge(session, acc)

    if parent is None:
        await _attach_as_root(session, acc, node, edge)
        await session.refresh(node)
        return

    if acc.id_of(parent) == acc.id_of(node):
        raise InvalidTreeOperationError(
            "A node cannot be its own parent", {"model": acc.model_name, "id": acc.id_of(node)}
        )

    await session.refresh(parent)
    if not acc.is_attached(parent):
        raise TreeIntegrityError(
            "Parent node is not attached to the tree",
            {"model": acc.model_name, "parent_id": acc.id_of(parent)},
        )
    parent_left, parent_right = acc.bounds(parent)

    if not acc.is_attached(node):
        await shift_bounds(session, acc, 2, at_least(parent_right))
        await assign_bounds(session, acc, node, parent_right, parent_right + 1)
        await session.refresh(node)
        return

    left, right = acc.bounds(node)
    if left < parent_left and parent_right < right:
        logger.warning(
            "Refusing to nest a node under its own descendant",
            extra={"model": acc.model_name, "id": acc.id_of(node), "parent_id": acc.id_of(parent)},
        )
        return

    inside_parent = parent_left < left and right < parent_right
    if inside_parent and await _is_direct_child_position(session, acc, parent_left, left, right):
        return

    diff = right - left + 1
    await shift_bounds(session, acc, edge - left + 1, between(left, right))

    if left > parent_left and right >= parent_right:
        # Node lies after the parent's right bound: open room, land at parent_right
        await shift_bounds(session, acc, diff, between(parent_right, right))
        await shift_bounds(session, acc, -(edge - parent_right + 1), above(edge))
    else:
        # Node lies before the parent's right bound (nested deeper or to its left)
        await shift_bounds(session, acc, -diff, between(right, parent_right - 1))
        await shift_bounds(session, acc, -(edge - parent_right + diff + 1), above(edge))

    await session.refresh(node)


async def insert_node(
    session: AsyncSession,
    acc: NodeAccessor,
    node: Any,
    parent: Any | None = None,
) -> Any:
    """Persist a new node and give it its first bounds.

    Args:
        session: Database session
        acc: Node accessor of the model
        node: New (unattached) node instance
        parent: Parent node, or None to add a new rightmost root

    Returns:
        The node, refreshed with its assigned bounds (the parent is refreshed too)

    Raises:
        InvalidTreeOperationError: The node already holds bounds
    """
    if acc.is_attached(node):
        raise InvalidTreeOperationError(
            "Node is already attached; use set_parent to move it",
            {"model": acc.model_name, "id": acc.id_of(node)},
        )

    acc.set_parent_id(node, acc.id_of(parent) if parent is not None else None)
    session.add(node)
    async with tree_transaction(session):
        await adjust_node_with_parent(session, acc, parent, node)

    await session.refresh(node)
    if parent is not None:
        await session.refresh(parent)
    return node


async def set_parent(
    session: AsyncSession,
    acc: NodeAccessor,
    node: Any,
    parent: Any | None,
) -> bool:
    """Reparent an attached node (with its subtree) under ``parent``.

    The node becomes the parent's last child, or the rightmost root when
    ``parent`` is None.

    Returns:
        True if the node moved, False if ``parent`` already was its parent

    Raises:
        TreeIntegrityError: The node is not attached
        InvalidTreeOperationError: ``parent`` is the node or one of its descendants
    """
    await session.refresh(node)
    if not acc.is_attached(node):
        raise TreeIntegrityError(
            "Cannot reparent a node that is not attached to the tree",
            {"model": acc.model_name, "id": acc.id_of(node)},
        )

    new_parent_id = None
    if parent is not None:
        await session.refresh(parent)
        new_parent_id = acc.id_of(parent)
        left, right = acc.bounds(node)
        parent_left, parent_right = acc.bounds(parent)
        if new_parent_id == acc.id_of(node) or (
            parent_left is not None and left < parent_left and parent_right < right
        ):
            raise InvalidTreeOperationError(
                "A node cannot be moved under itself or one of its descendants",
                {"model": acc.model_name, "id": acc.id_of(node), "parent_id": new_parent_id},
            )

    if new_parent_id == acc.parent_id_of(node):
        return False

    acc.set_parent_id(node, new_parent_id)
    async with tree_transaction(session):
        await adjust_node_with_parent(session, acc, parent, node)

    await session.refresh(node)
    if parent is not None:
        await session.refresh(parent)
    return True


__all__ = [
    "adjust_node_with_parent",
    "assign_bounds",
    "insert_node",
    "set_parent",
]
