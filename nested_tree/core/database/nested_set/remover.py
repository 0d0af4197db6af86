"""Removing a node while keeping its descendants in the tree."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import update

from nested_tree.core.database.nested_set.sync import above, between, shift_bounds
from nested_tree.core.database.nested_set.transaction import tree_transaction

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from nested_tree.core.database.nested_set.config import NodeAccessor

logger = logging.getLogger(__name__)


async def remove_from_tree(session: AsyncSession, acc: NodeAccessor, node: Any) -> None:
    """Delete ``node``, promoting its children to its former parent.

    - Unattached node: deleted, nothing else changes.
    - Leaf: deleted and the two indexes it used are closed.
    - Otherwise: descendants move up one level (bounds ``-1``), everything
      to the right closes the gap (bounds ``-2``), direct children are
      reparented to the node's parent (root when it had none), and the
      detached node is deleted.

    All shifts and the delete happen in one transaction.
    """
    await session.refresh(node)
    node_id = acc.id_of(node)

    if not acc.is_attached(node):
        async with tree_transaction(session):
            await session.delete(node)
            await session.flush()
        return

    left, right = acc.bounds(node)
    async with tree_transaction(session):
        if right == left + 1:
            await session.delete(node)
            await session.flush()
            await shift_bounds(session, acc, -2, above(right))
        else:
            await session.execute(
                update(acc.model)
                .where(acc.parent == node_id)
                .values({acc.parent.key: acc.parent_id_of(node)})
                .execution_options(synchronize_session=False)
            )
            await shift_bounds(session, acc, -1, between(left + 1, right - 1))
            await shift_bounds(session, acc, -2, above(right))
            await session.execute(
                update(acc.model)
                .where(acc.id == node_id)
                .values({acc.parent.key: None, acc.left.key: 0, acc.right.key: 0})
                .execution_options(synchronize_session=False)
            )
            await session.refresh(node)
            await session.delete(node)
            await session.flush()

    logger.info(
        "Node removed from tree",
        extra={"model": acc.model_name, "id": node_id, "bounds": [left, right]},
    )


__all__ = [
    "remove_from_tree",
]
