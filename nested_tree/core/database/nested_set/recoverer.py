"""Rebuild bounds from parent references.

When the verifier reports problems, the parent column is treated as the
source of truth. Every node is first laid out flat as a root, in its
current left-bound order, then folded under its parent one at a time.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from nested_tree.core.database.exceptions import TreeIntegrityError
from nested_tree.core.database.nested_set.queries import fetch_node
from nested_tree.core.database.nested_set.reparent import adjust_node_with_parent, assign_bounds
from nested_tree.core.database.nested_set.transaction import tree_transaction
from nested_tree.core.database.nested_set.verifier import verify_tree

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from nested_tree.core.database.nested_set.config import NodeAccessor

logger = logging.getLogger(__name__)


async def recover_tree(session: AsyncSession, acc: NodeAccessor) -> bool:
    """Recompute every bound so the tree is valid again.

    Does nothing when the tree already verifies. Otherwise, in a single
    transaction:

    1. all nodes, ordered by left bound (unset bounds last), are given
       consecutive flat bounds ``(1, 2), (3, 4), ...``;
    2. each node, in the same order, is moved under the parent its parent
       reference names (or made the rightmost root).

    Returns:
        True if the tree was rebuilt, False if it was already valid

    Raises:
        TreeIntegrityError: A parent reference names a missing row, the node
            itself, or closes a cycle; the transaction is rolled back
    """
    if await verify_tree(session, acc) is True:
        return False

    async with tree_transaction(session):
        stmt = select(acc.id).order_by(acc.left.asc().nulls_last(), acc.id.asc())
        node_ids = list((await session.execute(stmt)).scalars().all())

        for position, node_id in enumerate(node_ids):
            node = await fetch_node(session, acc, node_id)
            await assign_bounds(session, acc, node, 2 * position + 1, 2 * position + 2)

        for node_id in node_ids:
            node = await fetch_node(session, acc, node_id)
            parent_id = acc.parent_id_of(node)
            parent = await fetch_node(session, acc, parent_id)
            if parent_id is not None and parent is None:
                raise TreeIntegrityError(
                    "Cannot recover a node whose parent does not exist",
                    {"model": acc.model_name, "id": node_id, "parent_id": parent_id},
                )
            if parent_id == node_id:
                raise TreeIntegrityError(
                    "Cannot recover a node that is its own parent",
                    {"model": acc.model_name, "id": node_id},
                )
            await adjust_node_with_parent(session, acc, parent, node)

        # Parent cycles cannot be folded; the loop leaves them unresolved
        problems = await verify_tree(session, acc)
        if problems is not True:
            raise TreeIntegrityError(
                "Parent references form a cycle, the tree cannot be rebuilt",
                {"model": acc.model_name, "problems": problems},
            )

    logger.info("Tree recovered", extra={"model": acc.model_name, "nodes": len(node_ids)})
    return True


__all__ = [
    "recover_tree",
]
