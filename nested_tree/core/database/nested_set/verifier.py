"""Structural verification of a nested-set tree.

``verify_tree`` never raises for structural problems; it reports them as
a list of human-readable diagnostics (or ``True`` when there are none).
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.orm import aliased

from nested_tree.core.database.nested_set.queries import child_count, fetch_nodes

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from nested_tree.core.database.nested_set.config import NodeAccessor

logger = logging.getLogger(__name__)


async def _index_errors(session: AsyncSession, acc: NodeAccessor) -> list[str]:
    """Every value from the minimum left to the edge must occur exactly once."""
    rows = (await session.execute(select(acc.left, acc.right))).all()
    occurrences: Counter[int] = Counter()
    for left, right in rows:
        occurrences.update(v for v in (left, right) if v is not None)

    low = (await session.execute(select(func.min(acc.left)))).scalar_one_or_none()
    edge = (await session.execute(select(func.max(acc.right)))).scalar_one_or_none()
    if low is None or edge is None:
        return []

    errors = []
    for i in range(int(low), int(edge) + 1):
        count = occurrences[i]
        if count == 0:
            errors.append(f"index [{i}], missing")
        elif count > 1:
            errors.append(f"index [{i}], duplicate")
    return errors


async def _orphan_errors(session: AsyncSession, acc: NodeAccessor) -> list[str]:
    """Nodes whose parent reference points at a row that does not exist."""
    parent = aliased(acc.model)
    parent_id = getattr(parent, acc.config.id_field)
    stmt = (
        select(acc.id)
        .outerjoin(parent, acc.parent == parent_id)
        .where(acc.parent.is_not(None), parent_id.is_(None))
        .order_by(acc.id)
    )
    orphan_ids = (await session.execute(stmt)).scalars().all()
    return [f"node [{node_id}] has missing parent" for node_id in orphan_ids]


async def _inverted_errors(session: AsyncSession, acc: NodeAccessor) -> list[str]:
    stmt = select(acc.id).where(acc.right < acc.left).order_by(acc.id)
    inverted = (await session.execute(stmt)).scalars().all()
    return [f"node [{node_id}], left is greater than right" for node_id in inverted]


async def _has_enclosing_node(session: AsyncSession, acc: NodeAccessor, left: int, right: int) -> bool:
    stmt = select(func.count(acc.id)).where(acc.left < left, acc.right > right)
    return bool((await session.execute(stmt)).scalar_one())


async def _node_errors(session: AsyncSession, acc: NodeAccessor) -> list[str]:
    nodes = await fetch_nodes(session, select(acc.model).order_by(acc.id))
    by_id = {acc.id_of(n): n for n in nodes}

    errors = []
    for node in nodes:
        node_id = acc.id_of(node)
        left, right = acc.bounds(node)
        parent_id = acc.parent_id_of(node)

        if not left or not right:
            errors.append(f"node [{node_id}] has invalid left or right values")
            continue
        if left == right:
            errors.append(f"node [{node_id}] has identical left and right values")
            continue
        if (right - left) % 2 == 0:
            errors.append(f"node [{node_id}] spans an even number of indexes")

        if parent_id is not None:
            parent_left, parent_right = acc.bounds(by_id[parent_id])
            if parent_left and left < parent_left:
                errors.append(
                    f"node [{node_id}] left is less than parent's [{parent_id}] left value"
                )
            if parent_right and right > parent_right:
                errors.append(
                    f"node [{node_id}] right is greater than parent's [{parent_id}] right value"
                )
        elif await _has_enclosing_node(session, acc, left, right):
            errors.append(f"node [{node_id}] parent field is blank, but it has a parent")
    return errors


async def verify_tree(session: AsyncSession, acc: NodeAccessor) -> bool | list[str]:
    """Check the structural invariants of the whole tree.

    Checks, accumulated in this order:

    1. every index from the minimum left to the edge is used exactly once;
    2. no parent reference is dangling (reported and returned immediately,
       since the remaining checks resolve parents);
    3. no node has ``right < left``;
    4. per node: bounds are set, distinct and span an odd width; a parent
       encloses its child; a parentless node is not enclosed by any node.

    Returns:
        ``True`` for a valid (or empty) tree, otherwise the diagnostics
    """
    if not await child_count(session, acc):
        return True

    errors = await _index_errors(session, acc)

    orphans = await _orphan_errors(session, acc)
    if orphans:
        errors.extend(orphans)
        logger.warning(
            "Tree has dangling parent references",
            extra={"model": acc.model_name, "errors": len(errors)},
        )
        return errors

    errors.extend(await _inverted_errors(session, acc))
    errors.extend(await _node_errors(session, acc))

    if errors:
        logger.warning(
            "Tree verification failed",
            extra={"model": acc.model_name, "errors": len(errors)},
        )
        return errors
    return True


__all__ = [
    "verify_tree",
]
