"""Read-only tree queries: ancestor paths, child listings and counts.

Every SELECT here uses ``populate_existing`` so that rows already present
in the session's identity map are overwritten with the persisted bounds.
Earlier shifts in the same call chain are bulk UPDATEs that do not touch
in-memory objects, so a cached copy would be stale.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import asc, desc, func, select

from nested_tree.core.database.exceptions import InvalidSortError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from nested_tree.core.database.nested_set.config import NodeAccessor

SORT_DIRECTIONS = {"asc": asc, "desc": desc}


async def fetch_nodes(session: AsyncSession, stmt: Select[Any]) -> list[Any]:
    """Execute ``stmt`` bypassing cached identity-map state."""
    result = await session.execute(stmt.execution_options(populate_existing=True))
    return list(result.scalars().all())


async def fetch_node(session: AsyncSession, acc: NodeAccessor, node_id: Any) -> Any | None:
    """Load one node by identifier with fresh bounds."""
    if node_id is None:
        return None
    return await session.get(acc.model, node_id, populate_existing=True)


async def get_path(session: AsyncSession, acc: NodeAccessor, node: Any) -> list[Any]:
    """Return the root-to-node chain, including ``node``, ascending by left.

    Selects every node whose interval contains or equals the node's own.
    Returns an empty list when the node is not attached.
    """
    if not acc.is_attached(node):
        return []
    left, right = acc.bounds(node)
    stmt = (
        select(acc.model)
        .where(acc.left <= left, acc.right >= right)
        .order_by(acc.left.asc())
    )
    return await fetch_nodes(session, stmt)


def order_clause(acc: NodeAccessor, sort_field: str | None, direction: str | None) -> Any:
    """Build the ORDER BY for a child listing.

    Defaults to ascending left bound (preorder).

    Raises:
        InvalidSortError: Unknown column or direction other than asc/desc
    """
    if not sort_field:
        return acc.left.asc()
    order = SORT_DIRECTIONS.get((direction or "").lower())
    if sort_field not in acc.sortable or order is None:
        raise InvalidSortError(sort_field, direction)
    return order(getattr(acc.model, sort_field))


async def get_children(
    session: AsyncSession,
    acc: NodeAccessor,
    node: Any | None = None,
    *,
    direct: bool = False,
    sort_field: str | None = None,
    direction: str = "asc",
) -> Sequence[Any]:
    """List children of ``node``, or of the whole tree when ``node`` is None.

    Args:
        session: Database session
        acc: Node accessor of the model
        node: Parent node, or None for the whole tree
        direct: Only immediate children (or only roots when ``node`` is None)
        sort_field: Column to order by instead of the left bound
        direction: "asc" or "desc" (case-insensitive)

    Returns:
        Matching nodes in the requested order

    Raises:
        InvalidSortError: If ``sort_field``/``direction`` are not valid
    """
    order = order_clause(acc, sort_field, direction)
    stmt = select(acc.model)

    if node is None:
        if direct:
            stmt = stmt.where(acc.parent.is_(None))
    elif direct:
        stmt = stmt.where(acc.parent == acc.id_of(node))
    else:
        if not acc.is_attached(node):
            return []
        left, right = acc.bounds(node)
        stmt = stmt.where(acc.left > left, acc.right < right)

    return await fetch_nodes(session, stmt.order_by(order))


async def child_count(
    session: AsyncSession,
    acc: NodeAccessor,
    node: Any | None = None,
    *,
    direct: bool = False,
) -> int:
    """Count children of ``node``, or nodes in the whole tree.

    For all descendants of a given node the count comes straight from the
    bounds, ``(right - left - 1) / 2``, without a query.
    """
    if node is not None and not direct:
        if not acc.is_attached(node):
            return 0
        left, right = acc.bounds(node)
        return (right - left - 1) // 2

    stmt = select(func.count(acc.id))
    if node is None:
        if direct:
            stmt = stmt.where(acc.parent.is_(None))
    else:
        stmt = stmt.where(acc.parent == acc.id_of(node))
    return int((await session.execute(stmt)).scalar_one())


__all__ = [
    "SORT_DIRECTIONS",
    "child_count",
    "fetch_node",
    "fetch_nodes",
    "get_children",
    "get_path",
    "order_clause",
]
