"""Scoped transaction guard for tree mutations.

Every mutating tree operation runs inside ``tree_transaction``. Guards
nest: only the outermost one commits or rolls back, so a top-level call
such as ``reorder`` (which moves many nodes) or ``recover`` (which
reparents every node) is exactly one database transaction.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_DEPTH_KEY = "nested_tree.transaction_depth"


def transaction_depth(session: AsyncSession) -> int:
    """Number of tree transaction guards currently open on ``session``."""
    return session.info.get(_DEPTH_KEY, 0)


@asynccontextmanager
async def tree_transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a block of bulk shifts as one all-or-nothing unit.

    Pending ORM changes are flushed on entry so bulk UPDATE statements see
    them. On success the outermost guard commits. On any exception the
    outermost guard rolls back, closes the session (its identity map may
    hold bounds that no longer match the database) and re-raises.

    Args:
        session: Session the tree operation runs on

    Yields:
        The same session

    Example:
        async with tree_transaction(session):
            await shift_bounds(session, acc, 2, at_least(parent_right))
            ...
    """
    depth = transaction_depth(session)
    session.info[_DEPTH_KEY] = depth + 1
    try:
        await session.flush()
        yield session
        if depth == 0:
            await session.commit()
    except Exception:
        if depth == 0:
            logger.error("Tree transaction failed, rolling back", exc_info=True)
            await session.rollback()
            await session.close()
        raise
    finally:
        session.info[_DEPTH_KEY] = depth


__all__ = [
    "transaction_depth",
    "tree_transaction",
]
