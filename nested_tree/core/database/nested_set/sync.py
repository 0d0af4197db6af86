"""Bulk bound arithmetic shared by every tree mutator.

``shift_bounds`` adds a constant to the left and/or right bound of every
row whose bound matches a range predicate. The predicate is evaluated per
field against that field's own value, which is what makes the staged
"move past the edge, then land" sequences work: a subtree can be selected
by ``between(left, right)`` on both fields independently.

``get_tree_edge`` reads the current maximum right bound.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import func, select, update

from nested_tree.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute
    from sqlalchemy.sql.elements import ColumnElement

    from nested_tree.core.database.nested_set.config import NodeAccessor

_lazy = get_lazy_logger(__name__)

BoundField = Literal["both", "left", "right"]


class BoundPredicate:
    """A range condition applied to a single bound column."""

    __slots__ = ("_build", "description")

    def __init__(self, build: Callable[[InstrumentedAttribute[Any]], ColumnElement[bool]], description: str):
        self._build = build
        self.description = description

    def __call__(self, column: InstrumentedAttribute[Any]) -> ColumnElement[bool]:
        return self._build(column)

    def __repr__(self) -> str:
        return f"BoundPredicate({self.description})"


def between(low: int, high: int) -> BoundPredicate:
    """Bound value in the closed range ``[low, high]``."""
    return BoundPredicate(lambda col: col.between(low, high), f"BETWEEN {low} AND {high}")


def above(value: int) -> BoundPredicate:
    """Bound value strictly greater than ``value``."""
    return BoundPredicate(lambda col: col > value, f"> {value}")


def at_least(value: int) -> BoundPredicate:
    """Bound value greater than or equal to ``value``."""
    return BoundPredicate(lambda col: col >= value, f">= {value}")


async def shift_bounds(
    session: AsyncSession,
    acc: NodeAccessor,
    delta: int,
    where: BoundPredicate,
    *,
    field: BoundField = "both",
) -> int:
    """Add ``delta`` to bound values matching ``where``.

    With ``field="both"`` the left column is shifted first, then the right
    column, each selected by its own value.

    Args:
        session: Database session (inside a tree transaction)
        acc: Node accessor of the model
        delta: Signed amount to add
        where: Range predicate evaluated against each shifted column
        field: Which bound(s) to shift

    Returns:
        Total number of column updates (rows touched, summed per field)
    """
    columns = {
        "both": (acc.left, acc.right),
        "left": (acc.left,),
        "right": (acc.right,),
    }[field]

    affected = 0
    for column in columns:
        stmt = (
            update(acc.model)
            .where(where(column))
            .values({column.key: column + delta})
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        affected += result.rowcount or 0

    _lazy.debug(
        lambda: f"shift {acc.model_name}.{field} {delta:+d} where {where.description} -> {affected} updated"
    )
    return affected


async def get_tree_edge(session: AsyncSession, acc: NodeAccessor) -> int:
    """Return the maximum right bound across the tree (0 when empty)."""
    stmt = select(func.max(acc.right))
    edge = (await session.execute(stmt)).scalar_one_or_none()
    return int(edge or 0)


__all__ = [
    "BoundField",
    "BoundPredicate",
    "above",
    "at_least",
    "between",
    "get_tree_edge",
    "shift_bounds",
]
