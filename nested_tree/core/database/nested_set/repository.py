"""Repository facade for nested-set models.

``NestedSetRepository`` binds the tree algorithms to one model class and
its resolved ``NodeAccessor``. Every method takes the session explicitly,
like ``BaseRepository``.

Example:
    from nested_tree.core.database import NestedSetRepository

    repo = NestedSetRepository(Category)
    root = await repo.insert_node(session, Category(name="Root"))
    child = await repo.insert_node(session, Category(name="Child"), parent=root)

    await repo.move_up(session, child)
    path = await repo.get_path(session, child)  # [root, child]
    assert await repo.verify(session) is True
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import select

from nested_tree.core.database.nested_set import mover, queries, recoverer, remover, reparent, verifier
from nested_tree.core.database.nested_set.config import get_accessor
from nested_tree.core.database.repository import BaseRepository
from nested_tree.infra.logging import log_operation

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from nested_tree.core.database.nested_set.config import NodeAccessor
    from nested_tree.core.database.nested_set.mover import MoveCount


T = TypeVar("T")


class NestedSetRepository(BaseRepository[T]):
    """Tree operations for one nested-set model.

    Reads:
        - get, get_or_raise
        - get_path, get_children, child_count
        - get_parent, get_roots, get_siblings

    Mutations (each one transaction, committed by the outermost guard):
        - insert_node, set_parent, adjust_node_with_parent
        - move_down, move_up, reorder
        - remove_from_tree
        - recover

    Checks:
        - verify
    """

    __slots__ = ("accessor",)

    def __init__(self, model: type[T]) -> None:
        super().__init__(model)
        self.accessor: NodeAccessor = get_accessor(model)

    # Reads

    async def get_path(self, session: AsyncSession, node: T) -> list[T]:
        """Ancestors of ``node`` from the root down, including the node."""
        path = await queries.get_path(session, self.accessor, node)
        self._lazy.debug(lambda: f"tree.path: {self.model.__name__} -> {len(path)} nodes")
        return path

    async def get_children(
        self,
        session: AsyncSession,
        node: T | None = None,
        *,
        direct: bool = False,
        sort_field: str | None = None,
        direction: str = "asc",
    ) -> Sequence[T]:
        """Descendants (or direct children) of ``node``; the whole tree or roots for None."""
        return await queries.get_children(
            session, self.accessor, node, direct=direct, sort_field=sort_field, direction=direction
        )

    async def child_count(self, session: AsyncSession, node: T | None = None, *, direct: bool = False) -> int:
        return await queries.child_count(session, self.accessor, node, direct=direct)

    async def get_parent(self, session: AsyncSession, node: T) -> T | None:
        """Load the node's parent, or None for a root."""
        return await self.get(session, self.accessor.parent_id_of(node))

    async def get_roots(self, session: AsyncSession) -> Sequence[T]:
        return await self.get_children(session, None, direct=True)

    async def get_siblings(self, session: AsyncSession, node: T, *, include_self: bool = False) -> Sequence[T]:
        """Nodes sharing ``node``'s parent, in tree order."""
        acc = self.accessor
        parent_id = acc.parent_id_of(node)
        stmt = select(self.model)
        stmt = stmt.where(acc.parent.is_(None)) if parent_id is None else stmt.where(acc.parent == parent_id)
        if not include_self:
            stmt = stmt.where(acc.id != acc.id_of(node))
        return await queries.fetch_nodes(session, stmt.order_by(acc.left.asc()))

    # Mutations

    @log_operation("tree.insert")
    async def insert_node(self, session: AsyncSession, node: T, parent: T | None = None) -> T:
        """Persist a new node as the last child of ``parent`` (or a new root)."""
        return await reparent.insert_node(session, self.accessor, node, parent)

    @log_operation("tree.reparent")
    async def set_parent(self, session: AsyncSession, node: T, parent: T | None) -> bool:
        """Move ``node`` with its subtree under ``parent`` (root when None)."""
        return await reparent.set_parent(session, self.accessor, node, parent)

    async def adjust_node_with_parent(self, session: AsyncSession, parent: T | None, node: T) -> None:
        """Low-level relocation to match ``parent``; callers own the transaction.

        The parent reference itself is not changed. Prefer ``set_parent``.
        """
        await reparent.adjust_node_with_parent(session, self.accessor, parent, node)

    @log_operation("tree.move")
    async def move_down(self, session: AsyncSession, node: T, count: MoveCount = 1) -> bool:
        return await mover.move_down(session, self.accessor, node, count)

    @log_operation("tree.move")
    async def move_up(self, session: AsyncSession, node: T, count: MoveCount = 1) -> bool:
        return await mover.move_up(session, self.accessor, node, count)

    @log_operation("tree.reorder", log_args=True)
    async def reorder(
        self,
        session: AsyncSession,
        node: T | None = None,
        sort_field: str | None = None,
        direction: str = "asc",
        *,
        verify: bool = True,
    ) -> bool:
        """Sort every sibling run under ``node`` (whole tree when None)."""
        return await mover.reorder(session, self.accessor, node, sort_field, direction, verify=verify)

    @log_operation("tree.remove")
    async def remove_from_tree(self, session: AsyncSession, node: T) -> None:
        """Delete ``node``; its children take its place."""
        await remover.remove_from_tree(session, self.accessor, node)

    @log_operation("tree.recover")
    async def recover(self, session: AsyncSession) -> bool:
        """Rebuild all bounds from parent references if the tree is invalid."""
        return await recoverer.recover_tree(session, self.accessor)

    # Checks

    async def verify(self, session: AsyncSession) -> bool | list[str]:
        """``True`` for a valid tree, otherwise a list of diagnostics."""
        return await verifier.verify_tree(session, self.accessor)


__all__ = [
    "NestedSetRepository",
]
