"""Minimal generic repository for SQLAlchemy models.

Primary-key lookups with explicit session passing. Row writes are left to
subclasses: ``NestedSetRepository`` only adds and deletes nodes through
its tree operations, so bounds are always maintained.

Example:
    from nested_tree.core.database import NestedSetRepository

    repo = NestedSetRepository(Category)
    node = await repo.get_or_raise(session, 3)
    await repo.move_up(session, node)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from nested_tree.core.database.exceptions import NotFoundError
from nested_tree.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Generic read-only repository.

    Provides:
        - get(session, id) -> T | None
        - get_or_raise(session, id) -> T (raises NotFoundError)
    """

    __slots__ = ("model", "_logger", "_lazy")

    def __init__(self, model: type[T]) -> None:
        self.model = model
        # Standard logger for INFO/WARNING/ERROR
        self._logger = logging.getLogger(f"repository.{model.__name__}")
        # Lazy logger for DEBUG
        self._lazy = get_lazy_logger(f"repository.{model.__name__}")

    async def get(self, session: AsyncSession, id: Any) -> T | None:  # noqa: A002
        """Get entity by primary key, overwriting any identity-map copy.

        Args:
            session: Database session
            id: Primary key value

        Returns:
            Entity if found, None otherwise
        """
        if id is None:
            return None
        instance = await session.get(self.model, id, populate_existing=True)

        self._lazy.debug(
            lambda: f"db.get: {self.model.__name__}({id}) -> {'found' if instance else 'not found'}"
        )
        return instance

    async def get_or_raise(self, session: AsyncSession, id: Any) -> T:  # noqa: A002
        """Get entity by primary key or raise NotFoundError."""
        instance = await self.get(session, id)
        if instance is None:
            self._logger.info(
                "Entity not found",
                extra={"entity": self.model.__name__, "id": str(id), "operation": "db.get_or_raise"},
            )
            raise NotFoundError(self.model.__name__, {"id": id})
        return instance


__all__ = [
    "BaseRepository",
]
