"""Mixin for models stored as a nested set.

Adds the ``lft``/``rgt`` bound columns and a nullable ``parent_id``
self-reference, plus a few properties that answer structural questions
from the loaded bounds alone. Anything that needs other rows goes through
``NestedSetRepository``.
"""

from __future__ import annotations

from typing import ClassVar

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from nested_tree.core.database.nested_set.config import DEFAULT_CONFIG, NestedSetConfig, get_accessor


class NestedSetMixin:
    """Mixin for models with nested-set bounds and a parent reference.

    The model must also have an integer primary key named ``id`` (for
    instance via ``IntegerPKMixin``), which the parent foreign key points at.

    Bounds are never assigned by application code. They are produced by
    ``NestedSetRepository.insert_node``/``set_parent`` and maintained by
    the move, remove and recover operations.

    Example:
        >>> class Category(Base, IntegerPKMixin, NestedSetMixin):
        ...     __tablename__ = "categories"
        ...     name: Mapped[str] = mapped_column(String(255))
        >>>
        >>> repo = NestedSetRepository(Category)
        >>> root = await repo.insert_node(session, Category(name="Root"))
        >>> child = await repo.insert_node(session, Category(name="Child"), parent=root)
        >>> child.is_leaf
        True

    Note:
        - Models with differently named columns declare their own columns
          and set ``__nested_set__ = NestedSetConfig(...)`` instead of
          inheriting this mixin.
        - The parent is referenced by identifier only; there is no ORM
          relationship, so nothing is lazy-loaded behind the algorithms.
    """

    __allow_unmapped__ = True

    __nested_set__: ClassVar[NestedSetConfig] = DEFAULT_CONFIG

    lft: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
        default=None,
        comment="Nested-set left bound",
    )
    rgt: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
        default=None,
        comment="Nested-set right bound",
    )

    @declared_attr
    def parent_id(cls) -> Mapped[int | None]:
        return mapped_column(
            ForeignKey(f"{cls.__tablename__}.id"),
            nullable=True,
            index=True,
            comment="Identifier of the parent node",
        )

    @property
    def is_attached(self) -> bool:
        """Whether the node has been placed in the tree.

        This property does NOT query the database.
        """
        return get_accessor(type(self)).is_attached(self)

    @property
    def is_leaf(self) -> bool:
        """Whether the node has no descendants (``right == left + 1``).

        This property does NOT query the database.
        """
        acc = get_accessor(type(self))
        left, right = acc.bounds(self)
        return acc.is_attached(self) and right == left + 1

    @property
    def is_root(self) -> bool:
        """Whether the node has no parent reference.

        This property does NOT query the database.
        """
        return get_accessor(type(self)).parent_id_of(self) is None

    @property
    def descendant_count(self) -> int:
        """Number of descendants, ``(right - left - 1) / 2``.

        This property does NOT query the database; refresh the instance
        first if other operations may have moved it.
        """
        acc = get_accessor(type(self))
        if not acc.is_attached(self):
            return 0
        left, right = acc.bounds(self)
        return (right - left - 1) // 2


__all__ = [
    "NestedSetMixin",
]
