"""Core database package: declarative base, mixins and repositories.

Base Classes and Mixins:
    - Base: Declarative base with naming convention and auto table naming
    - IntegerPKMixin: Auto-increment integer primary key
    - NestedSetMixin: lft/rgt bounds and parent reference for trees

Repository:
    - BaseRepository[T]: Primary-key lookups with explicit session passing
    - NestedSetRepository[T]: BaseRepository plus tree operations

Exceptions:
    - RepositoryError, NotFoundError, InvalidFilterError, InvalidSortError
    - TreeConfigurationError, TreeIntegrityError, InvalidTreeOperationError
"""

from __future__ import annotations

from .base import Base, IntegerPKMixin
from .exceptions import (
    InvalidFilterError,
    InvalidSortError,
    InvalidTreeOperationError,
    NotFoundError,
    RepositoryError,
    TreeConfigurationError,
    TreeIntegrityError,
)
from .nested_set import NestedSetConfig, NestedSetMixin, NestedSetRepository, tree_transaction
from .repository import BaseRepository

__all__ = [
    "Base",
    "BaseRepository",
    "IntegerPKMixin",
    "InvalidFilterError",
    "InvalidSortError",
    "InvalidTreeOperationError",
    "NestedSetConfig",
    "NestedSetMixin",
    "NestedSetRepository",
    "NotFoundError",
    "RepositoryError",
    "TreeConfigurationError",
    "TreeIntegrityError",
    "tree_transaction",
]
