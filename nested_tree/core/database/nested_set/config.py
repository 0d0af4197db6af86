"""Per-model nested-set configuration and the resolved node accessor.

A model names the attributes that hold its bounds and parent reference
through a ``NestedSetConfig``. The algorithms never look attributes up by
name per call; they go through a ``NodeAccessor`` that is resolved and
validated once per model class and then cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect as sa_inspect

from nested_tree.core.database.exceptions import TreeConfigurationError

if TYPE_CHECKING:
    from sqlalchemy.orm import InstrumentedAttribute


@dataclass(slots=True, frozen=True)
class NestedSetConfig:
    """Names of the attributes backing a nested-set model.

    Attributes:
        left_field: Column holding the left bound
        right_field: Column holding the right bound
        parent_field: Column holding the parent's identifier (nullable)
        id_field: Primary key column
    """

    left_field: str = "lft"
    right_field: str = "rgt"
    parent_field: str = "parent_id"
    id_field: str = "id"


DEFAULT_CONFIG = NestedSetConfig()


@dataclass(slots=True, frozen=True, eq=False)
class NodeAccessor:
    """Typed access to the nested-set attributes of one model class.

    Holds the mapped column attributes (usable in SQL expressions) and
    reads/writes the corresponding instance values.
    """

    model: type[Any]
    config: NestedSetConfig
    left: InstrumentedAttribute[Any]
    right: InstrumentedAttribute[Any]
    parent: InstrumentedAttribute[Any]
    id: InstrumentedAttribute[Any]
    sortable: frozenset[str]

    @property
    def model_name(self) -> str:
        return self.model.__name__

    def left_of(self, node: Any) -> int | None:
        return getattr(node, self.config.left_field)

    def right_of(self, node: Any) -> int | None:
        return getattr(node, self.config.right_field)

    def parent_id_of(self, node: Any) -> Any:
        return getattr(node, self.config.parent_field)

    def id_of(self, node: Any) -> Any:
        return getattr(node, self.config.id_field)

    def bounds(self, node: Any) -> tuple[int | None, int | None]:
        """Return ``(left, right)`` as currently loaded on the instance."""
        return self.left_of(node), self.right_of(node)

    def is_attached(self, node: Any) -> bool:
        """Whether the node carries usable bounds.

        Unset bounds are ``None`` for a new node and ``0`` for a node that
        was detached during removal.
        """
        left, right = self.bounds(node)
        return bool(left) and bool(right)

    def set_parent_id(self, node: Any, value: Any) -> None:
        setattr(node, self.config.parent_field, value)


def resolve_accessor(model: type[Any], config: NestedSetConfig | None = None) -> NodeAccessor:
    """Build a ``NodeAccessor`` for ``model``, validating its configuration.

    Args:
        model: Mapped model class
        config: Field names; defaults to ``model.__nested_set__`` or the
            standard ``lft``/``rgt``/``parent_id``/``id`` names

    Returns:
        Accessor bound to the model's column attributes

    Raises:
        TreeConfigurationError: If a configured field is not a mapped column
    """
    config = config or getattr(model, "__nested_set__", DEFAULT_CONFIG)
    mapper = sa_inspect(model)
    columns = {attr.key for attr in mapper.column_attrs}

    roles = {
        "left": config.left_field,
        "right": config.right_field,
        "parent": config.parent_field,
        "identifier": config.id_field,
    }
    for role, field in roles.items():
        if field not in columns:
            raise TreeConfigurationError(model.__name__, field, role)

    return NodeAccessor(
        model=model,
        config=config,
        left=getattr(model, config.left_field),
        right=getattr(model, config.right_field),
        parent=getattr(model, config.parent_field),
        id=getattr(model, config.id_field),
        sortable=frozenset(columns),
    )


@lru_cache(maxsize=None)
def get_accessor(model: type[Any]) -> NodeAccessor:
    """Cached ``resolve_accessor`` using the model's own configuration."""
    return resolve_accessor(model)


__all__ = [
    "DEFAULT_CONFIG",
    "NestedSetConfig",
    "NodeAccessor",
    "get_accessor",
    "resolve_accessor",
]
