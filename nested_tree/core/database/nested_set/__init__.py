"""Nested-set (modified preorder) trees on top of SQLAlchemy async.

Each node stores a left and right bound; a node's descendants are exactly
the nodes whose bounds lie strictly inside its own. A nullable parent
reference is kept alongside so the bounds can be rebuilt when they are
damaged.

Modules:
    - config: NestedSetConfig and the cached NodeAccessor
    - mixins: NestedSetMixin (lft, rgt, parent_id columns)
    - transaction: tree_transaction guard (outermost commits)
    - sync: bulk bound shifts and the tree edge
    - queries: paths, children, counts
    - mover: move_down, move_up, reorder
    - reparent: adjust_node_with_parent, insert_node, set_parent
    - remover: remove_from_tree
    - verifier: verify_tree
    - recoverer: recover_tree
    - repository: NestedSetRepository facade
"""

from __future__ import annotations

from .config import DEFAULT_CONFIG, NestedSetConfig, NodeAccessor, get_accessor, resolve_accessor
from .mixins import NestedSetMixin
from .repository import NestedSetRepository
from .transaction import transaction_depth, tree_transaction

__all__ = [
    "DEFAULT_CONFIG",
    "NestedSetConfig",
    "NestedSetMixin",
    "NestedSetRepository",
    "NodeAccessor",
    "get_accessor",
    "resolve_accessor",
    "transaction_depth",
    "tree_transaction",
]
