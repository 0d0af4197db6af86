"""Modular Pydantic Settings v2 configuration.

One frozen settings model per concern, each read from environment
variables (and an optional ``.env`` file) under its own prefix:

    DB_    DatabaseSettings  - async SQLAlchemy URL and engine flags
    LOG_   LoggingSettings   - level, JSON output, rotating file
    TREE_  TreeSettings      - CLI target model and reorder policy

Import settings via the cached loaders:
    from nested_tree.core.settings import get_db_settings
"""

from __future__ import annotations

from .database import DatabaseSettings
from .loader import clear_settings_cache, get_db_settings, get_logging_settings, get_tree_settings
from .logs import LoggingSettings
from .tree import TreeSettings

__all__ = [
    "DatabaseSettings",
    "LoggingSettings",
    "TreeSettings",
    "clear_settings_cache",
    "get_db_settings",
    "get_logging_settings",
    "get_tree_settings",
]
