"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of
the process.

Testing:
    Clear the cache to force reload after changing the environment:
    get_db_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache

from .database import DatabaseSettings
from .logs import LoggingSettings
from .tree import TreeSettings


@lru_cache(maxsize=1)
def get_db_settings() -> DatabaseSettings:
    """Get cached database settings.

    Returns:
        Validated and frozen DatabaseSettings instance.
    """
    return DatabaseSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_tree_settings() -> TreeSettings:
    """Get cached tree maintenance settings.

    Returns:
        Validated and frozen TreeSettings instance.
    """
    return TreeSettings()


def clear_settings_cache() -> None:
    """Drop every cached settings instance."""
    get_db_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_tree_settings.cache_clear()
