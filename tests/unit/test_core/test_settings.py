"""Unit tests for the pydantic-settings models and cached loaders."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from nested_tree.core.settings import (
    DatabaseSettings,
    LoggingSettings,
    TreeSettings,
    clear_settings_cache,
    get_db_settings,
    get_logging_settings,
    get_tree_settings,
)


@pytest.mark.unit
class TestDatabaseSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DB_DSN", raising=False)
        settings = DatabaseSettings()

        assert settings.dsn == "sqlite+aiosqlite:///./nested_tree.db"
        assert settings.echo is False
        assert settings.pool_pre_ping is True
        assert settings.is_sqlite is True

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DB_DSN", "postgresql+psycopg://app:secret@db:5432/app")
        monkeypatch.setenv("DB_ECHO", "true")
        settings = DatabaseSettings()

        assert settings.dsn.startswith("postgresql+psycopg://")
        assert settings.echo is True
        assert settings.is_sqlite is False

    def test_sync_driver_rejected(self):
        with pytest.raises(ValidationError, match="async driver"):
            DatabaseSettings(dsn="sqlite:///./tree.db")

    def test_frozen(self):
        settings = DatabaseSettings()

        with pytest.raises(ValidationError):
            settings.echo = True


@pytest.mark.unit
class TestLoggingSettings:
    def test_level_is_normalized(self):
        settings = LoggingSettings(level="debug")

        assert settings.level == "DEBUG"
        assert settings.level_int == logging.DEBUG

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            LoggingSettings(level="LOUD")

    def test_to_logging_kwargs(self):
        settings = LoggingSettings(level="WARNING", json_logs=False, log_file="logs/tree.log", backup_count=2)

        assert settings.to_logging_kwargs() == {
            "log_level": "WARNING",
            "json_logs": False,
            "file_path": "logs/tree.log",
            "file_max_bytes": 10_485_760,
            "file_backup_count": 2,
            "console_enabled": True,
        }


@pytest.mark.unit
class TestTreeSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TREE_MODEL", raising=False)
        settings = TreeSettings()

        assert settings.model is None
        assert settings.verify_before_reorder is True

    def test_model_path(self, monkeypatch):
        monkeypatch.setenv("TREE_MODEL", "shop.models:Category")

        assert TreeSettings().model == "shop.models:Category"

    @pytest.mark.parametrize("path", ["shop.models.Category", ":Category", "shop.models:"])
    def test_malformed_model_path(self, path):
        with pytest.raises(ValidationError, match="module:Class"):
            TreeSettings(model=path)


@pytest.mark.unit
class TestLoaders:
    def test_loaders_are_cached(self):
        assert get_db_settings() is get_db_settings()
        assert get_logging_settings() is get_logging_settings()
        assert get_tree_settings() is get_tree_settings()

    def test_clear_cache_reloads_environment(self, monkeypatch):
        monkeypatch.setenv("TREE_VERIFY_BEFORE_REORDER", "false")
        clear_settings_cache()
        assert get_tree_settings().verify_before_reorder is False

        monkeypatch.setenv("TREE_VERIFY_BEFORE_REORDER", "true")
        assert get_tree_settings().verify_before_reorder is False
        clear_settings_cache()
        assert get_tree_settings().verify_before_reorder is True
