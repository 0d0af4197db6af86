"""Tree maintenance settings used by the command-line entrypoint."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TreeSettings(BaseSettings):
    """Which model the CLI operates on and how it maintains it.

    Environment variables use TREE_ prefix.
    Example: TREE_MODEL=myapp.models:Category
    """

    model: str | None = Field(
        default=None,
        description="Dotted 'module:Class' path of the nested-set model",
    )
    verify_before_reorder: bool = Field(
        default=True,
        description="Refuse to reorder a tree that fails verification",
    )

    @field_validator("model")
    @classmethod
    def validate_model_path(cls, v: str | None) -> str | None:
        """Require the 'module:Class' form."""
        if v is None:
            return v
        module, sep, attr = v.partition(":")
        if not sep or not module or not attr:
            raise ValueError(f"model must look like 'package.module:Class', got {v!r}")
        return v

    model_config = SettingsConfigDict(
        env_prefix="TREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )
