"""CLI utilities for running async operations and formatting output."""

from nested_tree.cli.utils.async_runner import coro
from nested_tree.cli.utils.formatters import diagnostics, error, header, info, node_line, success, warning

__all__ = [
    "coro",
    "diagnostics",
    "error",
    "header",
    "info",
    "node_line",
    "success",
    "warning",
]
