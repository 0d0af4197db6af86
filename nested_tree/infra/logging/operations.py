"""Operation logging decorator.

Wraps repository operations with entry/exit logging, duration and
structured ``extra`` fields. Errors are logged and re-raised unchanged.

Example:
    from nested_tree.infra.logging.operations import log_operation

    class CategoryRepository(NestedSetRepository[Category]):
        @log_operation("tree.move")
        async def move_down(self, session, node, count=1):
            ...
"""

from __future__ import annotations

import functools
import inspect
import logging
import time
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

P = ParamSpec("P")
R = TypeVar("R")


def log_operation(
    operation_type: str,
    *,
    level: int = logging.DEBUG,
    log_args: bool = False,
    error_level: int = logging.ERROR,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Generic operation logging decorator.

    Logs operation exit (with duration) and errors. Skips all work when
    neither level is enabled.

    Args:
        operation_type: Operation category (e.g., "tree.move", "tree.recover")
        level: Log level for success messages (default: DEBUG)
        log_args: Whether to include scalar function arguments in logs
        error_level: Log level for errors (default: ERROR)

    Returns:
        Decorated function with automatic logging
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        logger = logging.getLogger(func.__module__)
        func_name = func.__name__
        is_async = inspect.iscoroutinefunction(func)

        def _extra(args: tuple[Any, ...]) -> dict[str, Any]:
            extra: dict[str, Any] = {"operation": operation_type, "function": func_name}
            if log_args and len(args) > 2:
                # Skip self and session
                extra["call_args"] = _sanitize_args(args[2:])
            return extra

        def _failed(extra: dict[str, Any], start: float, exc: Exception) -> None:
            extra["duration_ms"] = round((time.perf_counter() - start) * 1000, 2)
            extra["success"] = False
            extra["error_type"] = type(exc).__name__
            extra["error"] = str(exc)
            logger.log(error_level, f"{operation_type}.{func_name} failed", extra=extra)

        def _succeeded(extra: dict[str, Any], start: float) -> None:
            extra["duration_ms"] = round((time.perf_counter() - start) * 1000, 2)
            extra["success"] = True
            logger.log(level, f"{operation_type}.{func_name}", extra=extra)

        @functools.wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            should_log = logger.isEnabledFor(level)
            should_log_errors = logger.isEnabledFor(error_level)
            if not should_log and not should_log_errors:
                return await func(*args, **kwargs)  # type: ignore[misc]

            extra = _extra(args)
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)  # type: ignore[misc]
            except Exception as exc:
                if should_log_errors:
                    _failed(extra, start, exc)
                raise
            if should_log:
                _succeeded(extra, start)
            return result

        @functools.wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            should_log = logger.isEnabledFor(level)
            should_log_errors = logger.isEnabledFor(error_level)
            if not should_log and not should_log_errors:
                return func(*args, **kwargs)

            extra = _extra(args)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                if should_log_errors:
                    _failed(extra, start, exc)
                raise
            if should_log:
                _succeeded(extra, start)
            return result

        return async_wrapper if is_async else sync_wrapper  # type: ignore[return-value]

    return decorator


def _sanitize_args(args: tuple[Any, ...]) -> list[str]:
    """Convert args to safe string representations for logging.

    Skips complex objects and limits string lengths.
    """
    result = []
    for arg in args:
        if isinstance(arg, (str, int, float, bool, type(None))):
            s = str(arg)
            result.append(s[:100] if len(s) > 100 else s)
        else:
            result.append(f"<{type(arg).__name__}>")
    return result
