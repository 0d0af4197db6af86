"""Logging infrastructure.

Standard-library logging with a few house conventions:
- Module loggers via ``logging.getLogger(__name__)``
- Lazy DEBUG messages via ``get_lazy_logger`` (callables are only
  evaluated when DEBUG is enabled)
- ``log_operation`` decorator for timed, structured operation logs
- JSONL output with OpenTelemetry trace correlation

Basic usage:
    from nested_tree.infra.logging import get_lazy_logger, setup_logging

    setup_logging()
    lazy_logger = get_lazy_logger(__name__)
    lazy_logger.debug(lambda: f"edge={edge}")
"""

from nested_tree.infra.logging.config import configure_logging, setup_logging, shutdown
from nested_tree.infra.logging.formatters import JSONFormatter
from nested_tree.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger
from nested_tree.infra.logging.operations import log_operation

__all__ = [
    "JSONFormatter",
    "LazyLoggerAdapter",
    "configure_logging",
    "get_lazy_logger",
    "log_operation",
    "setup_logging",
    "shutdown",
]
