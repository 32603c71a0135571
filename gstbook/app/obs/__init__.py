"""Observability helpers."""

from .logging import JsonFormatter, RequestContextFilter, configure_logging
from .queries import add_query_logger

__all__ = ["JsonFormatter", "RequestContextFilter", "configure_logging", "add_query_logger"]
