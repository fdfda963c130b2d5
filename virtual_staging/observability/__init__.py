"""Observability: logging setup, correlation IDs and HTTP middleware."""

from virtual_staging.observability.logger import configure_logging, get_logger
from virtual_staging.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

__all__ = ["configure_logging", "get_logger", "CorrelationMiddleware", "RequestLoggingMiddleware"]
