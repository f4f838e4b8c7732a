"""Logging and health-check plumbing shared by the API layer."""

from .health import ServiceHealth, HealthStatus
from .logging_config import (
    setup_logging,
    get_logger,
    RequestLoggingMiddleware,
)

__all__ = [
    "ServiceHealth",
    "HealthStatus",
    "setup_logging",
    "get_logger",
    "RequestLoggingMiddleware",
]
