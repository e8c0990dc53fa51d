"""Observability infrastructure: structlog configuration and correlation ids.

Usage:
    from lobbysync.infrastructure.observability import configure_structlog

    configure_structlog(environment="production")
"""

from lobbysync.application.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from lobbysync.infrastructure.observability.logging import (
    configure_structlog,
    get_logger_for_service,
)

__all__: list[str] = [
    "configure_structlog",
    "correlation_id_processor",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger_for_service",
    "set_correlation_id",
]
