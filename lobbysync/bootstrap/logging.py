"""Bootstrap wiring for logging configuration.

Call configure_logging() once at process start, before the first client
is built.
"""

from __future__ import annotations

import os

from structlog import get_logger

from lobbysync.infrastructure.observability import configure_structlog

# Environment variable for environment detection
ENVIRONMENT_VAR = "ENVIRONMENT"
DEFAULT_ENVIRONMENT = "development"


def configure_logging() -> str:
    """Configure structlog from the ENVIRONMENT variable.

    production renders JSON lines; anything else renders to the console.

    Returns:
        The environment name that was applied.
    """
    environment = os.getenv(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT)
    configure_structlog(environment=environment)

    get_logger().bind(component="bootstrap").info(
        "structured_logging_configured", environment=environment
    )
    return environment


__all__ = ["configure_logging"]
