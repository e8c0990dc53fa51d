"""
Application layer - Use cases and orchestration for lobbysync.

This layer contains:
- Port definitions (abstract interfaces for infrastructure)
- Application services (membership, presence, countdown, activation)
- Observability helpers (correlation ids)

IMPORT RULES:
- CAN import from: domain, config
- CANNOT import from: infrastructure, bootstrap
"""

from lobbysync.application.ports import (
    KeyValueStoreProtocol,
    SessionStoreGatewayProtocol,
    TimeAuthorityProtocol,
)

__all__: list[str] = [
    "KeyValueStoreProtocol",
    "SessionStoreGatewayProtocol",
    "TimeAuthorityProtocol",
]
