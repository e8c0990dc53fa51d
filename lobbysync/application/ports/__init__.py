"""Application ports - abstract interfaces implemented by infrastructure.

Ports:
- SessionStoreGatewayProtocol: rows, queries, conditional writes, change feed
- KeyValueStoreProtocol: local durable storage for the device identity
- TimeAuthorityProtocol: injected clock and timer
"""

from lobbysync.application.ports.key_value_store import KeyValueStoreProtocol
from lobbysync.application.ports.session_store import (
    ALL_EVENTS,
    ChangeEvent,
    ChangeEventType,
    OrderBy,
    SessionStoreGatewayProtocol,
    Table,
)
from lobbysync.application.ports.time_authority import TimeAuthorityProtocol

__all__: list[str] = [
    "ALL_EVENTS",
    "ChangeEvent",
    "ChangeEventType",
    "KeyValueStoreProtocol",
    "OrderBy",
    "SessionStoreGatewayProtocol",
    "Table",
    "TimeAuthorityProtocol",
]
