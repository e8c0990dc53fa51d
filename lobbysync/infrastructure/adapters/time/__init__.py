"""Clock adapters."""

from lobbysync.infrastructure.adapters.time.system_time_authority import (
    SystemTimeAuthority,
)

__all__: list[str] = ["SystemTimeAuthority"]
