"""System time authority - wall clock and asyncio timers."""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone

from lobbysync.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Production TimeAuthorityProtocol backed by the system clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
