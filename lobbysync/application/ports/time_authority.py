"""Time Authority Protocol - interface for clock and timer access.

All services that need the current time or need to wait MUST inject a
TimeAuthorityProtocol implementation instead of reading the wall clock or
calling asyncio.sleep() directly.

Benefits:
1. **Consistency**: presence filtering and heartbeats read the same clock
2. **Testability**: tests inject FakeTimeAuthority and wake sleepers by advancing it
3. **Reliability**: no flaky tests from countdown or heartbeat timing
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Abstract interface for time authority.

    Example usage:
        class MyService:
            def __init__(self, time_authority: TimeAuthorityProtocol) -> None:
                self._time = time_authority

            async def tick(self) -> None:
                now = self._time.now()  # never the wall clock
                await self._time.sleep(1)  # NOT asyncio.sleep(1)

    For production:
        Use SystemTimeAuthority from lobbysync/infrastructure/adapters/time/

    For testing:
        Use FakeTimeAuthority from tests/helpers/fake_time_authority.py
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return current UTC time with timezone awareness.

        Returns:
            Current datetime with timezone information (UTC).
        """
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Return monotonic clock value for measuring elapsed time.

        Returns:
            Monotonically increasing float value (in seconds).

        Note:
            Use this for measuring elapsed time, not for timestamps.
        """
        ...

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task without blocking other tasks.

        Args:
            seconds: How long to wait.
        """
        ...
