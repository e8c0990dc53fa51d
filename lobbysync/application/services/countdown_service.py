"""Countdown service - local countdown driven by the shared quorum flag.

Each client runs its own one-second timer against the shared quorum_reached
boolean; no countdown value is ever exchanged between clients. Clock skew
between clients is harmless because the transition at expiry is guarded by
the conditional write, not by the timer.

State machine:
    unset --(quorum false->true while forming)--> running(N)
    running(n) --(tick)--> running(n-1) ... running(0) -> expired, on_expire()
    running/expired --(quorum false or not forming)--> unset
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from lobbysync.application.ports.time_authority import TimeAuthorityProtocol
from lobbysync.application.services.base import LoggingMixin
from lobbysync.domain.models.session import SessionStatus

ExpiryCallback = Callable[[], Awaitable[None]]
TickCallback = Callable[[int | None], None]


class CountdownService(LoggingMixin):
    """Countdown Synchronizer for one client.

    Attributes:
        _time: Injected clock and timer.
        _duration: Countdown length in seconds.
        _on_expire: Awaited once when the countdown reaches zero.
        _on_tick: Called with the new remaining value (None when unset).
        _remaining: Seconds left, None when unset.
        _armed: Last observed value of the start condition.
        _task: The running timer task, if any.
    """

    def __init__(
        self,
        time_authority: TimeAuthorityProtocol,
        duration_seconds: int,
        on_expire: ExpiryCallback,
        on_tick: TickCallback | None = None,
    ) -> None:
        """Initialize the countdown in the unset state.

        Args:
            time_authority: Injected clock and timer.
            duration_seconds: Countdown length in seconds.
            on_expire: Awaited once when the countdown reaches zero.
            on_tick: Called whenever the remaining value changes.
        """
        self._time = time_authority
        self._duration = duration_seconds
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._remaining: int | None = None
        self._armed = False
        self._task: asyncio.Task[None] | None = None
        self._init_logger()

    @property
    def remaining(self) -> int | None:
        """Seconds left, or None when the countdown is unset."""
        return self._remaining

    @property
    def expired(self) -> bool:
        """True once the countdown has reached zero and not been reset."""
        return self._remaining == 0

    def observe(self, quorum_reached: bool, status: SessionStatus | None) -> None:
        """Feed the latest derived state into the countdown.

        Starts on a false->true edge of (quorum_reached and forming); cancels
        and unsets as soon as that condition is false.

        Args:
            quorum_reached: Latest quorum flag.
            status: Latest observed session status.
        """
        condition = quorum_reached and status == SessionStatus.FORMING
        if condition and not self._armed:
            self._start()
        elif not condition and self._armed:
            self.cancel()
        self._armed = condition

    def cancel(self) -> None:
        """Stop the timer and return to the unset state."""
        task = self._task
        self._task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        if self._remaining is not None:
            self._log_operation("cancel").info(
                "countdown_cancelled", remaining=self._remaining
            )
            self._set_remaining(None)
        self._armed = False

    def _start(self) -> None:
        self._set_remaining(self._duration)
        self._log_operation("start").info(
            "countdown_started", duration_seconds=self._duration
        )
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        while self._remaining is not None and self._remaining > 0:
            await self._time.sleep(1)
            if self._remaining is None:
                return
            self._set_remaining(self._remaining - 1)
            self._log_operation("tick").debug(
                "countdown_tick", remaining=self._remaining
            )
        self._log_operation("expire").info("countdown_expired")
        # Expiry work must survive a later cancel() of the timer.
        self._task = None
        await self._on_expire()

    def _set_remaining(self, value: int | None) -> None:
        self._remaining = value
        if self._on_tick is not None:
            self._on_tick(value)
