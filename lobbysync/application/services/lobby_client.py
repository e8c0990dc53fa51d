"""Lobby client - per-client orchestration of the coordination core.

One LobbyClient is one participant's process. It wires the outbound
heartbeat, the inbound change feeds, the reducer pipeline, the local
countdown and the coordinator's activation together.

Architecture Pattern:
    start() / join(name):
      ├─ lobby.resume() / lobby.join()
      └─ _enter(membership):
           ├─ open session + participant feeds
           ├─ refresh()                        # initial snapshot
           └─ spawn: heartbeat, session feed, participant feed

    feed event -> refresh() -> _recompute():
      ├─ derive_lobby_view(snapshot, now)     # pure pipeline
      ├─ countdown.observe(quorum, status)    # edge-triggered
      └─ countdown expired AND forming AND coordinator:
           └─ spawn transition.activate()     # conditional write decides

User actions (join, toggle_ready, vote, reset, close_session, leave) each run
under a fresh correlation id. A LobbyError becomes the user-visible
``error`` message and the loading flags are always cleared.
Background work never ends on an error: a failing listener or change event
is logged and skipped, and a failed feed is reopened after one poll interval.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Coroutine
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any
from uuid import UUID

from lobbysync.application.observability.correlation import (
    generate_correlation_id,
    set_correlation_id,
)
from lobbysync.application.ports.session_store import ChangeEvent, ChangeEventType
from lobbysync.application.ports.time_authority import TimeAuthorityProtocol
from lobbysync.application.services.base import LoggingMixin
from lobbysync.application.services.countdown_service import CountdownService
from lobbysync.application.services.device_identity_service import (
    DeviceIdentityService,
)
from lobbysync.application.services.lobby_service import LobbyService, Membership
from lobbysync.application.services.presence_service import PresenceService
from lobbysync.application.services.session_reset_service import (
    SessionResetService,
)
from lobbysync.application.services.session_roster_service import (
    SessionRosterService,
)
from lobbysync.application.services.transition_service import (
    TransitionOutcome,
    TransitionResult,
    TransitionService,
)
from lobbysync.config.lobby_config import LobbyConfig
from lobbysync.domain.errors.lobby import NotJoinedError
from lobbysync.domain.exceptions import LobbyError
from lobbysync.domain.models.lobby_view import LobbyView
from lobbysync.domain.models.participant import Participant
from lobbysync.domain.models.session import Session
from lobbysync.domain.services.lobby_view import derive_lobby_view

ViewListener = Callable[[LobbyView], None]


class LobbyClient(LoggingMixin):
    """One participant's view of, and actions on, the shared lobby.

    Attributes:
        session: The session as last observed, None before joining.
        participants: Latest roster snapshot of the session.
        view: Latest derived LobbyView.
        is_loading: True while a user action is running.
        is_joining: True while a join is running.
        error: Message of the last failed user action, None otherwise.
    """

    def __init__(
        self,
        *,
        roster: SessionRosterService,
        identity: DeviceIdentityService,
        lobby: LobbyService,
        presence: PresenceService,
        transition: TransitionService,
        reset: SessionResetService,
        time_authority: TimeAuthorityProtocol,
        config: LobbyConfig,
    ) -> None:
        """Initialize an idle client. Nothing runs until start() or join()."""
        self._roster = roster
        self._identity = identity
        self._lobby = lobby
        self._presence = presence
        self._transition = transition
        self._reset = reset
        self._time = time_authority
        self._config = config
        self._countdown = CountdownService(
            time_authority,
            config.countdown_seconds,
            on_expire=self._on_countdown_expired,
            on_tick=self._on_countdown_tick,
        )

        self._participant_id: str | None = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self._transition_task: asyncio.Task[TransitionResult | None] | None = None
        self._listeners: list[ViewListener] = []

        self.session: Session | None = None
        self.participants: list[Participant] = []
        self.view: LobbyView = self._derive()
        self.is_loading = False
        self.is_joining = False
        self.error: str | None = None
        self._init_logger()

    # =========================================================================
    # Public state
    # =========================================================================

    @property
    def participant_id(self) -> str | None:
        """This device's participant id, once loaded."""
        return self._participant_id

    @property
    def me(self) -> Participant | None:
        """This client's own row from the latest snapshot."""
        return self.view.me

    @property
    def countdown(self) -> int | None:
        """Seconds left on the local countdown, None when unset."""
        return self._countdown.remaining

    @property
    def transition_task(self) -> asyncio.Task[TransitionResult | None] | None:
        """The most recently scheduled activation attempt, if any."""
        return self._transition_task

    def add_listener(self, listener: ViewListener) -> None:
        """Register a callback invoked with every new LobbyView."""
        self._listeners.append(listener)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Load the device id and resume an existing forming membership."""
        async with self._action("start"):
            self._participant_id = await self._identity.get_participant_id()
            membership = await self._lobby.resume()
            if membership is not None:
                await self._enter(membership)

    async def close(self) -> None:
        """Tear down background work and make a best-effort departure."""
        await self._stop_tasks()
        self._countdown.cancel()
        if self.session is not None and self._participant_id is not None:
            await self._presence.depart(self._participant_id)
        self._log_operation("close").debug("client_closed")

    # =========================================================================
    # User actions
    # =========================================================================

    async def join(self, display_name: str) -> None:
        """Join the forming session under display_name."""
        async with self._action("join", joining=True):
            await self._stop_tasks()
            membership = await self._lobby.join(display_name)
            self._participant_id = membership.participant.id
            await self._enter(membership)

    async def toggle_ready(self) -> None:
        """Flip this client's readiness."""
        async with self._action("toggle_ready"):
            await self._lobby.toggle_ready(self._require_me("toggle ready"))
            await self.refresh()

    async def vote(self) -> None:
        """Vote to start. Voting twice has no further effect."""
        async with self._action("vote"):
            await self._lobby.vote_to_start(self._require_me("vote"))
            await self.refresh()

    async def reset(self) -> None:
        """Return the current session to forming and clear every flag."""
        async with self._action("reset"):
            session_id = self._require_session("reset")
            self.session = await self._reset.reset(session_id)
            await self.refresh()

    async def close_session(self) -> None:
        """Mark the current session closed."""
        async with self._action("close_session"):
            session_id = self._require_session("close the session")
            self.session = await self._reset.close(session_id)
            self._recompute()

    async def leave(self) -> None:
        """Leave the session on explicit user request."""
        async with self._action("leave"):
            me = self._require_me("leave")
            await self._stop_tasks()
            self._countdown.cancel()
            await self._lobby.leave(me)
            self.session = None
            self.participants = []
            self._recompute()

    # =========================================================================
    # Recomputation
    # =========================================================================

    async def refresh(self) -> None:
        """Re-read the roster snapshot and recompute the view.

        Raises:
            StoreError: If the roster cannot be read.
        """
        if self.session is None:
            self._recompute()
            return
        self.participants = await self._roster.list_participants(self.session.id)
        self._recompute()

    def _derive(self) -> LobbyView:
        return derive_lobby_view(
            self.session,
            self.participants,
            self._participant_id,
            self._time.now(),
            self._config.inactive_threshold,
        )

    def _recompute(self) -> None:
        view = self._derive()
        status = self.session.status if self.session is not None else None
        self._countdown.observe(view.quorum.quorum_reached, status)
        self.view = replace(view, countdown=self._countdown.remaining)
        self._notify()

        if self._should_activate():
            self._schedule_transition()

    def _notify(self) -> None:
        for listener in self._listeners:
            try:
                listener(self.view)
            except Exception as exc:
                self._log_operation("notify").warning(
                    "listener_failed", error=str(exc), error_type=type(exc).__name__
                )

    def _on_countdown_tick(self, remaining: int | None) -> None:
        self.view = replace(self.view, countdown=remaining)
        self._notify()

    async def _on_countdown_expired(self) -> None:
        self._recompute()

    # =========================================================================
    # Activation
    # =========================================================================

    def _should_activate(self) -> bool:
        return (
            self.session is not None
            and self.session.is_forming
            and self._countdown.expired
            and self.view.is_coordinator
            and (self._transition_task is None or self._transition_task.done())
        )

    def _schedule_transition(self) -> None:
        self._transition_task = self._spawn(self._activate(), name="activate")

    async def _activate(self) -> TransitionResult | None:
        session = self.session
        if session is None or not session.is_forming:
            return None

        set_correlation_id(generate_correlation_id())
        result = await self._transition.activate(session.id)
        try:
            if result.outcome is TransitionOutcome.ACTIVATED and result.session:
                # Advance locally without waiting for our own change event.
                self.session = result.session
                await self.refresh()
            elif result.outcome is TransitionOutcome.LOST_RACE:
                self.session = await self._roster.get_session(session.id)
                await self.refresh()
        except LobbyError as exc:
            self._log_operation("activate", session_id=str(session.id)).warning(
                "post_activation_refresh_failed", error=str(exc)
            )
        return result

    # =========================================================================
    # Background tasks
    # =========================================================================

    async def _enter(self, membership: Membership) -> None:
        session_id = membership.session.id
        participant_id = membership.participant.id
        self.session = membership.session

        # Feeds open before the first snapshot; each store reads its feed
        # baseline at subscribe time.
        session_feed = self._roster.watch_session(session_id)
        participant_feed = self._roster.watch_participants(session_id)
        await self.refresh()

        self._spawn(self._presence.run(participant_id), name="heartbeat")
        self._spawn(
            self._follow(
                "session",
                session_feed,
                lambda: self._roster.watch_session(session_id),
                self._on_session_event,
            ),
            name="session_feed",
        )
        self._spawn(
            self._follow(
                "participants",
                participant_feed,
                lambda: self._roster.watch_participants(session_id),
                self._on_participant_event,
            ),
            name="participant_feed",
        )
        self._log_operation(
            "enter",
            session_id=str(session_id),
            participant_id=participant_id,
        ).info("lobby_entered", join_order=membership.participant.join_order)

    async def _follow(
        self,
        feed_name: str,
        feed: AsyncIterator[ChangeEvent],
        resubscribe: Callable[[], AsyncIterator[ChangeEvent]],
        on_event: Callable[[ChangeEvent], Awaitable[None]],
    ) -> None:
        """Consume a change feed forever, resubscribing after failures."""
        log = self._log_operation("follow", feed=feed_name)
        while True:
            try:
                async for event in feed:
                    try:
                        await on_event(event)
                    except Exception as exc:
                        log.warning(
                            "change_event_failed",
                            event_type=event.event_type.value,
                            error=str(exc),
                            error_type=type(exc).__name__,
                        )
            except Exception as exc:
                log.warning(
                    "change_feed_failed",
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
            await self._time.sleep(self._config.subscription_poll_seconds)
            feed = resubscribe()

    async def _on_session_event(self, event: ChangeEvent) -> None:
        if event.event_type is ChangeEventType.DELETE:
            return
        self.session = Session.from_row(event.new_row)
        self._recompute()

    async def _on_participant_event(self, event: ChangeEvent) -> None:
        await self.refresh()

    def _spawn(
        self, coro: Coroutine[Any, Any, Any], *, name: str
    ) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _stop_tasks(self) -> None:
        current = asyncio.current_task()
        tasks = [task for task in self._tasks if task is not current]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # =========================================================================
    # Helpers
    # =========================================================================

    @asynccontextmanager
    async def _action(
        self, action: str, *, joining: bool = False
    ) -> AsyncIterator[None]:
        set_correlation_id(generate_correlation_id())
        self.error = None
        self.is_loading = True
        self.is_joining = joining
        try:
            yield
        except LobbyError as exc:
            self.error = str(exc)
            self._log_operation(action).warning("action_failed", error=str(exc))
        finally:
            self.is_loading = False
            self.is_joining = False
            self._notify()

    def _require_me(self, action: str) -> Participant:
        if self.me is None:
            raise NotJoinedError(action)
        return self.me

    def _require_session(self, action: str) -> UUID:
        if self.session is None:
            raise NotJoinedError(action)
        return self.session.id
