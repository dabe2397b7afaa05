"""Per-tab coordinator that drives the idle warning, countdown and logout.

Wires the pure transitions in ``timeout_state`` to timers, the session API,
the shared login flag and navigation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from functools import partial
from typing import Any

from reunion_session.config import Settings
from reunion_session.core.exceptions import SessionGoneError, SessionServiceError
from reunion_session.core.logging import get_logger
from reunion_session.schemas.enums import ResumeAction, TimeoutPhase
from reunion_session.schemas.responses import DialogState, StorageEvent
from reunion_session.services import timeout_state as ts
from reunion_session.services.auth_store import AuthStore
from reunion_session.services.navigation import Navigator, timeout_login_url
from reunion_session.services.scheduler import Scheduler, TimerHandle
from reunion_session.services.session_api import SessionApiClient

ACTIVITY_EVENTS = ("pointerdown", "pointermove", "keydown", "scroll", "touchstart", "click")
RESUME_EVENTS = ("visibilitychange", "resume")

DialogListener = Callable[[DialogState], None]


class SessionTimeoutCoordinator:
    """Keeps a local idle countdown in step with the server-side session.

    Shows a warning ``WARNING_LEAD_SECONDS`` before the session would expire,
    pings the server on activity (throttled), and logs the tab out once the
    session is really gone. Deadlines are stored as wall-clock instants so a
    host that suspended our timers can be reconciled through ``on_resume``.
    """

    def __init__(
        self,
        api: SessionApiClient,
        auth_store: AuthStore,
        scheduler: Scheduler,
        navigator: Navigator,
        settings: Settings,
    ) -> None:
        self._api = api
        self._auth = auth_store
        self._scheduler = scheduler
        self._navigator = navigator
        self._settings = settings
        self._state = ts.TimeoutState()
        self._warning_timer: TimerHandle | None = None
        self._countdown_timer: TimerHandle | None = None
        self._init_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self._listeners: list[DialogListener] = []
        self._unsubscribers: list[Callable[[], None]] = []
        self._started = False
        self._logger = get_logger(__name__, tab_id=auth_store.tab_id)

    # -- dialog contract -------------------------------------------------

    @property
    def state(self) -> ts.TimeoutState:
        return self._state

    @property
    def show_warning(self) -> bool:
        return self._state.show_warning

    @property
    def seconds_left(self) -> int:
        return self._state.seconds_left

    @property
    def dialog_state(self) -> DialogState:
        return DialogState(show_warning=self._state.show_warning, seconds_left=self._state.seconds_left)

    def subscribe(self, listener: DialogListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- lifecycle -------------------------------------------------------

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._state = ts.record_activity(self._state, self._scheduler.now_ms())
        self._unsubscribers = [
            self._auth.on_profile_updated(self._on_profile_updated),
            self._auth.on_storage(self._on_storage_event),
        ]
        if self._auth.is_logged_in():
            self._begin_initialize()

    async def stop(self) -> None:
        self._clear_timers()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._started = False
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def drain(self) -> None:
        """Wait until pings, initialization and logout calls in flight have finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # -- operations ------------------------------------------------------

    async def initialize(self) -> None:
        if not self._auth.is_logged_in():
            return
        try:
            info = await self._api.fetch_session_info()
            timeout = info.timeout_seconds
        except SessionServiceError as exc:
            timeout = self._settings.FALLBACK_TIMEOUT_SECONDS
            self._logger.warning(
                "session_info_fallback",
                error=exc.message,
                timeout_seconds=timeout,
            )
        if not self._auth.is_logged_in():
            return
        self._state = self._state.model_copy(update={"timeout_seconds": timeout})
        self.schedule_warning(timeout)

    def schedule_warning(self, total_seconds: int) -> None:
        self._clear_timers()
        now = self._scheduler.now_ms()
        lead_cap = self._settings.WARNING_LEAD_SECONDS
        self._state = ts.schedule(self._state, total_seconds, now, lead_cap)
        lead = ts.warning_lead(total_seconds, lead_cap)
        self._warning_timer = self._scheduler.call_later(
            self._state.warning_deadline - now,
            partial(self._on_warning_due, lead),
        )
        self._logger.debug(
            "session_warning_scheduled",
            total_seconds=total_seconds,
            warning_deadline=self._state.warning_deadline,
            logout_deadline=self._state.logout_deadline,
        )
        self._notify()

    def start_countdown(self, lead_seconds: int) -> None:
        self._cancel_countdown()
        self._state = ts.begin_countdown(self._state, lead_seconds)
        self._countdown_timer = self._scheduler.call_every(1000, self._on_tick)
        self._logger.info("session_warning_shown", seconds_left=lead_seconds)
        self._notify()

    def on_activity(self) -> None:
        self._state = ts.record_activity(self._state, self._scheduler.now_ms())
        if not self._auth.is_logged_in():
            return
        if not ts.activity_resets_timer(self._state):
            return
        # Local reset and server reset are independent of each other.
        self.schedule_warning(self._state.timeout_seconds)
        self._spawn(self.ping_server())

    async def ping_server(self) -> None:
        now = self._scheduler.now_ms()
        if not ts.ping_allowed(self._state, now, self._settings.PING_THROTTLE_MS):
            return
        self._state = ts.record_ping(self._state, now)

        try:
            resp = await self._api.ping()
        except SessionGoneError as exc:
            now = self._scheduler.now_ms()
            if self._auth.is_logged_in() and ts.auth_failure_ends_session(
                self._state, now, self._settings.AUTH_GRACE_MS
            ):
                self._logger.info("session_ping_rejected", http_status=exc.http_status)
                self.perform_logout()
            else:
                self._logger.info("session_ping_rejected_within_grace", http_status=exc.http_status)
            return
        except SessionServiceError as exc:
            self._logger.warning("session_ping_failed", error=exc.message, detail=exc.detail)
            return

        if not resp.alive:
            self._logger.info("session_not_alive")
            self.perform_logout()
            return
        if self._auth.is_logged_in() and self._state.timeout_seconds:
            self.schedule_warning(self._state.timeout_seconds)

    def extend_session(self) -> None:
        if not self._auth.is_logged_in() or self._state.phase not in (
            TimeoutPhase.ACTIVE,
            TimeoutPhase.WARNING,
        ):
            return
        self._cancel_countdown()
        self._state = ts.force_next_ping(ts.dismiss(self._state))
        self._logger.info("session_extended")
        self._spawn(self.ping_server())
        if self._state.timeout_seconds:
            self.schedule_warning(self._state.timeout_seconds)
        else:
            self._notify()

    def logout_now(self) -> None:
        self._clear_timers()
        self.perform_logout()

    def perform_logout(self) -> None:
        if self._state.phase is TimeoutPhase.LOGGED_OUT:
            return
        self._clear_timers()
        self._state = ts.terminate(self._state)
        self._logger.info("session_logout")
        self._auth.clear()
        self._notify()
        self._spawn(self._server_logout())
        self._navigator.navigate(
            timeout_login_url(self._settings.LOGIN_PAGE_PATH, self._navigator.current_path())
        )

    async def on_resume(self) -> None:
        """Reconcile with wall-clock deadlines after the host un-suspends our timers."""
        if not self._auth.is_logged_in() or not self._state.timeout_seconds:
            return
        if self._state.phase not in (TimeoutPhase.ACTIVE, TimeoutPhase.WARNING):
            return

        now = self._scheduler.now_ms()
        decision = ts.resolve_resume(self._state, now)
        self._logger.info("session_resumed", action=decision.action.value, remaining=decision.remaining)

        if decision.action is ResumeAction.VERIFY:
            await self._verify_session()
        elif decision.action is ResumeAction.SHOW_WARNING:
            self._clear_timers()
            self.start_countdown(decision.remaining)
        else:
            self._spawn(self.ping_server())
            self.schedule_warning(decision.remaining)

    def handle_event(self, name: str) -> None:
        if name in ACTIVITY_EVENTS:
            self.on_activity()
        elif name in RESUME_EVENTS:
            self._spawn(self.on_resume())

    # -- internals -------------------------------------------------------

    async def _verify_session(self) -> None:
        """Authoritative ping: the deadline passed, but another tab may have kept the session alive."""
        # Deadlines from before the suspend are stale until the server answers.
        self._clear_timers()
        self._state = ts.record_ping(self._state, self._scheduler.now_ms())
        try:
            resp = await self._api.ping()
        except SessionGoneError as exc:
            self._logger.info("session_verify_rejected", http_status=exc.http_status)
            self.perform_logout()
            return
        except SessionServiceError as exc:
            self._logger.warning("session_verify_failed", error=exc.message, detail=exc.detail)
        else:
            if not resp.alive:
                self._logger.info("session_not_alive")
                self.perform_logout()
                return
        if self._auth.is_logged_in() and self._state.timeout_seconds:
            self.schedule_warning(self._state.timeout_seconds)

    async def _server_logout(self) -> None:
        try:
            await self._api.logout()
        except (SessionServiceError, SessionGoneError) as exc:
            self._logger.info("server_logout_ignored", error=exc.message)

    def _on_warning_due(self, lead_seconds: int) -> None:
        self._warning_timer = None
        if not self._auth.is_logged_in():
            return
        self.start_countdown(lead_seconds)

    def _on_tick(self) -> None:
        self._state = ts.tick(self._state)
        if self._state.seconds_left <= 0:
            self._clear_timers()
            self.perform_logout()
            return
        self._notify()

    def _on_profile_updated(self) -> None:
        if self._auth.is_logged_in():
            self._on_login_detected()
        else:
            self._on_login_flag_removed()

    def _on_storage_event(self, event: StorageEvent) -> None:
        if event.key != self._auth.key:
            return
        if event.new_value is None:
            self._on_login_flag_removed()
        else:
            self._on_login_detected()

    def _on_login_detected(self) -> None:
        if self._state.phase not in (TimeoutPhase.IDLE, TimeoutPhase.LOGGED_OUT):
            return
        # Starts the grace window for 401s caused by a not-yet-propagated cookie.
        self._state = ts.force_next_ping(ts.record_activity(self._state, self._scheduler.now_ms()))
        self._begin_initialize()

    def _on_login_flag_removed(self) -> None:
        self._clear_timers()
        if self._state.phase is not TimeoutPhase.LOGGED_OUT:
            self._state = ts.reset(self._state)
        self._notify()

    def _begin_initialize(self) -> None:
        if self._init_task is not None and not self._init_task.done():
            return
        self._init_task = self._spawn(self.initialize())

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error("session_task_failed", exc_info=exc)

    def _cancel_countdown(self) -> None:
        if self._countdown_timer is not None:
            self._countdown_timer.cancel()
            self._countdown_timer = None

    def _clear_timers(self) -> None:
        if self._warning_timer is not None:
            self._warning_timer.cancel()
            self._warning_timer = None
        self._cancel_countdown()

    def _notify(self) -> None:
        state = self.dialog_state
        for listener in list(self._listeners):
            listener(state)
