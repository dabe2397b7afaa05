from __future__ import annotations

import itertools
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from reunion_session.config import Settings
from reunion_session.main import create_app
from reunion_session.schemas.responses import SessionInfoResponse, SessionPingResponse
from reunion_session.services.auth_store import AuthStore
from reunion_session.services.coordinator import SessionTimeoutCoordinator
from reunion_session.services.local_storage import LocalStorage
from reunion_session.services.navigation import HistoryNavigator


class FakeTimer:
    def __init__(self, due: int, interval: int | None, callback: Callable[[], None], seq: int) -> None:
        self.due = due
        self.interval = interval
        self.callback = callback
        self.seq = seq
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock. ``advance`` fires due timers in order; ``suspend`` moves time without firing any."""

    def __init__(self, start_ms: int = 0) -> None:
        self.now = start_ms
        self._timers: list[FakeTimer] = []
        self._seq = itertools.count()

    def now_ms(self) -> int:
        return self.now

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self.now + max(delay_ms, 0), None, callback, next(self._seq))
        self._timers.append(timer)
        return timer

    def call_every(self, interval_ms: int, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self.now + interval_ms, interval_ms, callback, next(self._seq))
        self._timers.append(timer)
        return timer

    @property
    def active_timers(self) -> list[FakeTimer]:
        return [t for t in self._timers if not t.cancelled]

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [t for t in self.active_timers if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            self.now = timer.due
            if timer.interval is None:
                timer.cancelled = True
            else:
                timer.due += timer.interval
            timer.callback()
        self.now = target
        self._timers = self.active_timers

    def advance_to(self, at_ms: int) -> None:
        self.advance(at_ms - self.now)

    def suspend(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def settings() -> Settings:
    return Settings(
        API_BASE_URL="http://testserver",
        MAX_RETRIES=1,
        BACKOFF_FACTOR=0,
        LOGIN_USERNAME="cousin",
        LOGIN_PASSWORD="reunion2026",
        SESSION_TIMEOUT="20m",
    )


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def storage() -> LocalStorage:
    return LocalStorage()


@pytest.fixture
def auth_store(storage) -> AuthStore:
    store = AuthStore(storage, tab_id="tab-a")
    store.set_profile({"username": "cousin"})
    return store


@pytest.fixture
def navigator() -> HistoryNavigator:
    return HistoryNavigator("/family/tree?branch=scott")


@pytest.fixture
def api() -> AsyncMock:
    mock = AsyncMock()
    mock.fetch_session_info.return_value = SessionInfoResponse(timeout_seconds=1200)
    mock.ping.return_value = SessionPingResponse(alive=True, timeout_seconds=1200)
    mock.logout.return_value = None
    return mock


@pytest.fixture
def coordinator(api, auth_store, scheduler, navigator, settings) -> SessionTimeoutCoordinator:
    return SessionTimeoutCoordinator(
        api=api,
        auth_store=auth_store,
        scheduler=scheduler,
        navigator=navigator,
        settings=settings,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as c:
        yield c
