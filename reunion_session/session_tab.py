from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx

from reunion_session.clients.http_client import close_http_client, create_http_client
from reunion_session.config import Settings
from reunion_session.services.auth_store import AuthStore
from reunion_session.services.coordinator import SessionTimeoutCoordinator
from reunion_session.services.local_storage import LocalStorage
from reunion_session.services.navigation import Navigator
from reunion_session.services.scheduler import AsyncioScheduler, Scheduler
from reunion_session.services.session_api import SessionApiClient
from reunion_session.services.warning_dialog import WarningDialog


@dataclass
class SessionTab:
    tab_id: str
    auth_store: AuthStore
    coordinator: SessionTimeoutCoordinator
    dialog: WarningDialog
    http_client: httpx.AsyncClient


@asynccontextmanager
async def open_tab(
    settings: Settings,
    storage: LocalStorage | None,
    navigator: Navigator,
    *,
    http_client: httpx.AsyncClient | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    scheduler: Scheduler | None = None,
    tab_id: str | None = None,
) -> AsyncIterator[SessionTab]:
    """Wire up and start the session-timeout machinery for one tab.

    Tabs opened with the same ``http_client`` share its cookie jar, the way
    browser tabs share cookies. Without a ``storage`` the tab gets its own,
    backed by ``AUTH_STORE_PATH`` when set.
    """
    owns_client = http_client is None
    if storage is None:
        storage = LocalStorage(settings.AUTH_STORE_PATH or None)
    client = http_client or create_http_client(settings, transport=transport)
    tab_id = tab_id or uuid.uuid4().hex
    auth_store = AuthStore(storage, tab_id=tab_id, key=settings.LOGIN_FLAG_KEY)
    coordinator = SessionTimeoutCoordinator(
        api=SessionApiClient(client=client, settings=settings),
        auth_store=auth_store,
        scheduler=scheduler or AsyncioScheduler(),
        navigator=navigator,
        settings=settings,
    )
    coordinator.start()
    try:
        yield SessionTab(
            tab_id=tab_id,
            auth_store=auth_store,
            coordinator=coordinator,
            dialog=WarningDialog(coordinator),
            http_client=client,
        )
    finally:
        await coordinator.stop()
        if owns_client:
            await close_http_client(client)
