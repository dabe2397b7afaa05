from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from reunion_session.api.router import api_router
from reunion_session.clients.session_store import SessionStore
from reunion_session.config import Settings
from reunion_session.core.exceptions import ReunionSessionError
from reunion_session.core.logging import setup_logging
from reunion_session.core.middleware import session_exception_handler


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    setup_logging(log_level=settings.LOG_LEVEL, debug=settings.DEBUG)
    yield


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    app = FastAPI(
        title="Reunion Session API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_store = SessionStore(ttl_seconds=settings.session_timeout_seconds)
    app.add_exception_handler(ReunionSessionError, session_exception_handler)
    app.include_router(api_router)
    return app


app = create_app()
