from __future__ import annotations

from fastapi import Request

from reunion_session.clients.session_store import SessionStore
from reunion_session.config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_session_id(request: Request) -> str | None:
    settings: Settings = request.app.state.settings
    return request.cookies.get(settings.SESSION_COOKIE_NAME)
