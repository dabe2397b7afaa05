from __future__ import annotations

import secrets

from fastapi import APIRouter, Depends, Response

from reunion_session.api.deps import get_session_id, get_session_store, get_settings
from reunion_session.clients.session_store import SessionStore
from reunion_session.config import Settings
from reunion_session.core.exceptions import InvalidCredentialsError, SessionExpiredError
from reunion_session.core.logging import get_logger
from reunion_session.schemas.requests import LoginRequest
from reunion_session.schemas.responses import (
    LoginResponse,
    LogoutResponse,
    SessionInfoResponse,
    SessionPingResponse,
)

logger = get_logger(__name__)
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
) -> LoginResponse:
    expected_user = settings.LOGIN_USERNAME
    expected_password = settings.LOGIN_PASSWORD.get_secret_value()
    if (
        not expected_user
        or not expected_password
        or not secrets.compare_digest(body.username.encode(), expected_user.encode())
        or not secrets.compare_digest(body.password.encode(), expected_password.encode())
    ):
        raise InvalidCredentialsError(message="Invalid username or password")

    session = store.create(body.username)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        session.session_id,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    logger.info("login_success", username=body.username)
    return LoginResponse(username=body.username)


@router.get("/session-info", response_model=SessionInfoResponse)
async def session_info(
    store: SessionStore = Depends(get_session_store),
    session_id: str | None = Depends(get_session_id),
) -> SessionInfoResponse:
    """Idle timeout the client should mirror. Reading it counts as activity."""
    session = store.touch(session_id)
    return SessionInfoResponse(timeout_seconds=store.ttl_seconds, authenticated=session is not None)


@router.post(
    "/session-ping",
    response_model=SessionPingResponse,
    response_model_exclude_none=True,
)
async def session_ping(
    store: SessionStore = Depends(get_session_store),
    session_id: str | None = Depends(get_session_id),
) -> SessionPingResponse:
    if session_id is None:
        return SessionPingResponse(alive=False)
    session = store.touch(session_id)
    if session is None:
        raise SessionExpiredError(message="Session expired or invalid. Please log in again.")
    return SessionPingResponse(alive=True, timeout_seconds=store.ttl_seconds)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    response: Response,
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
    session_id: str | None = Depends(get_session_id),
) -> LogoutResponse:
    store.invalidate(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return LogoutResponse()
