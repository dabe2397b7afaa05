from __future__ import annotations

import httpx
from pydantic import ValidationError

from reunion_session.config import Settings
from reunion_session.core.exceptions import (
    SessionGoneError,
    SessionServiceError,
    SessionUnreachableError,
)
from reunion_session.core.logging import get_logger
from reunion_session.schemas.responses import SessionInfoResponse, SessionPingResponse
from reunion_session.utils.retry import with_retry

logger = get_logger(__name__)

_AUTH_FAILURE_STATUSES = (401, 403)


class SessionApiClient:
    """Talks to the server's session-info, session-ping and logout endpoints."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    async def fetch_session_info(self) -> SessionInfoResponse:
        path = self._settings.SESSION_INFO_PATH
        fetch = with_retry(self._settings.MAX_RETRIES, self._settings.BACKOFF_FACTOR)(
            self._client.get
        )
        try:
            resp = await fetch(path)
        except httpx.HTTPError as exc:
            raise SessionUnreachableError(
                message="Session info unreachable",
                detail=f"path={path}, error={exc}",
            ) from exc

        if resp.is_error:
            raise SessionServiceError(
                message=f"Session info failed (HTTP {resp.status_code})",
                detail=f"path={path}",
            )

        try:
            info = SessionInfoResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise SessionServiceError(
                message="Session info response malformed",
                detail=f"path={path}, error={exc}",
            ) from exc

        logger.info("session_info_fetched", timeout_seconds=info.timeout_seconds)
        return info

    async def ping(self) -> SessionPingResponse:
        """Reset the server-side idle timer.

        Raises SessionGoneError on 401/403, SessionServiceError on any other
        error status and SessionUnreachableError when no response arrives.
        """
        path = self._settings.SESSION_PING_PATH
        try:
            resp = await self._client.post(path)
        except httpx.HTTPError as exc:
            raise SessionUnreachableError(
                message="Session ping unreachable",
                detail=f"path={path}, error={exc}",
            ) from exc

        if resp.status_code in _AUTH_FAILURE_STATUSES:
            raise SessionGoneError(
                message="Server session is gone",
                http_status=resp.status_code,
                detail=f"path={path}",
            )
        if resp.is_error:
            raise SessionServiceError(
                message=f"Session ping failed (HTTP {resp.status_code})",
                detail=f"path={path}",
            )

        try:
            return SessionPingResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise SessionServiceError(
                message="Session ping response malformed",
                detail=f"path={path}, error={exc}",
            ) from exc

    async def logout(self) -> None:
        path = self._settings.LOGOUT_PATH
        try:
            resp = await self._client.post(path)
        except httpx.HTTPError as exc:
            raise SessionUnreachableError(
                message="Logout unreachable",
                detail=f"path={path}, error={exc}",
            ) from exc
        if resp.is_error:
            raise SessionServiceError(
                message=f"Logout failed (HTTP {resp.status_code})",
                detail=f"path={path}",
            )
        logger.info("server_logout_complete")
