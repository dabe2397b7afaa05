from __future__ import annotations


class ReunionSessionError(Exception):
    """Base exception for all reunion session errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)


class SessionServiceError(ReunionSessionError):
    status_code = 502
    error_code = "SESSION_SERVICE_FAILED"


class SessionUnreachableError(SessionServiceError):
    status_code = 503
    error_code = "SESSION_SERVICE_UNREACHABLE"


class SessionGoneError(ReunionSessionError):
    """The session API answered 401/403: the server-side session no longer exists."""

    status_code = 401
    error_code = "SESSION_GONE"

    def __init__(self, message: str, http_status: int, detail: str | None = None) -> None:
        self.http_status = http_status
        super().__init__(message, detail)


class SessionExpiredError(ReunionSessionError):
    status_code = 401
    error_code = "SESSION_EXPIRED"


class InvalidCredentialsError(ReunionSessionError):
    status_code = 401
    error_code = "AUTH_FAILED"
