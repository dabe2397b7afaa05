from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from reunion_session.schemas.enums import ErrorCode


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "reunion-session-api"
    session_timeout_seconds: int
    active_sessions: int = 0


class SessionInfoResponse(BaseModel):
    """Server-configured idle timeout, fetched once per login session."""

    model_config = ConfigDict(populate_by_name=True)

    timeout_seconds: int = Field(..., gt=0, alias="timeoutSeconds")
    authenticated: bool = True


class SessionPingResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    alive: bool
    timeout_seconds: int | None = Field(default=None, gt=0, alias="timeoutSeconds")


class LoginResponse(BaseModel):
    username: str


class LogoutResponse(BaseModel):
    status: str = "logged_out"


class DialogState(BaseModel):
    """What the warning dialog needs to render itself."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    show_warning: bool = Field(default=False, alias="showWarning")
    seconds_left: int = Field(default=0, ge=0, alias="secondsLeft")


class DialogView(BaseModel):
    open: bool
    title: str
    countdown: str
    message: str
    hint: str
    actions: list[str] = Field(default_factory=list)


class StorageEvent(BaseModel):
    """A change to shared local storage as seen by other tabs."""

    key: str
    old_value: str | None = None
    new_value: str | None = None
    origin: str | None = None


class ErrorResponse(BaseModel):
    error_code: ErrorCode
    message: str
    detail: str | None = None
