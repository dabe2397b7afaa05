from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    SESSION_SERVICE_FAILED = "SESSION_SERVICE_FAILED"
    SESSION_SERVICE_UNREACHABLE = "SESSION_SERVICE_UNREACHABLE"
    SESSION_GONE = "SESSION_GONE"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    AUTH_FAILED = "AUTH_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TimeoutPhase(str, Enum):
    IDLE = "IDLE"
    ACTIVE = "ACTIVE"
    WARNING = "WARNING"
    LOGGED_OUT = "LOGGED_OUT"


class ResumeAction(str, Enum):
    VERIFY = "VERIFY"
    SHOW_WARNING = "SHOW_WARNING"
    REALIGN = "REALIGN"
