from __future__ import annotations

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TIMEOUT_SECONDS = 1200


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Session API
    API_BASE_URL: str = "http://localhost:8080"
    SESSION_INFO_PATH: str = "/api/auth/session-info"
    SESSION_PING_PATH: str = "/api/auth/session-ping"
    LOGOUT_PATH: str = "/api/auth/logout"
    LOGIN_PAGE_PATH: str = "/login"

    # HTTP
    REQUEST_TIMEOUT: int = 10
    MAX_RETRIES: int = 3
    BACKOFF_FACTOR: float = 0.5
    VERIFY_SSL: bool = True

    # Timeout UX
    WARNING_LEAD_SECONDS: int = 120
    PING_THROTTLE_MS: int = 60_000
    FALLBACK_TIMEOUT_SECONDS: int = DEFAULT_TIMEOUT_SECONDS
    AUTH_GRACE_MS: int = 30_000

    # Local auth state
    LOGIN_FLAG_KEY: str = "profile"
    AUTH_STORE_PATH: str = ""

    # Server session
    SESSION_TIMEOUT: str = "20m"
    SESSION_COOKIE_NAME: str = "SESSION"
    SESSION_COOKIE_SECURE: bool = False
    LOGIN_USERNAME: str = ""
    LOGIN_PASSWORD: SecretStr = SecretStr("")

    # Logging
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    @property
    def session_timeout_seconds(self) -> int:
        return parse_timeout_seconds(self.SESSION_TIMEOUT)


def parse_timeout_seconds(value: str | None) -> int:
    """Parse duration strings like "20m", "1800s", "1h" or plain seconds."""
    if value is None or not value.strip():
        return DEFAULT_TIMEOUT_SECONDS
    value = value.strip().lower()
    try:
        if value.endswith("m"):
            return int(value[:-1]) * 60
        if value.endswith("h"):
            return int(value[:-1]) * 3600
        if value.endswith("s"):
            return int(value[:-1])
        return int(value)
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS
