from __future__ import annotations

from typing import Protocol
from urllib.parse import quote

from reunion_session.core.logging import get_logger

logger = get_logger(__name__)


class Navigator(Protocol):
    def current_path(self) -> str: ...

    def navigate(self, url: str) -> None: ...


class HistoryNavigator:
    """In-memory location and history of one tab."""

    def __init__(self, path: str = "/") -> None:
        self._path = path
        self.history: list[str] = [path]

    def current_path(self) -> str:
        return self._path

    def navigate(self, url: str) -> None:
        logger.info("navigate", url=url)
        self._path = url
        self.history.append(url)


def timeout_login_url(login_path: str, return_to: str) -> str:
    """Login URL that brings the user back to ``return_to`` after re-authenticating."""
    # Same character set as JavaScript's encodeURIComponent.
    next_path = quote(return_to, safe="!~*'()")
    return f"{login_path}?reason=timeout&next={next_path}"
