from __future__ import annotations

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

import httpx


def with_retry(max_retries: int = 3, backoff_factor: float = 0.5):
    """Exponential backoff retry decorator for session API reads."""
    return retry(
        retry=retry_if_exception_type((httpx.TransportError, httpx.TimeoutException)),
        stop=stop_after_attempt(max(max_retries, 1)),
        wait=wait_exponential(multiplier=backoff_factor, min=backoff_factor, max=10),
        reraise=True,
    )
