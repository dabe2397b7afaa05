from __future__ import annotations

import httpx

from reunion_session.config import Settings


def create_http_client(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the client used for session API calls.

    The client keeps its own cookie jar, so the session cookie set at login is
    sent with every later call.
    """
    if transport is None:
        transport = httpx.AsyncHTTPTransport(
            retries=settings.MAX_RETRIES,
            verify=settings.VERIFY_SSL,
        )
    return httpx.AsyncClient(
        base_url=settings.API_BASE_URL,
        transport=transport,
        timeout=httpx.Timeout(settings.REQUEST_TIMEOUT),
        headers={"Accept": "application/json"},
        follow_redirects=True,
    )


async def close_http_client(client: httpx.AsyncClient) -> None:
    await client.aclose()
