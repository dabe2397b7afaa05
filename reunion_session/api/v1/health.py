from __future__ import annotations

from fastapi import APIRouter, Depends

from reunion_session.api.deps import get_session_store
from reunion_session.clients.session_store import SessionStore
from reunion_session.schemas.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(store: SessionStore = Depends(get_session_store)) -> HealthResponse:
    return HealthResponse(
        session_timeout_seconds=store.ttl_seconds,
        active_sessions=store.active_count(),
    )
