from __future__ import annotations

from fastapi import APIRouter

from reunion_session.api.v1 import auth, health

api_router = APIRouter(prefix="/api")
api_router.include_router(health.router, prefix="/v1", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
