from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from reunion_session.core.exceptions import ReunionSessionError
from reunion_session.core.logging import get_logger
from reunion_session.schemas.responses import ErrorResponse

logger = get_logger(__name__)


async def session_exception_handler(request: Request, exc: ReunionSessionError) -> JSONResponse:
    logger.warning(
        "session_error",
        error_code=exc.error_code,
        message=exc.message,
        detail=exc.detail,
        path=request.url.path,
    )
    body = ErrorResponse(
        error_code=exc.error_code,
        message=exc.message,
        detail=exc.detail,
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))
