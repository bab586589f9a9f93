"""
Exception → JSON mapping for the whole API.

Every error response has the same envelope:
    {"success": false, "statusCode": 404, "timestamp": "...",
     "path": "/api/v1/posts/9", "method": "GET", "message": "Post not found"}
"""
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portlink.config.settings import settings
from portlink.services.exceptions import PortLinkError
from portlink.utils.logger import get_logger

logger = get_logger(__name__)


def error_body(request: Request, status_code: int, message: Any) -> dict:
    return {
        "success": False,
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
        "method": request.method,
        "message": message,
    }


def _log(request: Request, status_code: int, message: Any, exc: Exception = None) -> None:
    prefix = f"{request.method} {request.url.path} {status_code}"
    if status_code >= 500:
        logger.error(f"{prefix} - {message}", exc_info=exc)
    else:
        logger.warning(f"{prefix} - {message}")


async def portlink_error_handler(request: Request, exc: PortLinkError) -> JSONResponse:
    _log(request, exc.status_code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.status_code, exc.message),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = error_body(request, exc.status_code, exc.detail)
    # Structured details (e.g. the 429 payload) are merged into the envelope
    if isinstance(exc.detail, dict):
        body.update(exc.detail)
    _log(request, exc.status_code, body["message"])
    return JSONResponse(
        status_code=exc.status_code,
        content=body,
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    _log(request, status.HTTP_422_UNPROCESSABLE_ENTITY, messages)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(request, status.HTTP_422_UNPROCESSABLE_ENTITY, messages),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything not raised on purpose: 500, raw message only in development."""
    message = str(exc) if settings.is_development else "Internal server error"
    _log(request, status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), exc=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(request, status.HTTP_500_INTERNAL_SERVER_ERROR, message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortLinkError, portlink_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
