"""Exception handlers rendering every error in the API envelope."""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from movieswipe.config import settings
from movieswipe.schemas.common import failure

logger = logging.getLogger(__name__)


def api_error(status_code: int, message: str, error: str, headers: Optional[dict] = None) -> HTTPException:
    """Build an HTTPException whose detail carries an envelope message and code."""
    return HTTPException(
        status_code=status_code,
        detail={"message": message, "error": error},
        headers=headers,
    )


def unauthorized(message: str, error: str = "UNAUTHORIZED") -> HTTPException:
    return api_error(
        status.HTTP_401_UNAUTHORIZED,
        message,
        error,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        body = failure(exc.detail.get("message", ""), exc.detail.get("error", ""))
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        body = failure(f"Route {request.method} {request.url.path} not found", "NOT_FOUND")
    else:
        body = failure(str(exc.detail), "HTTP_ERROR")
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ())[1:])
        messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=failure("Validation failed", ", ".join(messages)),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=failure(
            "Internal server error",
            str(exc) if settings.DEBUG else "INTERNAL_SERVER_ERROR",
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
