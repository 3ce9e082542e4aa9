"""Utility functions for mapping domain exceptions to HTTP responses."""

from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ....infrastructure.logging import get_logger
from ..constants import EXCEPTION_MAPPING, INTERNAL_ERROR_MESSAGE
from ..exceptions import DomainError, InternalError
from ..schemas import ErrorResponse

logger = get_logger(__name__)


def map_exception(error: DomainError) -> HTTPException:
    """Map a domain exception to a corresponding HTTP exception."""
    if isinstance(error, InternalError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR_MESSAGE)

    for exception_class, status_code in EXCEPTION_MAPPING.items():
        if isinstance(error, exception_class):
            return HTTPException(status_code=status_code, detail=str(error))

    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR_MESSAGE)


def handle_exception(error: Exception) -> HTTPException:
    """Translate any exception raised inside a route handler into an HTTPException.

    Unexpected exceptions are logged with their stack trace and reported with
    a generic message.

    Args:
        error: The exception to handle

    Returns:
        The HTTPException the route should raise.
    """
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, DomainError):
        return map_exception(error)

    logger.error("Unhandled error while serving request", exc_info=error)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR_MESSAGE)


def error_response(status_code: int, message: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=str(message)).model_dump())


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Register global handlers rendering every failure as ``{"success": false, "error": ...}``."""

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
        http_exception = map_exception(exc)
        return error_response(http_exception.status_code, http_exception.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(status.HTTP_400_BAD_REQUEST, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(exc.status_code, exc.detail)
