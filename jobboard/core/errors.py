"""
Error taxonomy and JSON exception handlers.

Every failure surfaces to the client as:
    {"error": "<message>"}            (optionally with "details")

Handlers are registered in jobboard.main.
"""

import logging
from typing import Any, List, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class BadRequest(AppError):
    status_code = 400
    default_message = "Bad request"


class Unauthenticated(AppError):
    status_code = 401
    default_message = "Unauthenticated"


class InvalidCredentials(AppError):
    status_code = 401
    default_message = "Invalid admin credentials"


class IdentityVerificationFailed(AppError):
    status_code = 401
    default_message = "Google authentication failed"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Conflict"


class UpstreamFailure(AppError):
    status_code = 500
    default_message = "Upstream service error"


class InvalidToken(Exception):
    """Raised by the token codec; converted to Unauthenticated at the boundary."""


class StoreError(Exception):
    """Raised by the database and file-storage adapters."""


def validation_details(errors: List[dict]) -> List[dict]:
    """Keep only JSON-safe keys of pydantic error entries."""
    return [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in errors
    ]


def bad_request_from(exc: ValidationError) -> BadRequest:
    return BadRequest("Invalid request", details=validation_details(exc.errors()))


def _error_response(status_code: int, message: str, details: Optional[List[Any]] = None) -> JSONResponse:
    body = {"error": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    response = _error_response(exc.status_code, exc.message, exc.details)
    if headers:
        response.headers.update(headers)
    return response


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(400, "Invalid request", validation_details(exc.errors()))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail))


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("%s %s upstream failure: %s", request.method, request.url.path, exc)
    return _error_response(UpstreamFailure.status_code, UpstreamFailure.default_message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s unhandled error", request.method, request.url.path)
    return _error_response(500, "Internal server error")
