"""Exception handlers producing the JSON error envelope.

Every error response has the shape
`{statusCode, error, message, code?, path, timestamp}` plus any extra
fields carried by the domain error.
"""

from __future__ import annotations

from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from yogashna.core.errors import (
    BadRequestError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotAvailableError,
    NotFoundError,
)

logger = structlog.get_logger(__name__)

STATUS_BY_ERROR: dict[type[DomainError], int] = {
    BadRequestError: status.HTTP_400_BAD_REQUEST,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    NotAvailableError: status.HTTP_501_NOT_IMPLEMENTED,
}


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def error_response(
    request: Request,
    status_code: int,
    message: Any,
    code: str | None = None,
    **extra: Any,
) -> JSONResponse:
    body: dict[str, Any] = {
        "statusCode": status_code,
        "error": _status_phrase(status_code),
        "message": message,
    }
    if code:
        body["code"] = code
    body.update(extra)
    body["path"] = request.url.path
    body["timestamp"] = datetime.now(timezone.utc).isoformat()
    return JSONResponse(status_code=status_code, content=body)


def status_for(exc: DomainError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(
        "api.domain_error",
        path=request.url.path,
        status=status_code,
        code=exc.code,
        message=exc.message,
    )
    return error_response(request, status_code, exc.message, exc.code, **exc.extra)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(request, exc.status_code, exc.detail)


def _validation_message(error: dict[str, Any]) -> str:
    message = str(error.get("msg", "Invalid value"))
    if message.startswith("Value error, "):
        return message[len("Value error, "):]
    location = ".".join(str(part) for part in error.get("loc", ())[1:])
    return f"{location}: {message}" if location else message


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = [_validation_message(error) for error in exc.errors()]
    logger.info("api.validation_error", path=request.url.path, errors=messages)
    return error_response(request, status.HTTP_400_BAD_REQUEST, messages)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("api.unhandled_error", path=request.url.path)
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Unexpected error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
