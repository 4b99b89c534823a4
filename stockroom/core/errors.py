from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class StockroomError(Exception):
    """Base class for failures a caller is expected to see."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StockroomError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class ConflictError(StockroomError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class NotFoundError(StockroomError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class UnauthorizedError(StockroomError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"


class StoreError(StockroomError):
    """Any data-access failure. The detail is logged, never returned."""

    code = "server_error"

    def __init__(self, message: str = "Server error") -> None:
        super().__init__(message)


class ConstraintError(StoreError):
    """A write was refused by a key or foreign key constraint. Still rendered as a 500."""


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def stockroom_exception_handler(request: Request, exc: StockroomError):
    message = exc.message
    if isinstance(exc, StoreError):
        message = "Server error"
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return ErrorEnvelope(status_code=exc.status_code, code=exc.code, message=message, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(
        status_code=exc.status_code,
        code="http_error",
        message=message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=422,
        code="validation_error",
        message="Validation failed",
        details={"errors": jsonable_errors(exc)},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("request.failed", extra={"extra_data": {"path": request.url.path}})
    return ErrorEnvelope(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="server_error",
        message="Server error",
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    # ``ctx`` may carry the raw exception object, which JSON cannot encode.
    errors = []
    for error in exc.errors():
        cleaned = {key: value for key, value in error.items() if key not in ("ctx", "input")}
        errors.append(cleaned)
    return errors


def register_exception_handlers(app) -> None:
    app.add_exception_handler(StockroomError, stockroom_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
