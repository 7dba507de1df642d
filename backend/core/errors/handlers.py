"""FastAPI Exception Handlers

Converts AppErrors, ValidationErrors and stray exceptions raised inside
route handlers into structured JSON responses, logging each one.
"""
from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.logging import get_logger

from .types import AppError, ErrorCode, ErrorContext

log = get_logger("errors.handlers")


class AppErrorException(Exception):
    """Exception wrapper for AppError, for code paths that cannot return a Result."""

    def __init__(self, error: AppError):
        self.error = error
        super().__init__(str(error))


def _request_ids(request: Request) -> dict[str, str]:
    bound = structlog.contextvars.get_contextvars()
    return {
        "correlation_id": request.headers.get("X-Correlation-ID") or bound.get("correlation_id", ""),
        "request_id": request.headers.get("X-Request-ID", ""),
    }


def result_to_response(error: AppError) -> JSONResponse:
    """Convert AppError to JSONResponse, logging it at a level matching its status."""
    status_code = error.code.http_status

    log_method = log.warning if status_code < 500 else log.error
    log_method(
        "error_response",
        error_code=error.code.name,
        message=error.message,
        category=error.code.category,
        correlation_id=error.context.correlation_id,
        origin=error.context.origin,
        metadata=error.metadata,
    )

    return JSONResponse(status_code=status_code, content=error.to_dict())


async def app_error_handler(request: Request, exc: AppErrorException) -> JSONResponse:
    return result_to_response(exc.error.with_context(**_request_ids(request)))


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle standard HTTP exceptions (unknown routes, wrong methods, ...)."""
    code_map = {
        400: ErrorCode.E2000_VALIDATION_GENERIC,
        404: ErrorCode.E4010_NOT_FOUND,
        405: ErrorCode.E4015_METHOD_NOT_ALLOWED,
        409: ErrorCode.E5002_STATE_CONFLICT,
        422: ErrorCode.E2000_VALIDATION_GENERIC,
    }
    code = code_map.get(exc.status_code, ErrorCode.E9000_INTERNAL_GENERIC)

    error = AppError(
        code=code,
        message=str(exc.detail) if exc.detail else f"HTTP {exc.status_code}",
        context=ErrorContext(origin="http"),
    ).with_context(**_request_ids(request))

    return result_to_response(error)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI body/query validation failures with field detail."""
    from core.validation.errors import ValidationError, ValidationErrorDetail
    from core.validation.schema import ValidationMode

    validation_error = ValidationError(
        message="Request validation failed",
        details=[ValidationErrorDetail.from_pydantic_error(e) for e in exc.errors()],
        mode=ValidationMode.COLLECT_ALL,
    )
    error = validation_error.to_app_error().with_context(
        origin="request_validation", **_request_ids(request)
    )
    return result_to_response(error)


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle ValidationError raised out of a route (JSON intake endpoint)."""
    from core.validation.errors import ValidationError

    if not isinstance(exc, ValidationError):
        raise exc

    error = exc.to_app_error().with_context(origin="validation", **_request_ids(request))
    return result_to_response(error)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: converts to an internal error and logs the traceback."""
    from core.validation.errors import ValidationError

    if isinstance(exc, ValidationError):
        return await validation_error_handler(request, exc)

    error = AppError(
        code=ErrorCode.E9001_UNEXPECTED_ERROR,
        message="An unexpected error occurred",
        context=ErrorContext(origin="unhandled"),
        cause=exc,
    ).with_context(**_request_ids(request))

    log.exception(
        "unhandled_exception",
        error_type=type(exc).__name__,
        error_message=str(exc),
        correlation_id=error.context.correlation_id,
    )

    return result_to_response(error)


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers on a FastAPI app."""
    from core.validation.errors import ValidationError

    app.add_exception_handler(AppErrorException, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

