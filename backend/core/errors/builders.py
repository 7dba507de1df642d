"""Error Builders

Ergonomic constructors for typed errors. Each builder returns an Err
wrapping an AppError with the appropriate code and metadata.
"""
from typing import Any

from .types import AppError, ErrorCode, ErrorContext, Err


# =============================================================================
# Validation Errors (E2xxx)
# =============================================================================

def validation_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC,
    field: str | None = None,
    value: Any = None,
    origin: str = "",
    **metadata,
) -> Err[AppError]:
    """Create validation error."""
    meta = {"field": field, "value": value, **metadata}
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in meta.items() if v is not None},
    ))


def required_field(field: str, origin: str = "") -> Err[AppError]:
    return validation_error(
        f"Required field '{field}' is missing",
        code=ErrorCode.E2001_REQUIRED_FIELD_MISSING,
        field=field,
        origin=origin,
    )


def invalid_format(
    value: Any,
    expected: str,
    *,
    field: str | None = None,
    origin: str = "",
) -> Err[AppError]:
    return validation_error(
        f"Cannot read {value!r} as {expected}",
        code=ErrorCode.E2002_INVALID_FORMAT,
        field=field,
        value=value,
        origin=origin,
        expected=expected,
    )


def invalid_type(value: Any, target: str, origin: str = "") -> Err[AppError]:
    return validation_error(
        f"Cannot coerce {type(value).__name__} to {target}",
        code=ErrorCode.E2004_INVALID_TYPE,
        origin=origin,
        source_type=type(value).__name__,
        target_type=target,
    )


def invalid_date(value: Any, reason: str = "", origin: str = "") -> Err[AppError]:
    msg = f"Cannot construct a timestamp from {value!r}"
    if reason:
        msg += f": {reason}"
    return validation_error(
        msg,
        code=ErrorCode.E2012_INVALID_DATE,
        value=value,
        origin=origin,
        format="ISO8601",
    )


# =============================================================================
# Lookup / Internal Errors
# =============================================================================

def not_found(resource: str, origin: str = "") -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E4010_NOT_FOUND,
        message=f"{resource} not found",
        context=ErrorContext(origin=origin),
        metadata={"resource": resource},
    ))


def internal_error(
    message: str = "An unexpected error occurred",
    *,
    origin: str = "",
    cause: Exception | None = None,
) -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E9001_UNEXPECTED_ERROR,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={"error_type": type(cause).__name__} if cause else {},
        cause=cause,
    ))
