"""Monadic Error Handling

- Result[T, E]: Ok | Err container for success/failure
- AppError: error with code, message, metadata and tracing context
- ErrorCode: hierarchical error code taxonomy
- Builders: ergonomic error construction
- Handlers: FastAPI integration

Usage:
    from core.errors import Ok, Err, Result

    match gateway.validate(candidate):
        case Ok(user):
            log.info("user_parsed", user=user.to_dict())
        case Err(error):
            log.error("user_validation_failed", errors=error.to_dict())
"""
from .types import (
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
    ErrorContext,
    from_exception,
    try_result,
    collect_results,
)

from .builders import (
    validation_error,
    required_field,
    invalid_format,
    invalid_type,
    invalid_date,
    not_found,
    internal_error,
)

from .handlers import (
    AppErrorException,
    register_error_handlers,
    result_to_response,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
    "ErrorContext",
    "from_exception",
    "try_result",
    "collect_results",
    "validation_error",
    "required_field",
    "invalid_format",
    "invalid_type",
    "invalid_date",
    "not_found",
    "internal_error",
    "AppErrorException",
    "register_error_handlers",
    "result_to_response",
]
