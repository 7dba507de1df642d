"""Validation Gateway

Hands a candidate record to the schema and returns the outcome as a
value: Ok(record) or Err(ValidationError). Nothing raised by the schema
or by a refinement escapes; an invalid submission is a reportable result,
never a crash.

Async refinements (checks that need to await something, e.g. a lookup)
run only after the record itself has parsed. Each returns zero or more
issues; any issue rejects the submission.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Generic, Iterable, Mapping, TypeVar

from core.errors import Ok, Err, Result
from core.logging import gateway_logger
from core.validation import (
    BaseSchema,
    ValidationError,
    ValidationErrorDetail,
    ValidationMode,
    create_accumulator,
)
from schemas.user import UserRecord

log = gateway_logger()

S = TypeVar("S", bound=BaseSchema)

Refinement = Callable[[Any], Awaitable[Iterable[ValidationErrorDetail] | None]]


class ValidationGateway(Generic[S]):
    """Non-throwing validation boundary for one schema.

    Usage:
        gateway = ValidationGateway(UserRecord)
        match gateway.validate(candidate):
            case Ok(user): ...
            case Err(error): error.details
    """

    __slots__ = ("schema", "refinements", "mode", "max_errors")

    def __init__(
        self,
        schema: type[S] = UserRecord,
        *,
        refinements: Iterable[Refinement] = (),
        mode: ValidationMode = ValidationMode.COLLECT_ALL,
        max_errors: int = 50,
    ):
        if max_errors < 1:
            raise ValueError(f"max_errors must be at least 1, got {max_errors}")
        self.schema = schema
        self.refinements = tuple(refinements)
        self.mode = mode
        self.max_errors = max_errors

    def with_refinements(self, *refinements: Refinement) -> ValidationGateway[S]:
        return ValidationGateway(
            self.schema,
            refinements=(*self.refinements, *refinements),
            mode=self.mode,
            max_errors=self.max_errors,
        )

    def _reject(self, details: Iterable[ValidationErrorDetail], message: str = "Validation failed") -> Err[ValidationError]:
        accumulator = create_accumulator(self.mode, self.max_errors)
        for detail in details:
            if not accumulator.add_error(detail):
                break
        return Err(accumulator.to_validation_error(
            message, sensitive_fields=getattr(self.schema, "_sensitive_fields", None),
        ))

    def validate(self, candidate: Mapping[str, Any]) -> Result[S, ValidationError]:
        """Validate synchronously. Refinements are not run here."""
        try:
            return Ok(self.schema.parse(candidate))
        except ValidationError as e:
            log.debug("schema_rejected", schema=self.schema.__name__, paths=sorted(e.paths))
            return self._reject(e.details)
        except Exception as e:
            log.exception("schema_crashed", schema=self.schema.__name__, error_type=type(e).__name__)
            return self._reject([ValidationErrorDetail(
                field_path="$",
                constraint="internal_error",
                message=f"Validation could not complete: {e}",
            )])

    async def validate_async(self, candidate: Mapping[str, Any]) -> Result[S, ValidationError]:
        """Validate, then await every refinement against the parsed record."""
        result = self.validate(candidate)
        if result.is_err() or not self.refinements:
            return result

        record = result.unwrap()
        outcomes = await asyncio.gather(
            *(refine(record) for refine in self.refinements),
            return_exceptions=True,
        )

        issues: list[ValidationErrorDetail] = []
        for refine, outcome in zip(self.refinements, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                log.warning(
                    "refinement_failed",
                    refinement=getattr(refine, "__name__", repr(refine)),
                    error=str(outcome),
                )
                issues.append(ValidationErrorDetail(
                    field_path="$",
                    constraint="refinement_error",
                    message=f"Check could not complete: {outcome}",
                ))
            elif outcome:
                issues.extend(outcome)

        return self._reject(issues) if issues else result


def refinement_issue(field: str, message: str, *, kind: str = "custom", value: Any = None) -> ValidationErrorDetail:
    """Shorthand for refinements reporting an issue on a record field."""
    return ValidationErrorDetail(field_path=field, constraint=kind, actual_value=value, message=message)
