"""Validation Error System

Structured issues with JSON paths, the kind of constraint violated, the
offending value (redacted if sensitive) and a suggested fix.

Error Format:
{
    "error": {
        "type": "validation_error",
        "message": "Validation failed",
        "mode": "collect_all",
        "error_count": 1,
        "errors": [
            {
                "field": "email",
                "constraint": "value_error",
                "value": "john@",
                "message": "value is not a valid email address: ...",
                "suggested_fix": "Provide a valid email (e.g., 'user@example.com')"
            }
        ]
    }
}
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Mapping, Sequence

from core.errors import AppError, ErrorCode
from .schema import ValidationMode

_JSON_SCALARS = (str, int, float, bool, type(None))


def _utf8_safe(text: str) -> str:
    # lone surrogates cannot be encoded into a UTF-8 response body
    return text.encode("utf-8", "backslashreplace").decode("utf-8")


def _plain(value: Any) -> Any:
    """Reduce an offending input to something a JSON encoder accepts."""
    if isinstance(value, str):
        return _utf8_safe(value)
    if isinstance(value, _JSON_SCALARS):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, Mapping):
        return {_utf8_safe(str(k)): _plain(v) for k, v in value.items()}
    return _utf8_safe(str(value))


@dataclass(frozen=True, slots=True)
class ValidationErrorDetail:
    """A single validation issue.

    - field_path: JSON path to offending field (e.g. "createdAt", "tags[0]")
    - constraint: kind of issue (pydantic error type, e.g. "string_too_short")
    - actual_value: the value that failed (may be redacted)
    - message: human-readable message
    - suggested_fix: actionable hint, when one is known
    """
    field_path: str
    constraint: str
    actual_value: Any = None
    message: str = ""
    suggested_fix: str | None = None

    def redact_if_sensitive(self, sensitive_fields: frozenset[str] | set[str] | None = None) -> ValidationErrorDetail:
        if not sensitive_fields: return self
        path_parts = self.field_path.replace("[", ".").replace("]", "").split(".")
        if any(part in sensitive_fields for part in path_parts):
            return ValidationErrorDetail(field_path=self.field_path, constraint=self.constraint, actual_value="[REDACTED]",
                message=self.message, suggested_fix=self.suggested_fix)
        return self

    @property
    def root_field(self) -> str:
        """First segment of the path: the form field the issue belongs to."""
        return self.field_path.split(".", 1)[0].split("[", 1)[0]

    def to_dict(self) -> dict[str, Any]:
        result = {"field": self.field_path, "constraint": self.constraint, "message": self.message}
        if self.actual_value is not None: result["value"] = _plain(self.actual_value)
        if self.suggested_fix: result["suggested_fix"] = self.suggested_fix
        return result

    @classmethod
    def from_pydantic_error(
        cls,
        error: Mapping[str, Any],
        *,
        sensitive_fields: frozenset[str] | None = None,
        hints: Mapping[str, str] | None = None,
    ) -> ValidationErrorDetail:
        """Create from one entry of pydantic's ValidationError.errors()."""
        loc = tuple(error.get("loc", ()))
        path = cls._format_path(loc)
        actual = error.get("input")
        if sensitive_fields and {str(p) for p in loc} & sensitive_fields: actual = "[REDACTED]"
        fix = cls._generate_suggested_fix(error)
        if fix is None and hints and loc: fix = hints.get(str(loc[0]))
        return cls(field_path=path, constraint=error.get("type", "validation_error"),
            actual_value=actual, message=error.get("msg", "Validation failed"), suggested_fix=fix)

    @staticmethod
    def _format_path(loc: Sequence[str | int]) -> str:
        """Format a pydantic location tuple as a JSON path."""
        if not loc: return "$"
        parts = []
        for segment in loc:
            if isinstance(segment, int): parts.append(f"[{segment}]")
            elif parts: parts.append(f".{_utf8_safe(str(segment))}")
            else: parts.append(_utf8_safe(str(segment)))
        return "".join(parts)

    @staticmethod
    def _generate_suggested_fix(error: Mapping[str, Any]) -> str | None:
        err_type = error.get("type", "")
        ctx = error.get("ctx") or {}

        fix_generators = {
            "string_too_short": lambda: f"Value must be at least {ctx.get('min_length', '?')} characters",
            "string_too_long": lambda: f"Truncate to {ctx.get('max_length', '?')} characters or less",
            "string_pattern_mismatch": lambda: f"Value must match pattern: {ctx.get('pattern', '?')}",
            "greater_than_equal": lambda: f"Use a value of {ctx.get('ge', '?')} or more",
            "less_than_equal": lambda: f"Use a value of {ctx.get('le', '?')} or less",
            "missing": lambda: "This field is required - provide a value",
            "extra_forbidden": lambda: "Remove this field - it is not allowed",
            "literal_error": lambda: f"Use exactly {ctx.get('expected', '?')}",
            "enum": lambda: f"Valid options: {ctx.get('expected', '?')}",
            "uuid_v4": lambda: "Provide a version 4 UUID (e.g., '3fa85f64-5717-4562-b3fc-2c963f66afa6')",
            "invalid_date": lambda: "Provide ISO8601 datetime (e.g., '2024-01-15T10:30:00Z')",
            "datetime_type": lambda: "Provide ISO8601 datetime (e.g., '2024-01-15T10:30:00Z')",
            "datetime_parsing": lambda: "Provide ISO8601 datetime (e.g., '2024-01-15T10:30:00Z')",
            "int_parsing": lambda: "Provide a valid integer number",
            "bool_parsing": lambda: "Provide true or false",
            "string_type": lambda: "Provide a string value",
            "union_tag_invalid": lambda: f"Use one of: {ctx.get('expected_tags', '?')}",
        }

        if err_type in fix_generators: return fix_generators[err_type]()
        if err_type == "value_error" and "email" in str(error.get("msg", "")):
            return "Provide a valid email (e.g., 'user@example.com')"
        return None


@dataclass
class ValidationError(Exception):
    """Validation failure carrying the full issue list."""
    message: str
    details: list[ValidationErrorDetail]
    mode: ValidationMode = ValidationMode.COLLECT_ALL
    sensitive_fields: frozenset[str] | None = None

    def __post_init__(self):
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.details: return self.message
        if len(self.details) == 1: return f"{(d := self.details[0]).field_path}: {d.message}"
        return f"{self.message} ({len(self.details)} errors)"

    @property
    def field_errors(self) -> dict[str, list[ValidationErrorDetail]]:
        """Group issues by field path."""
        result: dict[str, list[ValidationErrorDetail]] = {}
        for detail in self.details: result.setdefault(detail.field_path, []).append(detail)
        return result

    @property
    def paths(self) -> frozenset[str]:
        return frozenset(d.field_path for d in self.details)

    @property
    def first_error(self) -> ValidationErrorDetail | None: return self.details[0] if self.details else None

    def get_errors_for_field(self, field_path: str) -> list[ValidationErrorDetail]:
        return [d for d in self.details if d.field_path == field_path]

    def _visible_details(self, redact: bool = True) -> list[ValidationErrorDetail]:
        if redact and self.sensitive_fields:
            return [d.redact_if_sensitive(self.sensitive_fields) for d in self.details]
        return self.details

    def to_app_error(self) -> AppError:
        """Convert to AppError for the HTTP error handlers."""
        details = self._visible_details()

        if len(details) == 1:
            d = details[0]
            return AppError(code=ErrorCode.E2000_VALIDATION_GENERIC, message=f"{d.field_path}: {d.message}",
                metadata={"field": d.field_path, "constraint": d.constraint, "value": _plain(d.actual_value),
                    "suggested_fix": d.suggested_fix})

        return AppError(code=ErrorCode.E2000_VALIDATION_GENERIC, message=f"Validation failed: {len(details)} errors",
            metadata={"validation_mode": self.mode.value, "error_count": len(details),
                "errors": [d.to_dict() for d in details]})

    def to_dict(self, *, redact_sensitive: bool = True) -> dict[str, Any]:
        details = self._visible_details(redact_sensitive)
        return {"error": {"type": "validation_error", "message": self.message, "mode": self.mode.value,
            "error_count": len(details), "errors": [d.to_dict() for d in details]}}

    @classmethod
    def from_pydantic(
        cls,
        exc: Exception,
        *,
        mode: ValidationMode = ValidationMode.COLLECT_ALL,
        sensitive_fields: frozenset[str] | None = None,
        hints: Mapping[str, str] | None = None,
    ) -> ValidationError:
        """Create from a pydantic ValidationError."""
        if not hasattr(exc, "errors"):
            return cls(message=str(exc), details=[], mode=mode, sensitive_fields=sensitive_fields)
        return cls(message="Validation failed",
            details=[ValidationErrorDetail.from_pydantic_error(e, sensitive_fields=sensitive_fields, hints=hints)
                for e in exc.errors()],
            mode=mode, sensitive_fields=sensitive_fields)


class ValidationErrorAccumulator(ABC):
    """Abstract base for issue accumulation strategies."""

    @abstractmethod
    def add_error(self, detail: ValidationErrorDetail) -> bool:
        """Add an issue. Returns True if accumulation should continue."""

    @abstractmethod
    def get_errors(self) -> list[ValidationErrorDetail]:
        """Accumulated issues."""

    @property
    @abstractmethod
    def mode(self) -> ValidationMode:
        """The accumulation mode."""

    def has_errors(self) -> bool: return bool(self.get_errors())

    def to_validation_error(self, message: str = "Validation failed",
                            sensitive_fields: frozenset[str] | None = None) -> ValidationError | None:
        if not self.has_errors(): return None
        return ValidationError(message=message, details=self.get_errors(), mode=self.mode, sensitive_fields=sensitive_fields)


@dataclass
class FailFastAccumulator(ValidationErrorAccumulator):
    """Keeps only the first issue."""
    _error: ValidationErrorDetail | None = None

    @property
    def mode(self) -> ValidationMode: return ValidationMode.FAIL_FAST

    def add_error(self, detail: ValidationErrorDetail) -> bool:
        if self._error is None: self._error = detail
        return False

    def get_errors(self) -> list[ValidationErrorDetail]: return [self._error] if self._error else []


@dataclass
class CollectAllAccumulator(ValidationErrorAccumulator):
    """Gathers every issue up to max_errors."""
    _errors: list[ValidationErrorDetail] = field(default_factory=list)
    max_errors: int = 50

    @property
    def mode(self) -> ValidationMode: return ValidationMode.COLLECT_ALL

    def add_error(self, detail: ValidationErrorDetail) -> bool:
        if len(self._errors) < self.max_errors: self._errors.append(detail)
        return len(self._errors) < self.max_errors

    def get_errors(self) -> list[ValidationErrorDetail]: return self._errors.copy()


def create_accumulator(mode: ValidationMode, max_errors: int = 50) -> ValidationErrorAccumulator:
    return FailFastAccumulator() if mode == ValidationMode.FAIL_FAST else CollectAllAccumulator(max_errors=max_errors)
