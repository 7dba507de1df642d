"""Explicit Opt-in Coercion

Schemas are strict: a string never silently becomes an int, bool or
datetime. Where raw text has to be turned into a typed value (form input,
environment variables) a coercion rule is applied explicitly, returning a
Result instead of raising.

The form intake uses construct_timestamp(), which never fails: input that
cannot be turned into a datetime yields an InvalidTimestamp marker that the
schema later rejects.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, TypeVar, Generic, Annotated, Iterable
from dataclasses import dataclass, field
from datetime import datetime, date, timezone

from pydantic import BeforeValidator

from core.errors import AppError, Ok, Err, Result, invalid_date, invalid_format, invalid_type

T = TypeVar("T")
S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class CoercionRule(ABC, Generic[S, T]):
    """A single explicit conversion from raw input to a target type."""

    @property
    @abstractmethod
    def target_type(self) -> type[T]:
        """Type this rule coerces to."""

    @abstractmethod
    def coerce(self, value: Any) -> Result[T, AppError]:
        """Coerce value to target type."""

    def __call__(self, value: Any) -> Result[T, AppError]:
        return self.coerce(value)


@dataclass(frozen=True, slots=True)
class StringToInt(CoercionRule[str, int]):
    """Coerce string to integer."""

    @property
    def target_type(self) -> type[int]:
        return int

    def coerce(self, value: Any) -> Result[int, AppError]:
        if not isinstance(value, str):
            return invalid_type(value, "int", origin="coercion")
        try:
            return Ok(int(value.strip()))
        except ValueError:
            return invalid_format(value, "int", origin="coercion")


@dataclass(frozen=True, slots=True)
class StringToFloat(CoercionRule[str, float]):
    """Coerce string to float."""

    @property
    def target_type(self) -> type[float]:
        return float

    def coerce(self, value: Any) -> Result[float, AppError]:
        if not isinstance(value, str):
            return invalid_type(value, "float", origin="coercion")
        try:
            return Ok(float(value.strip()))
        except ValueError:
            return invalid_format(value, "float", origin="coercion")


TRUTHY_STRINGS = frozenset({"true", "1", "yes", "on", "y", "enabled"})
FALSY_STRINGS = frozenset({"false", "0", "no", "off", "n", "disabled"})


@dataclass(frozen=True, slots=True)
class StringToBool(CoercionRule[str, bool]):
    """Coerce string to boolean from explicit truthy/falsy vocabularies.

    Anything outside both vocabularies is an error, not False.
    """
    true_values: frozenset[str] = TRUTHY_STRINGS
    false_values: frozenset[str] = FALSY_STRINGS
    case_sensitive: bool = False

    @property
    def target_type(self) -> type[bool]:
        return bool

    def coerce(self, value: Any) -> Result[bool, AppError]:
        if not isinstance(value, str):
            return invalid_type(value, "bool", origin="coercion")

        key = value.strip() if self.case_sensitive else value.strip().lower()
        if key in self.true_values:
            return Ok(True)
        if key in self.false_values:
            return Ok(False)
        return invalid_format(
            value, f"one of {sorted(self.true_values | self.false_values)}", origin="coercion"
        )


@dataclass(frozen=True, slots=True)
class ISO8601ToDateTime(CoercionRule[str, datetime]):
    """Coerce ISO8601 string to datetime.

    Accepts a trailing "Z", explicit offsets, and date-only strings
    (midnight). Naive values get default_timezone when one is set.
    """
    default_timezone: timezone | None = None

    @property
    def target_type(self) -> type[datetime]:
        return datetime

    def _parse(self, value: str) -> datetime:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
        if dt.tzinfo is None and self.default_timezone:
            dt = dt.replace(tzinfo=self.default_timezone)
        return dt

    def coerce(self, value: Any) -> Result[datetime, AppError]:
        if not isinstance(value, str):
            return invalid_type(value, "datetime", origin="coercion")
        try:
            return Ok(self._parse(value))
        except ValueError as e:
            return invalid_date(value, str(e), origin="coercion")


@dataclass(frozen=True, slots=True)
class ISO8601ToDate(CoercionRule[str, date]):
    """Coerce ISO8601 string to date."""

    @property
    def target_type(self) -> type[date]:
        return date

    def coerce(self, value: Any) -> Result[date, AppError]:
        if not isinstance(value, str):
            return invalid_type(value, "date", origin="coercion")
        try:
            return Ok(date.fromisoformat(value.strip()))
        except ValueError as e:
            return invalid_date(value, str(e), origin="coercion")


@dataclass(frozen=True, slots=True)
class ExplicitCoercion:
    """Coercion registry with explicit rules.

    Usage:
        coercer = ExplicitCoercion()
        coercer.coerce("123", int)      # Ok(123)
        coercer.coerce("nope", int)     # Err(AppError)
    """
    rules: tuple[CoercionRule, ...] = field(default_factory=lambda: (
        StringToInt(),
        StringToFloat(),
        StringToBool(),
        ISO8601ToDateTime(default_timezone=timezone.utc),
        ISO8601ToDate(),
    ))

    def add_rule(self, rule: CoercionRule) -> ExplicitCoercion:
        """Return a new registry with rule tried before the existing ones."""
        return ExplicitCoercion(rules=(rule, *self.rules))

    def coerce(self, value: Any, target_type: type[T]) -> Result[T, AppError]:
        # bool is an int subclass; never let True satisfy an int target
        if isinstance(value, target_type) and not (target_type is int and isinstance(value, bool)):
            return Ok(value)

        last: Result[T, AppError] | None = None
        for rule in self.rules:
            if rule.target_type is target_type:
                last = rule.coerce(value)
                if last.is_ok():
                    return last

        return last if last is not None else invalid_type(value, target_type.__name__, origin="coercion")

    def coerce_or_none(self, value: Any, target_type: type[T]) -> T | None:
        return self.coerce(value, target_type).unwrap_or(None)


DEFAULT_COERCER = ExplicitCoercion()


def coerce(value: Any, target_type: type[T]) -> Result[T, AppError]:
    return DEFAULT_COERCER.coerce(value, target_type)


def coerce_or_none(value: Any, target_type: type[T]) -> T | None:
    return DEFAULT_COERCER.coerce_or_none(value, target_type)


# ============================================================================
# Timestamp construction for form input
# ============================================================================

@dataclass(frozen=True, slots=True)
class InvalidTimestamp:
    """A timestamp that could not be constructed; keeps the raw input."""
    raw: Any = None

    def __str__(self) -> str:
        return f"Invalid Date ({self.raw!r})"


_FORM_TIMESTAMP = ISO8601ToDateTime(default_timezone=timezone.utc)


def construct_timestamp(raw: Any) -> datetime | InvalidTimestamp:
    """Build a timezone-aware datetime from raw form text.

    Never raises. Absent, blank or unparseable input gives InvalidTimestamp.
    """
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return InvalidTimestamp(raw)
    match _FORM_TIMESTAMP.coerce(raw):
        case Ok(value):
            return value
        case Err(_):
            return InvalidTimestamp(raw)


# ============================================================================
# Pydantic integration
# ============================================================================

def _make_coercing_validator(rule: CoercionRule):
    """BeforeValidator body that applies rule to anything not already typed."""
    def validate(v: Any) -> Any:
        if isinstance(v, rule.target_type):
            return v
        result = rule.coerce(v)
        if result.is_err():
            raise ValueError(result.unwrap_err().message)
        return result.unwrap()
    return validate


def string_bool(
    truthy: Iterable[str] = TRUTHY_STRINGS,
    falsy: Iterable[str] = FALSY_STRINGS,
    *,
    case_sensitive: bool = False,
):
    """Annotated bool that accepts only the given string vocabularies."""
    fold = (lambda s: s) if case_sensitive else str.lower
    rule = StringToBool(
        true_values=frozenset(fold(s) for s in truthy),
        false_values=frozenset(fold(s) for s in falsy),
        case_sensitive=case_sensitive,
    )
    return Annotated[bool, BeforeValidator(_make_coercing_validator(rule))]


StringBool = string_bool()
CoercedInt = Annotated[int, BeforeValidator(_make_coercing_validator(StringToInt()))]
