"""Primitive validators

Ready-made validators for single values: coercion, literals, bounded and
transformed strings, email and UUID formats, ISO date/time text, bounded
numbers, enums and string-booleans.

Each validator is a pydantic TypeAdapter. Nothing is parsed at import
time; call validate_python() (raises) or check() (returns a Result).

Usage:
    from showcase.primitives import BOUNDED_STRING, check

    match check(BOUNDED_STRING, ""):
        case Ok(text): ...
        case Err(error): error.first_error.message
"""
from __future__ import annotations

import re
from datetime import date, datetime, time
from enum import Enum
from typing import Annotated, Any, Literal, TypeVar

from pydantic import (
    UUID4,
    AllowInfNan,
    BeforeValidator,
    EmailStr,
    Field,
    Strict,
    TypeAdapter,
    ValidationError as PydanticValidationError,
)
from pydantic_core import PydanticCustomError

from core.errors import Err, Ok, Result
from core.validation import (
    HTML5_EMAIL_PATTERN,
    SIMPLE_EMAIL_PATTERN,
    EmailPattern,
    ISO8601ToDate,
    ISO8601ToDateTime,
    LowerCase,
    MaxLen,
    MinLen,
    Trimmed,
    UUIDv4Format,
    ValidationError,
    string_bool,
)

T = TypeVar("T")


def check(adapter: TypeAdapter[T], value: Any) -> Result[T, ValidationError]:
    """Validate value, returning Ok(parsed) or Err(ValidationError)."""
    try:
        return Ok(adapter.validate_python(value))
    except PydanticValidationError as e:
        return Err(ValidationError.from_pydantic(e))


# ============================================================================
# Coercion
# ============================================================================

def _to_string(value: Any) -> str:
    """Render any value as text, with lowercase booleans and None as "null"."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# Truthiness: any non-empty string is true, including "false"
COERCED_STRING = TypeAdapter(Annotated[str, BeforeValidator(_to_string)])
COERCED_BOOL = TypeAdapter(Annotated[bool, BeforeValidator(bool)])


# ============================================================================
# Literals and strings
# ============================================================================

JOHN = TypeAdapter(Literal["John"])
TEN = TypeAdapter(Literal[10])

BOUNDED_STRING = TypeAdapter(Annotated[str, Strict(), MinLen(1), MaxLen(10)])
NORMALIZED_STRING = TypeAdapter(Annotated[str, Strict(), Trimmed, LowerCase])


# ============================================================================
# Formats
# ============================================================================

EMAIL = TypeAdapter(EmailStr)
EMAIL_CUSTOM = TypeAdapter(Annotated[str, Strict(), EmailPattern(SIMPLE_EMAIL_PATTERN)])
EMAIL_HTML5 = TypeAdapter(Annotated[str, Strict(), EmailPattern(HTML5_EMAIL_PATTERN)])

UUID_V4 = TypeAdapter(Annotated[str, Strict(), UUIDv4Format])
UUID_V4_OBJECT = TypeAdapter(UUID4)


_ISO_DATETIME = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?"
    r"(?P<zone>Z|[+-]\d{2}:\d{2})?$"
)
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ISO_TIME = re.compile(r"^\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?$")

_DATETIME = ISO8601ToDateTime()
_DATE = ISO8601ToDate()


def iso_datetime(*, offset: bool = False, local: bool = False):
    """ISO 8601 datetime text.

    "Z" is always accepted. offset=True also accepts "+02:00"-style
    offsets; local=True also accepts values with no zone at all.
    """
    def validate(value: Any) -> datetime:
        if not isinstance(value, str) or not (m := _ISO_DATETIME.match(value)):
            raise PydanticCustomError("iso_datetime", "Invalid ISO datetime: {value}", {"value": str(value)})
        zone = m.group("zone")
        if zone is None and not local:
            raise PydanticCustomError("iso_datetime", "Timezone required: {value}", {"value": value})
        if zone not in (None, "Z") and not offset:
            raise PydanticCustomError("iso_datetime", "Offsets not allowed, use Z: {value}", {"value": value})
        match _DATETIME.coerce(value):
            case Ok(parsed):
                return parsed
            case Err(error):
                raise PydanticCustomError("iso_datetime", "{reason}", {"reason": error.message})

    return TypeAdapter(Annotated[datetime, BeforeValidator(validate)])


def _iso_date(value: Any) -> date:
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise PydanticCustomError("iso_date", "Invalid ISO date: {value}", {"value": str(value)})
    match _DATE.coerce(value):
        case Ok(parsed):
            return parsed
        case Err(error):
            raise PydanticCustomError("iso_date", "{reason}", {"reason": error.message})


def _iso_time(value: Any) -> time:
    if not isinstance(value, str) or not _ISO_TIME.match(value):
        raise PydanticCustomError("iso_time", "Invalid ISO time: {value}", {"value": str(value)})
    try:
        return time.fromisoformat(value)
    except ValueError as e:
        raise PydanticCustomError("iso_time", "{reason}", {"reason": str(e)}) from e


ISO_DATE = TypeAdapter(Annotated[date, BeforeValidator(_iso_date)])
ISO_TIME = TypeAdapter(Annotated[time, BeforeValidator(_iso_time)])


# ============================================================================
# Numbers
# ============================================================================

NUMBER = TypeAdapter(Annotated[float, Strict(), AllowInfNan(False)])
BOUNDED_NUMBER = TypeAdapter(Annotated[float, Strict(), AllowInfNan(False), Field(ge=1, le=10)])


# ============================================================================
# Enums
# ============================================================================

class Animal(str, Enum):
    DOG = "dog"
    CAT = "cat"
    FISH = "fish"


E = TypeVar("E", bound=Enum)


def _members(enum_cls: type[Enum], values: tuple[Any, ...]) -> set[str]:
    names = set()
    for v in values:
        names.add(enum_cls(v.value if isinstance(v, Enum) else v).name)
    return names


def exclude_members(enum_cls: type[E], *values: Any, name: str | None = None) -> type[E]:
    """New enum without the given members. Unknown values raise ValueError."""
    dropped = _members(enum_cls, values)
    return Enum(
        name or f"{enum_cls.__name__}Excluding",
        {m.name: m.value for m in enum_cls if m.name not in dropped},
        type=str,
    )


def extract_members(enum_cls: type[E], *values: Any, name: str | None = None) -> type[E]:
    """New enum with only the given members. Unknown values raise ValueError."""
    kept = _members(enum_cls, values)
    return Enum(
        name or f"{enum_cls.__name__}Extract",
        {m.name: m.value for m in enum_cls if m.name in kept},
        type=str,
    )


def enum_adapter(enum_cls: type[Enum]) -> TypeAdapter:
    return TypeAdapter(enum_cls)


ANIMAL = TypeAdapter(Animal)
ANIMAL_NAME = TypeAdapter(Literal["dog", "cat", "fish"])


# ============================================================================
# String booleans
# ============================================================================

STRING_BOOL = TypeAdapter(string_bool())
STRING_BOOL_CUSTOM = TypeAdapter(string_bool(truthy=("yes", "true", "1"), falsy=("no", "false", "0")))
