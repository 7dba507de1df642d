"""Annotated Type Validators for Declarative Field Constraints

Use Python's Annotated type hint with Pydantic v2 for declarative,
composable validation. Validators run in order and can be combined.

Usage:
    from core.validation.annotated import Trimmed, LowerCase, MinLen, MaxLen, UUIDv4

    class Signup(BaseSchema):
        id: UUIDv4
        handle: Annotated[str, Trimmed, LowerCase, MinLen(3), MaxLen(50)]
        created_at: Timestamp
"""
from __future__ import annotations

from typing import Annotated, Any
from datetime import datetime
import re

from pydantic import (
    BeforeValidator,
    AfterValidator,
    GetCoreSchemaHandler,
    GetJsonSchemaHandler,
)
from pydantic_core import CoreSchema, PydanticCustomError, core_schema
from pydantic.json_schema import JsonSchemaValue

from .coercion import InvalidTimestamp


# ============================================================================
# String Transformers (BeforeValidator - run before type validation)
# ============================================================================

_trim = lambda v: v.strip() if isinstance(v, str) else v
_lower = lambda v: v.lower() if isinstance(v, str) else v

Trimmed = BeforeValidator(_trim)
LowerCase = BeforeValidator(_lower)


# ============================================================================
# Format Validators (AfterValidator - run after type validation)
# ============================================================================

UUID_V4_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-4[0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}$"
)

# WHATWG <input type="email"> rule
HTML5_EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

SIMPLE_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def _non_empty(v: str) -> str:
    if not v.strip(): raise ValueError("String cannot be empty or whitespace-only")
    return v


def _uuid_v4(v: str) -> str:
    """Keep the canonical string; only check its shape."""
    if not UUID_V4_PATTERN.match(v):
        raise PydanticCustomError("uuid_v4", "Invalid UUID v4: {value}", {"value": v})
    return v


NonEmpty = AfterValidator(_non_empty)
UUIDv4Format = AfterValidator(_uuid_v4)


class EmailPattern:
    """Email shape check against a caller-supplied regex."""
    __slots__ = ("pattern",)

    def __init__(self, pattern: re.Pattern[str] | str = SIMPLE_EMAIL_PATTERN):
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def __get_pydantic_core_schema__(self, source_type: type, handler: GetCoreSchemaHandler) -> CoreSchema:
        return core_schema.no_info_after_validator_function(self._validate, handler(source_type))

    def _validate(self, v: str) -> str:
        if not self.pattern.match(v):
            raise PydanticCustomError("email_pattern", "Invalid email address: {value}", {"value": v})
        return v

    def __get_pydantic_json_schema__(self, core_schema: CoreSchema, handler: GetJsonSchemaHandler) -> JsonSchemaValue:
        return {**handler(core_schema), "format": "email", "pattern": self.pattern.pattern}


# ============================================================================
# Length Validators
# ============================================================================

class MinLen:
    """Minimum length validator factory."""
    __slots__ = ("min_length",)

    def __init__(self, min_length: int): self.min_length = min_length

    def __get_pydantic_core_schema__(self, source_type: type, handler: GetCoreSchemaHandler) -> CoreSchema:
        return core_schema.no_info_after_validator_function(self._validate, handler(source_type))

    def _validate(self, v: Any) -> Any:
        if hasattr(v, "__len__") and len(v) < self.min_length:
            raise ValueError(f"Length must be at least {self.min_length}, got {len(v)}")
        return v

    def __get_pydantic_json_schema__(self, core_schema: CoreSchema, handler: GetJsonSchemaHandler) -> JsonSchemaValue:
        return {**handler(core_schema), "minLength": self.min_length}


class MaxLen:
    """Maximum length validator factory."""
    __slots__ = ("max_length",)

    def __init__(self, max_length: int): self.max_length = max_length

    def __get_pydantic_core_schema__(self, source_type: type, handler: GetCoreSchemaHandler) -> CoreSchema:
        return core_schema.no_info_after_validator_function(self._validate, handler(source_type))

    def _validate(self, v: Any) -> Any:
        if hasattr(v, "__len__") and len(v) > self.max_length:
            raise ValueError(f"Length must be at most {self.max_length}, got {len(v)}")
        return v

    def __get_pydantic_json_schema__(self, core_schema: CoreSchema, handler: GetJsonSchemaHandler) -> JsonSchemaValue:
        return {**handler(core_schema), "maxLength": self.max_length}


class Pattern:
    """Regex pattern validator factory."""
    __slots__ = ("pattern", "description", "_compiled")

    def __init__(self, pattern: str, description: str | None = None):
        self.pattern, self.description, self._compiled = pattern, description or pattern, re.compile(pattern)

    def __get_pydantic_core_schema__(self, source_type: type, handler: GetCoreSchemaHandler) -> CoreSchema:
        return core_schema.no_info_after_validator_function(self._validate, handler(source_type))

    def _validate(self, v: str) -> str:
        if not self._compiled.match(v): raise ValueError(f"Value must match pattern: {self.description}")
        return v

    def __get_pydantic_json_schema__(self, core_schema: CoreSchema, handler: GetJsonSchemaHandler) -> JsonSchemaValue:
        return {**handler(core_schema), "pattern": self.pattern}


# ============================================================================
# DateTime Validators
# ============================================================================

def _reject_invalid_timestamp(v: Any) -> Any:
    """Turn the intake's InvalidTimestamp marker into a typed issue."""
    if isinstance(v, InvalidTimestamp):
        raise PydanticCustomError("invalid_date", "Invalid date: {raw}", {"raw": repr(v.raw)})
    return v


RejectInvalidTimestamp = BeforeValidator(_reject_invalid_timestamp)


# ============================================================================
# Pre-built Annotated Types
# ============================================================================

NonEmptyStr = Annotated[str, Trimmed, NonEmpty]
UUIDv4 = Annotated[str, UUIDv4Format]
Timestamp = Annotated[datetime, RejectInvalidTimestamp]
