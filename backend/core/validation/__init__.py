"""Declarative Validation System

Schemas are the single source of truth for types and validation rules.
Validation happens at the intake boundary with parse-don't-validate
semantics; failures are structured issue lists, never bare strings.

Key Features:
- BaseSchema with strict, parse-don't-validate semantics
- Annotated type validators for declarative constraints
- Explicit opt-in coercion returning Result values
- Structured error accumulation (fail-fast or collect-all)
- Pure schema derivation (extend / pick / omit / partial / required)

Usage:
    from core.validation import BaseSchema, Field, UUIDv4, Timestamp

    class Signup(BaseSchema):
        id: UUIDv4
        created_at: Timestamp = Field(alias="createdAt")

    match Signup.parse_result(payload):
        case Ok(signup): ...
        case Err(error): error.to_dict()
"""

from .schema import (
    BaseSchema,
    RequestSchema,
    Field,
    ValidationMode,
    ValidationConfig,
)

from .annotated import (
    Trimmed,
    LowerCase,
    NonEmpty,
    UUIDv4Format,
    EmailPattern,
    MinLen,
    MaxLen,
    Pattern,
    RejectInvalidTimestamp,
    NonEmptyStr,
    UUIDv4,
    Timestamp,
    UUID_V4_PATTERN,
    HTML5_EMAIL_PATTERN,
    SIMPLE_EMAIL_PATTERN,
)

from .errors import (
    ValidationError,
    ValidationErrorDetail,
    ValidationErrorAccumulator,
    FailFastAccumulator,
    CollectAllAccumulator,
    create_accumulator,
)

from .coercion import (
    CoercionRule,
    StringToInt,
    StringToFloat,
    StringToBool,
    ISO8601ToDateTime,
    ISO8601ToDate,
    ExplicitCoercion,
    DEFAULT_COERCER,
    coerce,
    coerce_or_none,
    InvalidTimestamp,
    construct_timestamp,
    string_bool,
    StringBool,
    CoercedInt,
)

from .derive import (
    FieldSpec,
    SchemaShape,
    shape_of,
    extend,
    merge,
    pick,
    omit,
    partial,
    required,
    build,
)

__all__ = [
    "BaseSchema",
    "RequestSchema",
    "Field",
    "ValidationMode",
    "ValidationConfig",
    "Trimmed",
    "LowerCase",
    "NonEmpty",
    "UUIDv4Format",
    "EmailPattern",
    "MinLen",
    "MaxLen",
    "Pattern",
    "RejectInvalidTimestamp",
    "NonEmptyStr",
    "UUIDv4",
    "Timestamp",
    "UUID_V4_PATTERN",
    "HTML5_EMAIL_PATTERN",
    "SIMPLE_EMAIL_PATTERN",
    "ValidationError",
    "ValidationErrorDetail",
    "ValidationErrorAccumulator",
    "FailFastAccumulator",
    "CollectAllAccumulator",
    "create_accumulator",
    "CoercionRule",
    "StringToInt",
    "StringToFloat",
    "StringToBool",
    "ISO8601ToDateTime",
    "ISO8601ToDate",
    "ExplicitCoercion",
    "DEFAULT_COERCER",
    "coerce",
    "coerce_or_none",
    "InvalidTimestamp",
    "construct_timestamp",
    "string_bool",
    "StringBool",
    "CoercedInt",
    "FieldSpec",
    "SchemaShape",
    "shape_of",
    "extend",
    "merge",
    "pick",
    "omit",
    "partial",
    "required",
    "build",
]
