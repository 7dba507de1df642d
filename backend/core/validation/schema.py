"""Core Schema System on Pydantic v2

Schemas are the single source of truth for types and validation rules.
Parse-don't-validate: an instance of a schema is proof that the data it
was built from satisfied every constraint.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Self
from dataclasses import dataclass

from pydantic import (
    BaseModel as PydanticBaseModel,
    ConfigDict,
    Field as PydanticField,
    ValidationError as PydanticValidationError,
)


class ValidationMode(str, Enum):
    """Validation accumulation strategy."""
    FAIL_FAST = "fail_fast"
    COLLECT_ALL = "collect_all"


@dataclass(frozen=True, slots=True)
class ValidationConfig:
    """Per-schema validation behaviour."""
    mode: ValidationMode = ValidationMode.COLLECT_ALL


def Field(
    default: Any = ...,
    *,
    alias: str | None = None,
    description: str | None = None,
    examples: list[Any] | None = None,
    title: str | None = None,
    min_length: int | None = None,
    max_length: int | None = None,
    pattern: str | None = None,
    ge: float | None = None,
    le: float | None = None,
    sensitive: bool = False,
    suggested_fix_template: str | None = None,
    **kwargs,
) -> Any:
    """Pydantic Field with schema extensions.

    Args:
        default: Default value or ... for required
        alias: Wire name of the field (e.g. camelCase form keys)
        description: Human-readable field description
        examples: Example values for documentation
        title: Field title for schemas
        min_length: Minimum string length
        max_length: Maximum string length
        pattern: Regex pattern for string validation
        ge: Inclusive minimum
        le: Inclusive maximum
        sensitive: Mark field as sensitive (redacted in errors)
        suggested_fix_template: Fallback suggested fix for issues on this field
    """
    pydantic_kwargs: dict[str, Any] = {"default": default}

    for key, value in (
        ("alias", alias),
        ("description", description),
        ("examples", examples),
        ("title", title),
        ("min_length", min_length),
        ("max_length", max_length),
        ("pattern", pattern),
        ("ge", ge),
        ("le", le),
    ):
        if value is not None:
            pydantic_kwargs[key] = value

    schema_extra: dict[str, Any] = {}
    if sensitive:
        schema_extra["x-sensitive"] = True
    if suggested_fix_template:
        schema_extra["x-suggested-fix"] = suggested_fix_template
    if schema_extra:
        pydantic_kwargs["json_schema_extra"] = schema_extra

    pydantic_kwargs.update(kwargs)
    return PydanticField(**pydantic_kwargs)


class BaseSchema(PydanticBaseModel):
    """Base schema with parse-don't-validate semantics.

    - Strict types: no silent str -> datetime or str -> int coercion
    - Unknown keys are rejected
    - Fields are addressable by alias (wire name) or attribute name
    """

    model_config = ConfigDict(
        strict=True,
        validate_assignment=True,
        validate_default=True,
        revalidate_instances="always",
        populate_by_name=True,
        use_enum_values=False,
        ser_json_timedelta="iso8601",
        json_schema_mode="validation",
        extra="forbid",
    )

    _validation_config: ClassVar[ValidationConfig] = ValidationConfig()
    _sensitive_fields: ClassVar[frozenset[str]] = frozenset()

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        """Collect sensitive field names once the model fields are known."""
        super().__pydantic_init_subclass__(**kwargs)
        sensitive: set[str] = set()
        for name, info in cls.model_fields.items():
            extra = info.json_schema_extra
            if isinstance(extra, dict) and extra.get("x-sensitive"):
                sensitive.add(name)
                if info.alias:
                    sensitive.add(info.alias)
        cls._sensitive_fields = frozenset(sensitive)

    @classmethod
    def parse(cls, data: dict[str, Any] | Any, *, strict: bool = True) -> Self:
        """Parse data into a validated instance.

        Raises core.validation.errors.ValidationError if data is invalid.
        """
        from .errors import ValidationError

        try:
            return cls.model_validate(data, strict=strict)
        except PydanticValidationError as e:
            error = ValidationError.from_pydantic(
                e,
                mode=cls._validation_config.mode,
                sensitive_fields=cls._sensitive_fields,
                hints=cls._field_hints(),
            )
            if cls._validation_config.mode == ValidationMode.FAIL_FAST:
                error.details[1:] = []
            raise error from e

    @classmethod
    def parse_result(cls, data: dict[str, Any] | Any, *, strict: bool = True):
        """Parse data returning a Result instead of raising."""
        from core.errors import Ok, Err
        from .errors import ValidationError
        try: return Ok(cls.parse(data, strict=strict))
        except ValidationError as e: return Err(e)

    @classmethod
    def _field_hints(cls) -> dict[str, str]:
        """Per-field suggested fixes declared via Field(suggested_fix_template=...)."""
        hints: dict[str, str] = {}
        for name, info in cls.model_fields.items():
            extra = info.json_schema_extra
            if isinstance(extra, dict) and (fix := extra.get("x-suggested-fix")):
                hints[info.alias or name] = fix
        return hints

    def to_dict(
        self,
        *,
        mode: str = "python",
        exclude_none: bool = False,
        by_alias: bool = True,
    ) -> dict[str, Any]:
        """Serialize to dictionary, keyed by wire names unless by_alias=False."""
        return self.model_dump(mode=mode, exclude_none=exclude_none, by_alias=by_alias)


class RequestSchema(BaseSchema):
    """Schema for request bodies: like BaseSchema, but trims surrounding whitespace."""
    model_config = ConfigDict(**BaseSchema.model_config, str_strip_whitespace=True)

