"""Composite validators

Unions, tagged unions, records, recursive schemas, transform pipelines
and refinements, sync and async. Like the primitives these are
definitions only; validate them with showcase.primitives.check().
"""
from __future__ import annotations

import asyncio
from typing import Annotated, Iterable, Literal, Union

from pydantic import Field, Strict, TypeAdapter, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from core.validation import (
    BaseSchema,
    CoercedInt,
    Field as SchemaField,
    LowerCase,
    MaxLen,
    MinLen,
    NonEmptyStr,
    Pattern,
    RequestSchema,
    ValidationErrorDetail,
)
from intake.gateway import ValidationGateway, refinement_issue
from schemas.user import UserRecord


# ============================================================================
# Unions
# ============================================================================

STRING_OR_NUMBER = TypeAdapter(Union[Annotated[str, Strict()], Annotated[float, Strict()]])


class Success(BaseSchema):
    status: Literal["success"]
    data: str


class Failure(BaseSchema):
    status: Literal["failed"]
    error: str


# Tagged by "status": only the matching branch is tried
RESPONSE = TypeAdapter(Annotated[Union[Success, Failure], Field(discriminator="status")])


# ============================================================================
# Records
# ============================================================================

SlugKey = Annotated[str, Strict(), Pattern(r"^[a-z][a-z0-9_]*$", "lowercase slug")]

SCORES = TypeAdapter(dict[SlugKey, Annotated[int, Strict(), Field(ge=0)]])


# ============================================================================
# Recursive
# ============================================================================

class Category(BaseSchema):
    name: NonEmptyStr
    subcategories: list[Category] = SchemaField(default_factory=list)

    def walk(self) -> Iterable[str]:
        """Names depth-first, parent before children."""
        yield self.name
        for child in self.subcategories:
            yield from child.walk()


Category.model_rebuild()


# ============================================================================
# Transforms and pipes
# ============================================================================

class Signup(RequestSchema):
    """Surrounding whitespace is trimmed, the handle lowercased, the age read from text."""
    handle: Annotated[str, LowerCase, MinLen(3), MaxLen(20)]
    age: Annotated[CoercedInt, Field(ge=13, le=130)]


# ============================================================================
# Refinements
# ============================================================================

class PasswordChange(BaseSchema):
    password: str = SchemaField(min_length=8, sensitive=True)
    confirm: str = SchemaField(sensitive=True)

    @field_validator("confirm")
    @classmethod
    def passwords_match(cls, v: str, info: ValidationInfo) -> str:
        if v != info.data.get("password"):
            raise PydanticCustomError("password_mismatch", "Passwords do not match")
        return v


async def timestamps_in_order(user: UserRecord) -> list[ValidationErrorDetail]:
    if user.updated_at < user.created_at:
        return [refinement_issue(
            "updatedAt",
            "updatedAt must not be earlier than createdAt",
            kind="timestamp_order",
            value=user.updated_at,
        )]
    return []


def email_not_taken(lookup):
    """Async refinement rejecting emails that lookup(email) reports as taken.

    lookup may be a plain function or a coroutine function.
    """
    async def refine(user: UserRecord) -> list[ValidationErrorDetail]:
        taken = lookup(user.email)
        if asyncio.iscoroutine(taken):
            taken = await taken
        if taken:
            return [refinement_issue("email", "Email is already registered", kind="email_taken", value=user.email)]
        return []

    refine.__name__ = "email_not_taken"
    return refine


def checked_user_gateway(lookup, **options) -> ValidationGateway[UserRecord]:
    """User gateway with the ordering and uniqueness refinements attached."""
    return ValidationGateway(UserRecord, **options).with_refinements(
        timestamps_in_order,
        email_not_taken(lookup),
    )
