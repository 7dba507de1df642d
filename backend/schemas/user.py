"""User record schema

The typed object a form submission is parsed into. All five fields are
required and validated together; the record either parses completely or
the caller receives the full issue list.
"""
from pydantic import EmailStr

from core.validation import BaseSchema, Field, Timestamp, UUIDv4


class UserRecord(BaseSchema):
    id: UUIDv4 = Field(
        description="User identifier (UUID version 4, kept as a string)",
        examples=["3fa85f64-5717-4562-b3fc-2c963f66afa6"],
    )
    name: str = Field(
        description="Display name",
        min_length=1,
        max_length=50,
    )
    email: EmailStr = Field(description="Contact email address")
    created_at: Timestamp = Field(alias="createdAt", description="Creation timestamp")
    updated_at: Timestamp = Field(alias="updatedAt", description="Last update timestamp")


USER_FIELDS: tuple[str, ...] = tuple(
    info.alias or name for name, info in UserRecord.model_fields.items()
)
