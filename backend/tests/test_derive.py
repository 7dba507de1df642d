"""
Tests for schema derivation over immutable shapes.
"""

from datetime import datetime, timezone

import pytest

from core.validation import (
    BaseSchema,
    FieldSpec,
    ValidationError,
    build,
    extend,
    merge,
    omit,
    partial,
    pick,
    required,
    shape_of,
)
from schemas.user import USER_FIELDS, UserRecord

VALID_ID = "3fa85f64-5717-4562-b3fc-2c963f66afa6"


@pytest.fixture
def user_shape():
    return shape_of(UserRecord)


class TestShape:
    def test_shape_of_user(self, user_shape):
        assert user_shape.name == "UserRecord"
        assert user_shape.field_names == ("id", "name", "email", "created_at", "updated_at")
        assert user_shape.get("created_at").alias == "createdAt"

    def test_wire_keys(self):
        assert USER_FIELDS == ("id", "name", "email", "createdAt", "updatedAt")

    def test_unknown_field_raises(self, user_shape):
        with pytest.raises(KeyError):
            pick(user_shape, "nickname")


class TestTransformations:
    def test_pick(self, user_shape):
        assert pick(user_shape, "id", "name").field_names == ("id", "name")

    def test_omit(self, user_shape):
        assert "email" not in omit(user_shape, "email")

    def test_extend_appends_and_replaces(self, user_shape):
        derived = extend(
            user_shape,
            FieldSpec("role", str, default="member"),
            FieldSpec("name", str, description="Renamed"),
        )
        assert derived.field_names[-1] == "role"
        assert derived.get("name").description == "Renamed"
        assert len(derived.fields) == len(user_shape.fields) + 1

    def test_merge_second_wins(self, user_shape):
        other = shape_of(UserRecord, name="Other")
        other = extend(other, FieldSpec("id", int))
        merged = merge(user_shape, pick(other, "id"))
        assert merged.get("id").annotation is int

    def test_partial_and_required(self, user_shape):
        loose = partial(user_shape)
        assert not any(f.is_required for f in loose.fields)
        strict_again = required(loose, "id")
        assert strict_again.get("id").is_required
        assert not strict_again.get("name").is_required

    def test_derivations_do_not_mutate_source(self, user_shape):
        before = user_shape.fields
        partial(omit(user_shape, "id"))
        assert user_shape.fields == before
        assert UserRecord.model_fields["id"].is_required()


class TestBuild:
    def test_partial_model_accepts_subset(self, user_shape):
        UserPatch = build(partial(omit(user_shape, "id")), name="UserPatch")
        patch = UserPatch.parse({"name": "Jane"})

        assert issubclass(UserPatch, BaseSchema)
        assert patch.name == "Jane"
        assert patch.email is None

    def test_built_model_keeps_constraints(self, user_shape):
        UserRef = build(pick(user_shape, "id", "name"), name="UserRef")

        with pytest.raises(ValidationError) as exc_info:
            UserRef.parse({"id": "not-a-uuid", "name": "x" * 51})
        assert exc_info.value.paths == {"id", "name"}

    def test_built_model_keeps_aliases(self, user_shape):
        Stamps = build(pick(user_shape, "created_at"), name="Stamps")
        stamped = Stamps.parse({"createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc)})
        assert stamped.to_dict() == {"createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc)}

    def test_parse_result_on_built_model(self, user_shape):
        UserRef = build(pick(user_shape, "id"), name="UserRef")
        assert UserRef.parse_result({"id": VALID_ID}).unwrap().id == VALID_ID
        assert UserRef.parse_result({}).is_err()
