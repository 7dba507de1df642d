"""
Tests for the primitive and composite validator showcase.
"""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from core.validation import ValidationError
from intake import build_candidate
from showcase import composites as c
from showcase import primitives as p
from showcase.primitives import check


def accepts(adapter, value) -> bool:
    return check(adapter, value).is_ok()


class TestCoercion:
    @pytest.mark.parametrize("raw, expected", [
        (123, "123"), (True, "true"), (False, "false"), (None, "null"), ("x", "x"),
    ])
    def test_to_string(self, raw, expected):
        assert p.COERCED_STRING.validate_python(raw) == expected

    @pytest.mark.parametrize("raw, expected", [
        (1, True), ("true", True), ("false", True), (0, False), (None, False), ("", False),
    ])
    def test_truthiness(self, raw, expected):
        assert p.COERCED_BOOL.validate_python(raw) is expected


class TestLiteralsAndStrings:
    def test_literals(self):
        assert accepts(p.JOHN, "John")
        assert not accepts(p.JOHN, "john")
        assert accepts(p.TEN, 10)
        assert not accepts(p.TEN, 11)

    @pytest.mark.parametrize("value, ok", [("", False), ("a", True), ("a" * 10, True), ("a" * 11, False), (5, False)])
    def test_bounded_string(self, value, ok):
        assert accepts(p.BOUNDED_STRING, value) is ok

    def test_trim_and_lowercase(self):
        assert p.NORMALIZED_STRING.validate_python("  HeLLo ") == "hello"

    def test_check_returns_validation_error(self):
        error = check(p.BOUNDED_STRING, "").unwrap_err()
        assert isinstance(error, ValidationError)
        assert error.first_error.field_path == "$"


class TestFormats:
    def test_email_variants(self):
        for adapter in (p.EMAIL, p.EMAIL_CUSTOM, p.EMAIL_HTML5):
            assert accepts(adapter, "john@example.com")
            assert not accepts(adapter, "john-at-example")

    def test_custom_pattern_requires_tld(self):
        assert not accepts(p.EMAIL_CUSTOM, "john@localhost")
        assert accepts(p.EMAIL_HTML5, "john@localhost")

    def test_email_pattern_issue_kind(self):
        assert check(p.EMAIL_CUSTOM, "nope").unwrap_err().first_error.constraint == "email_pattern"

    def test_uuid_v4(self):
        assert accepts(p.UUID_V4, "3fa85f64-5717-4562-b3fc-2c963f66afa6")
        assert not accepts(p.UUID_V4, "3fa85f64-5717-1562-b3fc-2c963f66afa6")
        assert not accepts(p.UUID_V4, "123")

    def test_uuid_v4_object(self):
        assert p.UUID_V4_OBJECT.validate_python("3fa85f64-5717-4562-b3fc-2c963f66afa6").version == 4

    def test_iso_datetime_default_is_z_only(self):
        adapter = p.iso_datetime()
        assert adapter.validate_python("2020-01-01T00:00:00Z") == datetime(2020, 1, 1, tzinfo=timezone.utc)
        assert not accepts(adapter, "2020-01-01T00:00:00+02:00")
        assert not accepts(adapter, "2020-01-01T00:00:00")

    def test_iso_datetime_with_offset(self):
        adapter = p.iso_datetime(offset=True)
        assert adapter.validate_python("2020-01-01T00:00:00+02:00").utcoffset() == timedelta(hours=2)
        assert accepts(adapter, "2020-01-01T00:00:00Z")
        assert not accepts(adapter, "2020-01-01T00:00:00")

    def test_iso_datetime_local(self):
        adapter = p.iso_datetime(local=True)
        assert adapter.validate_python("2020-01-01T00:00:00").tzinfo is None
        assert not accepts(adapter, "2020-01-01T00:00:00+02:00")

    def test_iso_datetime_rejects_garbage(self):
        assert check(p.iso_datetime(), "2020-13-01T00:00:00Z").is_err()
        assert check(p.iso_datetime(), "yesterday").unwrap_err().first_error.constraint == "iso_datetime"

    def test_iso_date_and_time(self):
        assert p.ISO_DATE.validate_python("2020-01-01") == date(2020, 1, 1)
        assert not accepts(p.ISO_DATE, "2020-01-01T00:00:00Z")
        assert p.ISO_TIME.validate_python("00:00:00") == time(0, 0)
        assert not accepts(p.ISO_TIME, "25:00:00")


class TestNumbersAndEnums:
    @pytest.mark.parametrize("value, ok", [(1, True), (10, True), (5.5, True), (0.9, False), (11, False), ("5", False)])
    def test_bounded_number(self, value, ok):
        assert accepts(p.BOUNDED_NUMBER, value) is ok

    def test_number_rejects_nan(self):
        assert not accepts(p.NUMBER, float("nan"))

    def test_enum(self):
        assert p.ANIMAL.validate_python("dog") is p.Animal.DOG
        assert not accepts(p.ANIMAL, "bird")
        assert accepts(p.ANIMAL_NAME, "fish")

    def test_exclude_and_extract(self):
        Water = p.exclude_members(p.Animal, "dog", p.Animal.CAT, name="WaterAnimal")
        Land = p.extract_members(p.Animal, "dog", "cat", name="LandAnimal")

        assert [m.value for m in Water] == ["fish"]
        assert [m.value for m in Land] == ["dog", "cat"]
        assert accepts(p.enum_adapter(Land), "cat")
        assert not accepts(p.enum_adapter(Land), "fish")

    def test_exclude_unknown_member(self):
        with pytest.raises(ValueError):
            p.exclude_members(p.Animal, "bird")


class TestStringBool:
    @pytest.mark.parametrize("raw, expected", [
        ("true", True), ("false", False), ("1", True), ("0", False), ("y", True), ("n", False),
    ])
    def test_default_vocabulary(self, raw, expected):
        assert p.STRING_BOOL.validate_python(raw) is expected

    def test_custom_vocabulary(self):
        assert p.STRING_BOOL_CUSTOM.validate_python("yes") is True
        assert p.STRING_BOOL_CUSTOM.validate_python("no") is False
        assert not accepts(p.STRING_BOOL_CUSTOM, "y")


class TestComposites:
    def test_union(self):
        assert c.STRING_OR_NUMBER.validate_python("a") == "a"
        assert c.STRING_OR_NUMBER.validate_python(1.5) == 1.5
        assert not accepts(c.STRING_OR_NUMBER, [1])

    def test_discriminated_union(self):
        assert isinstance(c.RESPONSE.validate_python({"status": "success", "data": "ok"}), c.Success)
        assert isinstance(c.RESPONSE.validate_python({"status": "failed", "error": "no"}), c.Failure)
        assert check(c.RESPONSE, {"status": "pending"}).unwrap_err().first_error.constraint == "union_tag_invalid"

    def test_record_keys_and_values(self):
        assert c.SCORES.validate_python({"alice": 3, "bob_2": 0}) == {"alice": 3, "bob_2": 0}
        assert not accepts(c.SCORES, {"Alice": 3})
        assert not accepts(c.SCORES, {"alice": -1})

    def test_recursive(self):
        tree = c.Category.parse({
            "name": "root",
            "subcategories": [{"name": "a", "subcategories": [{"name": "a1"}]}, {"name": "b"}],
        })
        assert list(tree.walk()) == ["root", "a", "a1", "b"]

    def test_recursive_issue_path(self):
        with pytest.raises(ValidationError) as exc_info:
            c.Category.parse({"name": "root", "subcategories": [{"name": "  "}]})
        assert exc_info.value.paths == {"subcategories[0].name"}

    def test_transform_pipeline(self):
        signup = c.Signup.parse({"handle": "  Ada_L  ", "age": " 36 "})
        assert signup.handle == "ada_l"
        assert signup.age == 36

    def test_transform_pipeline_bounds(self):
        with pytest.raises(ValidationError) as exc_info:
            c.Signup.parse({"handle": "ab", "age": "12"})
        assert exc_info.value.paths == {"handle", "age"}

    def test_cross_field_refinement(self):
        assert c.PasswordChange.parse({"password": "correct horse", "confirm": "correct horse"})
        with pytest.raises(ValidationError) as exc_info:
            c.PasswordChange.parse({"password": "correct horse", "confirm": "battery staple"})
        error = exc_info.value
        assert error.first_error.constraint == "password_mismatch"
        assert error.to_dict()["error"]["errors"][0]["value"] == "[REDACTED]"


class TestAsyncRefinements:
    def candidate(self, valid_form, **changes):
        return build_candidate({**valid_form, **changes}, symmetric_timestamps=True)

    @pytest.mark.asyncio
    async def test_checked_gateway_accepts(self, valid_form):
        gateway = c.checked_user_gateway(lambda email: False)
        assert (await gateway.validate_async(self.candidate(valid_form))).is_ok()

    @pytest.mark.asyncio
    async def test_taken_email_with_async_lookup(self, valid_form):
        async def lookup(email):
            return email == "john@x.com"

        result = await c.checked_user_gateway(lookup).validate_async(self.candidate(valid_form))
        (issue,) = result.unwrap_err().details
        assert issue.field_path == "email"
        assert issue.constraint == "email_taken"

    @pytest.mark.asyncio
    async def test_timestamps_out_of_order(self, valid_form):
        candidate = self.candidate(valid_form, userUpdatedAt="2023-12-31T00:00:00Z")
        result = await c.checked_user_gateway(lambda email: False).validate_async(candidate)
        assert result.unwrap_err().paths == {"updatedAt"}
