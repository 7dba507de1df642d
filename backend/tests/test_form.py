"""
Tests for the Form Intake Adapter

- Both input names and wire keys are read
- createdAt is always constructed, updatedAt only when symmetric
- Bad or missing input is carried forward, never raised
"""

from datetime import datetime, timezone

from core.validation import InvalidTimestamp
from intake import FORM_FIELDS, build_candidate, read_field


class TestReadField:
    def test_input_name_wins_over_wire_key(self):
        form = {"userName": "from input", "name": "from key"}
        assert read_field(form, "userName") == "from input"

    def test_falls_back_to_wire_key(self):
        assert read_field({"email": "a@b.co"}, "userEmail") == "a@b.co"

    def test_absent_is_none(self):
        assert read_field({}, "userId") is None

    def test_field_order_matches_page(self):
        assert list(FORM_FIELDS) == ["userId", "userName", "userEmail", "userCreatedAt", "userUpdatedAt"]


class TestBuildCandidate:
    def test_created_at_is_constructed(self, valid_form):
        candidate = build_candidate(valid_form)
        assert candidate["createdAt"] == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_updated_at_passed_raw_by_default(self, valid_form):
        candidate = build_candidate(valid_form)
        assert candidate["updatedAt"] == "2024-01-02T00:00:00Z"

    def test_updated_at_constructed_when_symmetric(self, valid_form):
        candidate = build_candidate(valid_form, symmetric_timestamps=True)
        assert candidate["updatedAt"] == datetime(2024, 1, 2, tzinfo=timezone.utc)

    def test_plain_fields_untouched(self, valid_form):
        candidate = build_candidate(valid_form)
        assert candidate["id"] == valid_form["userId"]
        assert candidate["name"] == "John"
        assert candidate["email"] == "john@x.com"

    def test_unparseable_created_at_becomes_marker(self, valid_form):
        valid_form["userCreatedAt"] = "not-a-date"
        candidate = build_candidate(valid_form)
        assert candidate["createdAt"] == InvalidTimestamp("not-a-date")

    def test_missing_fields_do_not_raise(self):
        candidate = build_candidate({})
        assert candidate["id"] is None
        assert candidate["name"] is None
        assert isinstance(candidate["createdAt"], InvalidTimestamp)
        assert candidate["updatedAt"] is None

    def test_naive_timestamp_read_as_utc(self, valid_form):
        valid_form["userCreatedAt"] = "2024-01-01T12:30:00"
        candidate = build_candidate(valid_form)
        assert candidate["createdAt"].tzinfo is timezone.utc
        assert candidate["createdAt"].hour == 12

    def test_date_only_is_midnight(self, valid_form):
        valid_form["userCreatedAt"] = "2024-01-01"
        candidate = build_candidate(valid_form)
        assert candidate["createdAt"] == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_source_form_not_modified(self, valid_form):
        snapshot = dict(valid_form)
        build_candidate(valid_form, symmetric_timestamps=True)
        assert valid_form == snapshot
