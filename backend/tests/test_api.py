"""
Tests for the HTTP surface: form page, form submission, JSON intake, health.
"""

import json
from urllib.parse import urlencode

from fastapi.testclient import TestClient

from main import create_app


class TestFormPage:
    def test_renders_five_inputs_and_button(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        for name in ("userId", "userName", "userEmail", "userCreatedAt", "userUpdatedAt"):
            assert f'name="{name}"' in response.text
        assert "click to parse" in response.text

    def test_correlation_id_echoed(self, client):
        response = client.get("/", headers={"X-Correlation-ID": "abc123"})
        assert response.headers["X-Correlation-ID"] == "abc123"

    def test_correlation_id_generated(self, client):
        assert client.get("/").headers["X-Correlation-ID"]


class TestFormSubmit:
    def test_valid_submission_renders_record(self, client, valid_form):
        response = client.post("/", data=valid_form)

        assert response.status_code == 200
        assert "Parsed user data" in response.text
        assert "2024-01-01T00:00:00Z" in response.text
        assert "field__error" not in response.text

    def test_invalid_submission_marks_field(self, client, valid_form):
        valid_form["userId"] = "not-a-uuid"
        response = client.post("/", data=valid_form)

        assert response.status_code == 400
        assert 'data-constraint="uuid_v4"' in response.text
        assert response.text.count('class="field__error"') == 1
        assert 'value="not-a-uuid"' in response.text

    def test_submitted_values_are_escaped(self, client, valid_form):
        valid_form["userName"] = '<script>alert("x")</script>'
        response = client.post("/", data=valid_form)

        assert "<script>" not in response.text
        assert "&lt;script&gt;" in response.text

    def test_empty_submission_reports_all_fields(self, client):
        response = client.post("/", data={})
        assert response.status_code == 400
        assert "Validation errors (5)" in response.text

    def test_undecodable_bytes_are_replaced_not_dropped(self, client, valid_form):
        del valid_form["userName"]
        body = urlencode(valid_form).encode() + b"&userName=Jo\xffhn"
        response = client.post(
            "/",
            content=body,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

        assert 'value="Jo\ufffdhn"' in response.text
        assert '"name": "John"' not in response.text

    def test_as_is_app_rejects_updated_at(self, valid_form):
        from core.config import Settings

        app = create_app(Settings(SYMMETRIC_TIMESTAMPS=False))
        with TestClient(app) as client:
            response = client.post("/", data=valid_form)

        assert response.status_code == 400
        assert 'data-constraint="datetime_type"' in response.text


class TestJsonParse:
    def test_parses_wire_keys(self, client):
        payload = {
            "id": "3fa85f64-5717-4562-b3fc-2c963f66afa6",
            "name": "John",
            "email": "john@x.com",
            "createdAt": "2024-01-01T00:00:00Z",
            "updatedAt": "2024-01-02T00:00:00Z",
        }
        response = client.post("/api/users/parse", json=payload)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "validated"
        assert body["submission_id"]
        assert body["user"]["name"] == "John"
        assert body["user"]["createdAt"].startswith("2024-01-01T00:00:00")

    def test_parses_input_names(self, client, valid_form):
        response = client.post("/api/users/parse", json=valid_form)
        assert response.status_code == 200

    def test_single_issue_error_body(self, client, valid_form):
        valid_form["userId"] = "not-a-uuid"
        response = client.post("/api/users/parse", json=valid_form)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "E2000_VALIDATION_GENERIC"
        assert error["category"] == "validation"
        assert error["metadata"]["field"] == "id"
        assert error["metadata"]["constraint"] == "uuid_v4"

    def test_multiple_issue_error_body(self, client):
        response = client.post("/api/users/parse", json={})

        assert response.status_code == 400
        metadata = response.json()["error"]["metadata"]
        assert metadata["error_count"] == 5
        assert {e["field"] for e in metadata["errors"]} == {"id", "name", "email", "createdAt", "updatedAt"}

    def test_lone_surrogate_is_structured_400(self, client, valid_form):
        valid_form["userName"] = "\ud800"
        response = client.post(
            "/api/users/parse",
            content=json.dumps(valid_form),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["metadata"]["field"] == "name"
        assert error["metadata"]["value"] == "\\ud800"

    def test_non_object_body_rejected(self, client):
        response = client.post("/api/users/parse", json=["not", "an", "object"])
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E2000_VALIDATION_GENERIC"


class TestMisc:
    def test_health(self, client, test_settings):
        response = client.get("/health")
        assert response.json() == {"status": "healthy", "version": test_settings.APP_VERSION}

    def test_unknown_route_is_structured_404(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "E4010_NOT_FOUND"

    def test_wrong_method_is_structured_405(self, client):
        response = client.delete("/")
        assert response.status_code == 405
        assert response.json()["error"]["code"] == "E4015_METHOD_NOT_ALLOWED"

    def test_app_error_exception_rendered(self, test_settings):
        from core.errors import AppErrorException, not_found

        app = create_app(test_settings)

        @app.get("/missing")
        async def missing():
            raise AppErrorException(not_found("Form").unwrap_err())

        with TestClient(app) as client:
            response = client.get("/missing", headers={"X-Correlation-ID": "corr-1"})

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["message"] == "Form not found"
        assert error["correlation_id"] == "corr-1"

    def test_error_body_carries_generated_correlation_id(self, client):
        response = client.post("/api/users/parse", json={})
        assert response.json()["error"]["correlation_id"] == response.headers["X-Correlation-ID"]
