"""
Pytest Configuration and Shared Fixtures

Form payloads, form instances and an HTTP client over a freshly built app.
"""

import logging

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from intake import UserForm, ValidationGateway
from main import create_app
from schemas.user import UserRecord

VALID_ID = "3fa85f64-5717-4562-b3fc-2c963f66afa6"


@pytest.fixture
def valid_form() -> dict[str, str]:
    """A submission every field of which is well-formed."""
    return {
        "userId": VALID_ID,
        "userName": "John",
        "userEmail": "john@x.com",
        "userCreatedAt": "2024-01-01T00:00:00Z",
        "userUpdatedAt": "2024-01-02T00:00:00Z",
    }


@pytest.fixture
def symmetric_form() -> UserForm:
    """Form that constructs both timestamps."""
    return UserForm(ValidationGateway(UserRecord), symmetric_timestamps=True)


@pytest.fixture
def as_is_form() -> UserForm:
    """Form that passes updatedAt through raw."""
    return UserForm(ValidationGateway(UserRecord), symmetric_timestamps=False)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(LOG_LEVEL="DEBUG", LOG_JSON=True, SYMMETRIC_TIMESTAMPS=True)


@pytest.fixture
def client(test_settings):
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client


def logged_events(caplog: pytest.LogCaptureFixture) -> list[dict]:
    """Structured event dicts captured from structlog via the stdlib bridge."""
    return [r.msg for r in caplog.records if isinstance(r.msg, dict)]


@pytest.fixture
def events(caplog):
    caplog.set_level(logging.DEBUG)
    return lambda: logged_events(caplog)
