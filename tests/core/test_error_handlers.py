import pytest
from fastapi import FastAPI
from pydantic import BaseModel
from sqlalchemy.exc import OperationalError

from app.core.database import RecordConflictError
from app.core.error_handlers import create_error_response, register_exception_handlers
from app.core.exceptions import (
    DependencyFailureException,
    DuplicateRequestException,
    PermissionDeniedException,
    ResourceNotFoundException,
    ValidationException,
)
from tests.testclient import TestClient


class Payload(BaseModel):
    count: int


@pytest.fixture
def error_client():
    app = FastAPI()
    app.state.environment = "test"
    register_exception_handlers(app)

    @app.get("/duplicate")
    def duplicate():
        raise DuplicateRequestException("Contribution request already exists")

    @app.get("/forbidden")
    def forbidden():
        raise PermissionDeniedException("Only the idea owner can view this")

    @app.get("/missing")
    def missing():
        raise ResourceNotFoundException("Idea", 7)

    @app.get("/invalid")
    def invalid():
        raise ValidationException("Message is required", field="message")

    @app.get("/database")
    def database():
        raise OperationalError("SELECT 1", {}, Exception("gone"))

    @app.get("/dependency")
    def dependency():
        raise DependencyFailureException("database")

    @app.post("/payload")
    def payload(body: Payload):
        return body

    @app.get("/store-conflict")
    def store_conflict():
        raise RecordConflictError("contribution_requests", "UNIQUE constraint failed")

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


def test_create_error_response_shape():
    response = create_error_response(409, "duplicate_request", "dup", path="/x")
    assert response.status_code == 409
    assert b'"success":false' in response.body.replace(b" ", b"")


@pytest.mark.parametrize(
    "path,status_code,code",
    [
        ("/duplicate", 409, "duplicate_request"),
        ("/forbidden", 403, "permission_denied"),
        ("/missing", 404, "resource_not_found"),
        ("/invalid", 422, "validation_error"),
        ("/database", 503, "dependency_failure"),
        ("/dependency", 503, "dependency_failure"),
    ],
)
def test_app_exceptions_use_unified_envelope(error_client, path, status_code, code):
    response = error_client.get(path)
    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["path"] == path
    assert "timestamp" in body


def test_not_found_details_carry_identifier(error_client):
    body = error_client.get("/missing").json()
    assert body["error"]["message"] == "Idea not found"
    assert body["error"]["details"] == {"identifier": "7"}


def test_request_validation_errors_list_fields(error_client):
    response = error_client.post("/payload", json={"count": "many"})
    assert response.status_code == 422
    errors = response.json()["error"]["details"]["errors"]
    assert errors[0]["field"] == "count"


def test_unhandled_errors_expose_details_outside_production(error_client):
    response = error_client.get("/boom")
    assert response.status_code == 500
    body = response.json()
    assert body["error"]["code"] == "internal_server_error"
    assert body["error"]["message"] == "kaboom"
    assert body["error"]["details"]["error_type"] == "RuntimeError"


def test_untranslated_store_conflict_is_409(error_client):
    response = error_client.get("/store-conflict")
    assert response.status_code == 409
    body = response.json()
    assert body["error"]["code"] == "resource_conflict"
    assert body["error"]["details"] == {"table": "contribution_requests"}
