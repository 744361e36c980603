"""Unit tests for the error envelope and exception handlers."""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel

from infrastructure.correlation import CORRELATION_ID_HEADER, CorrelationIdMiddleware
from tenancy.application.exceptions import (
    ServiceUnavailableError,
    TenantIntegrityAccessError,
    TenantNotFoundAccessError,
    TenantRequiredError,
    UnauthorizedError,
)
from tenancy.presentation.errors import (
    ConflictError,
    ErrorResponse,
    NotFoundError,
    register_exception_handlers,
)


class Payload(BaseModel):
    name: str


@pytest.fixture
def test_client() -> TestClient:
    app = FastAPI()
    app.add_middleware(CorrelationIdMiddleware)
    register_exception_handlers(app)

    errors = {
        "unauthorized": UnauthorizedError(),
        "tenant-required": TenantRequiredError(),
        "tenant-not-found": TenantNotFoundAccessError(),
        "integrity": TenantIntegrityAccessError(),
        "unavailable": ServiceUnavailableError(),
        "not-found": NotFoundError(["Course 7 not found."]),
        "conflict": ConflictError(["Already exists."]),
    }

    @app.get("/raise/{name}")
    async def raise_error(name: str):
        raise errors[name]

    @app.get("/http")
    async def raise_http():
        raise HTTPException(status_code=403, detail="Forbidden here")

    @app.get("/crash")
    async def crash():
        raise RuntimeError("secret connection string leaked")

    @app.post("/validate")
    async def validate(payload: Payload):
        return payload

    return TestClient(app, raise_server_exceptions=False)


class TestErrorResponse:
    def test_serializes_correlation_id_by_alias(self):
        body = ErrorResponse(
            type="NotFound", title="Not found", status=404, correlation_id="abc"
        )

        assert body.model_dump(by_alias=True) == {
            "type": "NotFound",
            "title": "Not found",
            "status": 404,
            "errors": [],
            "correlationId": "abc",
        }


class TestTenantAccessErrors:
    @pytest.mark.parametrize(
        ("name", "status_code", "category"),
        [
            ("unauthorized", 401, "Unauthorized"),
            ("tenant-required", 400, "TenantRequired"),
            ("tenant-not-found", 404, "TenantNotFound"),
            ("integrity", 500, "TenantIntegrityError"),
            ("unavailable", 503, "ServiceUnavailable"),
        ],
    )
    def test_rendered_as_envelope(self, test_client, name, status_code, category):
        response = test_client.get(
            f"/raise/{name}", headers={CORRELATION_ID_HEADER: "req-1"}
        )

        assert response.status_code == status_code
        body = response.json()
        assert body["type"] == category
        assert body["status"] == status_code
        assert body["correlationId"] == "req-1"
        assert len(body["errors"]) == 1

    def test_unauthorized_carries_challenge(self, test_client):
        response = test_client.get("/raise/unauthorized")

        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_unavailable_carries_retry_after(self, test_client):
        response = test_client.get("/raise/unavailable")

        assert response.headers["Retry-After"] == "5"

    def test_integrity_error_is_generic(self, test_client):
        response = test_client.get("/raise/integrity")

        assert response.json()["errors"] == ["An internal error occurred."]


class TestApiErrors:
    def test_not_found(self, test_client):
        response = test_client.get("/raise/not-found")

        assert response.status_code == 404
        assert response.json()["errors"] == ["Course 7 not found."]

    def test_conflict(self, test_client):
        response = test_client.get("/raise/conflict")

        assert response.status_code == 409
        assert response.json()["type"] == "Conflict"

    def test_request_validation_is_400(self, test_client):
        response = test_client.post("/validate", json={})

        assert response.status_code == 400
        body = response.json()
        assert body["type"] == "Validation"
        assert any("name" in error for error in body["errors"])

    def test_http_exception(self, test_client):
        response = test_client.get("/http")

        assert response.status_code == 403
        assert response.json()["title"] == "Forbidden"
        assert response.json()["errors"] == ["Forbidden here"]

    def test_unknown_route(self, test_client):
        response = test_client.get("/nope")

        assert response.status_code == 404
        assert response.json()["type"] == "HttpError"

    def test_unhandled_exception_hides_detail(self, test_client):
        response = test_client.get("/crash")

        assert response.status_code == 500
        body = response.json()
        assert body["type"] == "InternalError"
        assert "secret" not in response.text
        assert body["correlationId"]
