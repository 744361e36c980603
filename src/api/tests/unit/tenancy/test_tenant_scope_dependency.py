"""Unit tests for the tenant scope dependency.

Routes are mounted on a router carrying ``get_tenant_scope`` the same way
the application mounts tenant routes, with the real resolution service
running over an in-memory gateway.
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Annotated
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.testclient import TestClient

from shared_kernel.middleware import TenantContext
from tenancy.application.exceptions import TenantRequiredError
from tenancy.application.services import (
    ConnectionResolver,
    TenantIdentityValidator,
    TenantResolutionService,
)
from tenancy.dependencies.principal import get_principal
from tenancy.dependencies.tenant import get_tenant_resolution_service
from tenancy.dependencies.tenant_scope import (
    _require_scope,
    get_tenant_context,
    get_tenant_scope,
    resolve_tenant_scope,
)
from tenancy.ports.repositories import ITenantRepository
from tenancy.presentation.errors import register_exception_handlers
from tests.unit.fakes import make_identity, make_principal


@pytest.fixture
def mock_tenant_repo(active_tenant):
    repo = Mock(spec=ITenantRepository)
    repo.get_by_id = AsyncMock(return_value=active_tenant)
    return repo


@pytest.fixture
def resolution_service(mock_tenant_repo, fake_gateway, routing_config, no_sleep):
    return TenantResolutionService(
        resolver=ConnectionResolver(mock_tenant_repo, routing_config),
        validator=TenantIdentityValidator(
            fake_gateway, routing_config, sleep=no_sleep
        ),
        config=routing_config,
    )


@pytest.fixture
def observed_states() -> list:
    return []


@pytest.fixture
def app(resolution_service, observed_states) -> FastAPI:
    router = APIRouter(prefix="/api/v1/tenant", dependencies=[Depends(get_tenant_scope)])

    @router.get("/whoami")
    async def whoami(
        request: Request,
        context: Annotated[TenantContext, Depends(get_tenant_context)],
    ):
        observed_states.append(request.state.tenant_scope)
        return {"tenantId": context.tenant_id, "databaseName": context.database_name}

    app = FastAPI()
    register_exception_handlers(app)
    app.dependency_overrides[get_tenant_resolution_service] = (
        lambda: resolution_service
    )
    app.include_router(router)
    return app


def _client(app: FastAPI, principal) -> TestClient:
    app.dependency_overrides[get_principal] = lambda: principal
    return TestClient(app)


class TestTenantScopeDependency:
    def test_validated_scope_reaches_handler(
        self, app, active_tenant, fake_gateway, observed_states
    ):
        fake_gateway.add_database(
            "lms_acme", [make_identity(active_tenant.id.value, "lms_acme")]
        )
        client = _client(app, make_principal({"tenant_id": active_tenant.id.value}))

        response = client.get("/api/v1/tenant/whoami")

        assert response.status_code == 200
        assert response.json() == {
            "tenantId": active_tenant.id.value,
            "databaseName": "lms_acme",
        }
        assert observed_states[0].context.tenant_id == active_tenant.id.value
        assert fake_gateway.open_connections == 0

    def test_scope_opened_once_per_request(self, app, active_tenant, fake_gateway):
        fake_gateway.add_database(
            "lms_acme", [make_identity(active_tenant.id.value, "lms_acme")]
        )
        client = _client(app, make_principal({"tenant_id": active_tenant.id.value}))

        client.get("/api/v1/tenant/whoami")

        assert fake_gateway.open_calls == 1

    def test_missing_claim_is_400(self, app, fake_gateway):
        client = _client(app, make_principal())

        response = client.get("/api/v1/tenant/whoami")

        assert response.status_code == 400
        assert response.json()["type"] == "TenantRequired"
        assert fake_gateway.open_calls == 0

    def test_anonymous_is_401(self, app):
        client = _client(app, None)

        response = client.get("/api/v1/tenant/whoami")

        assert response.status_code == 401

    def test_foreign_database_is_500(self, app, active_tenant, fake_gateway):
        fake_gateway.add_database(
            "lms_acme", [make_identity("01HQ3VA1D2F3G4H5J6K7M8N9P0", "lms_acme")]
        )
        client = _client(app, make_principal({"tenant_id": active_tenant.id.value}))

        response = client.get("/api/v1/tenant/whoami")

        assert response.status_code == 500
        assert response.json()["type"] == "TenantIntegrityError"
        assert response.json()["errors"] == ["An internal error occurred."]
        assert fake_gateway.open_connections == 0

    def test_tenant_header_selects_among_claims(
        self, app, active_tenant, fake_gateway
    ):
        fake_gateway.add_database(
            "lms_acme", [make_identity(active_tenant.id.value, "lms_acme")]
        )
        other = "01HQ3VA1D2F3G4H5J6K7M8N9P0"
        client = _client(
            app, make_principal({"tenant_id": [other, active_tenant.id.value]})
        )

        response = client.get(
            "/api/v1/tenant/whoami", headers={"X-Tenant-Id": active_tenant.id.value}
        )

        assert response.status_code == 200
        assert response.json()["tenantId"] == active_tenant.id.value

    def test_several_claims_without_header_is_400(self, app, fake_gateway):
        client = _client(
            app,
            make_principal(
                {"tenant_id": ["01HQ3VA1D2F3G4H5J6K7M8N9P0", "01HQ3V9Z8K6M4XJ2T7RPWN5B0C"]}
            ),
        )

        response = client.get("/api/v1/tenant/whoami")

        assert response.status_code == 400
        assert response.json()["type"] == "TenantRequired"
        assert fake_gateway.open_calls == 0

    def test_unclaimed_tenant_header_is_404(self, app, active_tenant, fake_gateway):
        client = _client(app, make_principal({"tenant_id": active_tenant.id.value}))

        response = client.get(
            "/api/v1/tenant/whoami",
            headers={"X-Tenant-Id": "01HQ3VA1D2F3G4H5J6K7M8N9P0"},
        )

        assert response.status_code == 404
        assert response.json()["type"] == "TenantNotFound"
        assert fake_gateway.open_calls == 0


class TestResolveTenantScope:
    @pytest.mark.asyncio
    async def test_cancelled_resolution_leaves_no_scope(
        self, resolution_service, active_tenant, fake_gateway
    ):
        fake_gateway.add_database(
            "lms_acme", [make_identity(active_tenant.id.value, "lms_acme")]
        )
        fake_gateway.read_gate = asyncio.Event()
        request = SimpleNamespace(
            state=SimpleNamespace(),
            url=SimpleNamespace(path="/api/v1/tenant/whoami"),
            headers={},
        )
        principal = make_principal({"tenant_id": active_tenant.id.value})
        yielded = []

        async def resolve():
            async with resolve_tenant_scope(
                request, principal, resolution_service
            ) as scope:
                yielded.append(scope)

        task = asyncio.create_task(resolve())
        await fake_gateway.read_started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert yielded == []
        assert request.state.tenant_scope is None
        assert fake_gateway.open_connections == 0


class TestRequireScope:
    def test_exempt_path_has_no_scope(self):
        with pytest.raises(TenantRequiredError):
            _require_scope(None)
