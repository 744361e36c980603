"""Unit tests for routes that run inside a tenant scope."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from shared_kernel.middleware import TenantContext
from tenancy.application.value_objects import TenantScope
from tenancy.infrastructure.models import TenantIdentityModel

TENANT = "01HQ3V9Z8K6M4XJ2T7RPWN5B0C"


@pytest.fixture
def mock_session():
    session = AsyncMock()
    session.execute.return_value = MagicMock()
    return session


@pytest.fixture
def test_client(mock_session) -> TestClient:
    from tenancy.dependencies.tenant_scope import get_tenant_scope
    from tenancy.presentation import tenant_router
    from tenancy.presentation.errors import register_exception_handlers

    scope = TenantScope(
        context=TenantContext(tenant_id=TENANT, database_name="lms_acme"),
        session=mock_session,
    )

    app = FastAPI()
    register_exception_handlers(app)
    app.dependency_overrides[get_tenant_scope] = lambda: scope
    app.include_router(tenant_router)
    return TestClient(app)


def test_identity_is_read_through_tenant_session(test_client, mock_session):
    mock_session.execute.return_value.scalar_one_or_none.return_value = (
        TenantIdentityModel(
            tenant_id=TENANT,
            database_name="lms_acme",
            created_at=datetime(2024, 3, 1, 12, 30),
            validation_hash="hash",
            creation_metadata="",
        )
    )

    response = test_client.get("/api/v1/tenant/identity")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "tenantId": TENANT,
        "databaseName": "lms_acme",
        "createdAt": "2024-03-01T12:30:00Z",
    }
    mock_session.execute.assert_awaited_once()


def test_missing_identity_record(test_client, mock_session):
    mock_session.execute.return_value.scalar_one_or_none.return_value = None

    response = test_client.get("/api/v1/tenant/identity")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["type"] == "NotFound"
