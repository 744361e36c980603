"""Unit test fixtures with mocked dependencies."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from tenancy.application.config import TenantRoutingConfig
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId
from tests.unit.fakes import TEST_SECRET, TEST_TEMPLATE, FakeTenantDatabaseGateway


@pytest.fixture
def routing_config() -> TenantRoutingConfig:
    """Routing configuration with fast retries."""
    return TenantRoutingConfig(
        connection_template=TEST_TEMPLATE,
        validation_secret=TEST_SECRET,
        max_attempts=3,
        retry_base_delay=0.1,
        retry_max_delay=2.0,
        resolution_timeout=5.0,
        exempt_path_prefixes=("/health", "/docs", "/api/v1/solution/"),
    )


@pytest.fixture
def tenant_id() -> TenantId:
    return TenantId.generate()


@pytest.fixture
def active_tenant(tenant_id: TenantId) -> Tenant:
    """An active, provisioned tenant."""
    return Tenant(
        id=tenant_id,
        name="Acme University",
        slug="acme",
        database_name="lms_acme",
        is_active=True,
        created_at=datetime(2024, 3, 1, tzinfo=UTC),
        created_by="admin",
        updated_by="admin",
    )


@pytest.fixture
def fake_gateway() -> FakeTenantDatabaseGateway:
    return FakeTenantDatabaseGateway()


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Replacement for asyncio.sleep that records requested delays."""
    return AsyncMock(return_value=None)
