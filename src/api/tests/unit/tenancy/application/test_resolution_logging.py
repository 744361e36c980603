"""Log volume of failed tenant resolutions.

Every failure category must produce exactly one warning or error entry,
however many connection attempts or internal steps it took. The services
and probes are built inside ``capture_logs`` so their loggers pick up the
capturing configuration.
"""

from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest
from sqlalchemy.exc import OperationalError
from structlog.testing import capture_logs

from tenancy.application.exceptions import (
    ServiceUnavailableError,
    TenantAccessError,
    TenantIntegrityAccessError,
    TenantNotFoundAccessError,
    TenantRequiredError,
    UnauthorizedError,
)
from tenancy.application.services import (
    ConnectionResolver,
    TenantIdentityValidator,
    TenantResolutionService,
)
from tenancy.domain.value_objects import TenantId
from tenancy.infrastructure.tenant_database_gateway import (
    SqlAlchemyTenantDatabaseGateway,
)
from tenancy.ports.repositories import ITenantRepository
from tests.unit.fakes import make_identity, make_principal

TENANT_PATH = "/api/v1/tenant/identity"
GATEWAY_MODULE = "tenancy.infrastructure.tenant_database_gateway"


@pytest.fixture
def mock_tenant_repo(active_tenant):
    repo = Mock(spec=ITenantRepository)
    repo.get_by_id = AsyncMock(return_value=active_tenant)
    return repo


@pytest.fixture
def routing_config(routing_config):
    return replace(routing_config, max_attempts=3)


def _service(repo, gateway, config, sleep) -> TenantResolutionService:
    return TenantResolutionService(
        resolver=ConnectionResolver(repo, config),
        validator=TenantIdentityValidator(gateway, config, sleep=sleep),
        config=config,
    )


async def _resolve(service, principal, requested_tenant_id=None) -> None:
    async with service.open_scope(principal, TENANT_PATH, requested_tenant_id):
        pytest.fail("scope must not be entered")


def _loud(entries: list[dict]) -> list[dict]:
    return [e for e in entries if e["log_level"] in ("warning", "error", "critical")]


class TestOneEntryPerFailure:
    @pytest.mark.asyncio
    async def test_unreachable_database_logs_once(
        self, mock_tenant_repo, active_tenant, routing_config, no_sleep
    ):
        """Three refused connections still make a single error entry."""
        engine = MagicMock()
        engine.connect = AsyncMock(
            side_effect=OperationalError("connect", {}, Exception("connection refused"))
        )
        engine.dispose = AsyncMock()
        principal = make_principal({"tenant_id": active_tenant.id.value})

        with patch(f"{GATEWAY_MODULE}.create_tenant_engine", return_value=engine):
            with capture_logs() as entries:
                service = _service(
                    mock_tenant_repo,
                    SqlAlchemyTenantDatabaseGateway(),
                    routing_config,
                    no_sleep,
                )
                with pytest.raises(ServiceUnavailableError):
                    await _resolve(service, principal)

        assert engine.connect.await_count == 3
        loud = _loud(entries)
        assert len(loud) == 1
        assert loud[0]["event"] == "tenant_resolution_database_unavailable"
        assert loud[0]["attempts"] == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("claims", "requested", "expected_error", "expected_event"),
        [
            (None, None, TenantRequiredError, "tenant_resolution_claim_missing"),
            (
                {"tenant_id": ["01HQ3VA1D2F3G4H5J6K7M8N9P0", "01HQ3V9Z8K6M4XJ2T7RPWN5B0D"]},
                None,
                TenantRequiredError,
                "tenant_resolution_selection_required",
            ),
            (
                {"tenant_id": "01HQ3VA1D2F3G4H5J6K7M8N9P0"},
                "01HQ3V9Z8K6M4XJ2T7RPWN5B0D",
                TenantNotFoundAccessError,
                "tenant_resolution_selection_rejected",
            ),
        ],
        ids=["no-claim", "selection-required", "selection-rejected"],
    )
    async def test_claim_failures_log_once(
        self,
        mock_tenant_repo,
        fake_gateway,
        routing_config,
        no_sleep,
        claims,
        requested,
        expected_error,
        expected_event,
    ):
        with capture_logs() as entries:
            service = _service(mock_tenant_repo, fake_gateway, routing_config, no_sleep)
            with pytest.raises(expected_error):
                await _resolve(service, make_principal(claims), requested)

        assert [e["event"] for e in _loud(entries)] == [expected_event]

    @pytest.mark.asyncio
    async def test_unauthenticated_logs_once(
        self, mock_tenant_repo, fake_gateway, routing_config, no_sleep
    ):
        with capture_logs() as entries:
            service = _service(mock_tenant_repo, fake_gateway, routing_config, no_sleep)
            with pytest.raises(UnauthorizedError):
                await _resolve(service, None)

        assert [e["event"] for e in _loud(entries)] == [
            "tenant_resolution_unauthorized"
        ]

    @pytest.mark.asyncio
    async def test_unknown_tenant_logs_once(
        self, mock_tenant_repo, fake_gateway, routing_config, no_sleep
    ):
        mock_tenant_repo.get_by_id.return_value = None
        principal = make_principal({"tenant_id": TenantId.generate().value})

        with capture_logs() as entries:
            service = _service(mock_tenant_repo, fake_gateway, routing_config, no_sleep)
            with pytest.raises(TenantNotFoundAccessError):
                await _resolve(service, principal)

        assert [e["event"] for e in _loud(entries)] == ["tenant_resolution_not_found"]

    @pytest.mark.asyncio
    async def test_foreign_identity_logs_once(
        self, mock_tenant_repo, active_tenant, fake_gateway, routing_config, no_sleep
    ):
        fake_gateway.add_database(
            "lms_acme", [make_identity(TenantId.generate().value, "lms_acme")]
        )
        principal = make_principal({"tenant_id": active_tenant.id.value})

        with capture_logs() as entries:
            service = _service(mock_tenant_repo, fake_gateway, routing_config, no_sleep)
            with pytest.raises(TenantIntegrityAccessError):
                await _resolve(service, principal)

        assert [e["event"] for e in _loud(entries)] == [
            "tenant_resolution_integrity_failed"
        ]

    @pytest.mark.asyncio
    async def test_dropped_reads_then_exhaustion_log_once(
        self, mock_tenant_repo, active_tenant, fake_gateway, routing_config, no_sleep
    ):
        """Connections that open and then drop are retried quietly too."""
        fake_gateway.add_database(
            "lms_acme", [make_identity(active_tenant.id.value, "lms_acme")]
        )
        fake_gateway.read_failures = 3
        principal = make_principal({"tenant_id": active_tenant.id.value})

        with capture_logs() as entries:
            service = _service(mock_tenant_repo, fake_gateway, routing_config, no_sleep)
            with pytest.raises(TenantAccessError) as exc_info:
                await _resolve(service, principal)

        assert isinstance(exc_info.value, ServiceUnavailableError)
        assert len(_loud(entries)) == 1
        assert fake_gateway.open_connections == 0
