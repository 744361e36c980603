"""SQLAlchemy gateway to tenant databases.

Each ``open`` creates a ``NullPool`` engine for exactly one tenant
database, so closing the connection really closes it. The engine is
disposed when the block exits, on success, error or cancellation.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC

from sqlalchemy import select
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    ProgrammingError,
)
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession

from infrastructure.database.engines import create_tenant_engine
from infrastructure.observability import ConnectionProbe, DefaultConnectionProbe
from tenancy.domain.aggregates import TenantIdentity
from tenancy.domain.value_objects import ConnectionTarget
from tenancy.infrastructure.models import TenantIdentityModel
from tenancy.infrastructure.observability import (
    DefaultTenantDatabaseGatewayProbe,
    TenantDatabaseGatewayProbe,
)
from tenancy.ports.exceptions import (
    IdentityAlreadyProvisionedError,
    IdentityTableMissingError,
    TenantDatabaseUnavailableError,
)
from tenancy.ports.repositories import TenantDatabaseHandle

# Errors that mean the server could not be reached or the link dropped.
# OSError covers refused connections and DNS failures raised by asyncpg
# before SQLAlchemy gets a chance to wrap them.
_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, OSError)


class SqlAlchemyTenantDatabaseHandle(TenantDatabaseHandle):
    """An open tenant database connection with a session bound to it."""

    def __init__(
        self,
        database_name: str,
        connection: AsyncConnection,
        session: AsyncSession,
        probe: TenantDatabaseGatewayProbe,
    ):
        self.database_name = database_name
        self.session = session
        self._connection = connection
        self._probe = probe

    async def read_identity_records(self) -> list[TenantIdentity]:
        try:
            result = await self.session.execute(select(TenantIdentityModel))
            models = result.scalars().all()
        except _UNAVAILABLE_ERRORS as e:
            raise TenantDatabaseUnavailableError(str(e)) from e
        except ProgrammingError as e:
            # Missing table: the database was never provisioned
            raise IdentityTableMissingError(self.database_name) from e
        finally:
            # End the read transaction; the session stays usable for handlers
            await self.session.rollback()

        return [
            TenantIdentity(
                tenant_id=model.tenant_id,
                database_name=model.database_name,
                created_at=(
                    model.created_at
                    if model.created_at.tzinfo is not None
                    else model.created_at.replace(tzinfo=UTC)
                ),
                validation_hash=model.validation_hash,
                creation_metadata=model.creation_metadata or None,
            )
            for model in models
        ]

    async def ensure_identity_table(self) -> None:
        try:
            await self._connection.run_sync(
                TenantIdentityModel.__table__.create, checkfirst=True
            )
            await self._connection.commit()
        except _UNAVAILABLE_ERRORS as e:
            raise TenantDatabaseUnavailableError(str(e)) from e
        self._probe.identity_table_created(self.database_name)

    async def write_identity(self, identity: TenantIdentity) -> None:
        self.session.add(
            TenantIdentityModel(
                tenant_id=identity.tenant_id,
                database_name=identity.database_name,
                created_at=identity.created_at,
                validation_hash=identity.validation_hash,
                creation_metadata=identity.creation_metadata or "",
            )
        )
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise IdentityAlreadyProvisionedError(
                f"Database {self.database_name!r} already has an identity record"
            ) from e
        except _UNAVAILABLE_ERRORS as e:
            raise TenantDatabaseUnavailableError(str(e)) from e
        self._probe.identity_written(identity.tenant_id, identity.database_name)


class SqlAlchemyTenantDatabaseGateway:
    """Opens tenant database connections through per-call engines."""

    def __init__(
        self,
        echo: bool = False,
        connection_probe: ConnectionProbe | None = None,
        probe: TenantDatabaseGatewayProbe | None = None,
    ):
        self._echo = echo
        self._connection_probe = connection_probe or DefaultConnectionProbe()
        self._probe = probe or DefaultTenantDatabaseGatewayProbe()

    @asynccontextmanager
    async def open(
        self, target: ConnectionTarget
    ) -> AsyncIterator[SqlAlchemyTenantDatabaseHandle]:
        """Connect to a tenant database.

        Raises:
            TenantDatabaseUnavailableError: If the connection cannot be opened
        """
        engine = create_tenant_engine(target.url, echo=self._echo)
        try:
            try:
                connection = await engine.connect()
            except (*_UNAVAILABLE_ERRORS, DBAPIError) as e:
                self._connection_probe.connection_failed(target.database_name, e)
                raise TenantDatabaseUnavailableError(
                    f"Cannot connect to tenant database {target.database_name!r}"
                ) from e

            self._connection_probe.connection_established(target.database_name)
            try:
                async with AsyncSession(
                    bind=connection, expire_on_commit=False
                ) as session:
                    yield SqlAlchemyTenantDatabaseHandle(
                        database_name=target.database_name,
                        connection=connection,
                        session=session,
                        probe=self._probe,
                    )
            finally:
                await connection.close()
                self._connection_probe.connection_closed(target.database_name)
        finally:
            await engine.dispose()
