"""Tenant aggregate for the Tenancy context."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime

from tenancy.domain.exceptions import (
    InvalidTenantError,
    TenantDatabaseNameImmutableError,
)
from tenancy.domain.value_objects import TenantId

NAME_MAX_LENGTH = 255
SLUG_MAX_LENGTH = 100
DATABASE_NAME_MAX_LENGTH = 255
METADATA_MAX_ENTRIES = 50
METADATA_KEY_MAX_LENGTH = 100
METADATA_VALUE_MAX_LENGTH = 1000

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
DATABASE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


def _check_name(name: str) -> list[str]:
    if not name or not name.strip():
        return ["Tenant name is required."]
    if len(name) > NAME_MAX_LENGTH:
        return [f"Tenant name must not exceed {NAME_MAX_LENGTH} characters."]
    return []


def _check_slug(slug: str) -> list[str]:
    if not slug:
        return ["Tenant slug is required."]
    errors = []
    if len(slug) > SLUG_MAX_LENGTH:
        errors.append(f"Tenant slug must not exceed {SLUG_MAX_LENGTH} characters.")
    if not SLUG_PATTERN.match(slug):
        errors.append(
            "Tenant slug must contain only lowercase letters, numbers, and hyphens."
        )
    return errors


def _check_database_name(database_name: str) -> list[str]:
    if not database_name:
        return ["Database name is required."]
    errors = []
    if len(database_name) > DATABASE_NAME_MAX_LENGTH:
        errors.append(
            f"Database name must not exceed {DATABASE_NAME_MAX_LENGTH} characters."
        )
    if not DATABASE_NAME_PATTERN.match(database_name):
        errors.append(
            "Database name must contain only letters, numbers, and underscores."
        )
    return errors


def _check_metadata(metadata: dict[str, str]) -> list[str]:
    errors = []
    if len(metadata) > METADATA_MAX_ENTRIES:
        errors.append(f"Metadata must not exceed {METADATA_MAX_ENTRIES} entries.")
    if any(len(key) > METADATA_KEY_MAX_LENGTH for key in metadata):
        errors.append(
            f"Metadata keys must not exceed {METADATA_KEY_MAX_LENGTH} characters."
        )
    if any(len(value) > METADATA_VALUE_MAX_LENGTH for value in metadata.values()):
        errors.append(
            f"Metadata values must not exceed {METADATA_VALUE_MAX_LENGTH} characters."
        )
    return errors


@dataclass
class Tenant:
    """A customer organization with its own isolated database.

    Business rules:
    - ``slug`` and ``database_name`` are globally unique (enforced by storage)
    - ``database_name`` maps permanently to this tenant once assigned
    - Tenants are soft-deleted; deleted tenants keep their row
    - Audit fields are written by the repository, never by callers

    ``database_name`` may be empty only for rows read back from storage that
    were never provisioned; the factory always requires one.
    """

    id: TenantId
    name: str
    slug: str
    database_name: str
    is_active: bool = True
    metadata: dict[str, str] = field(default_factory=dict)
    is_deleted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str = ""
    updated_by: str = ""

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        database_name: str,
        is_active: bool = True,
        metadata: dict[str, str] | None = None,
    ) -> Tenant:
        """Create a new tenant with a fresh id.

        Raises:
            InvalidTenantError: If any attribute breaks a tenant rule
        """
        metadata = dict(metadata or {})
        errors = (
            _check_name(name)
            + _check_slug(slug)
            + _check_database_name(database_name)
            + _check_metadata(metadata)
        )
        if errors:
            raise InvalidTenantError(errors)

        return cls(
            id=TenantId.generate(),
            name=name.strip(),
            slug=slug,
            database_name=database_name,
            is_active=is_active,
            metadata=metadata,
            created_at=datetime.now(UTC),
        )

    def update(
        self,
        name: str,
        slug: str,
        is_active: bool,
        metadata: dict[str, str] | None = None,
        database_name: str | None = None,
    ) -> None:
        """Replace the mutable attributes of the tenant.

        ``database_name`` is accepted only so callers that echo the full
        resource back are not rejected; any different value is refused.

        Raises:
            InvalidTenantError: If any attribute breaks a tenant rule
            TenantDatabaseNameImmutableError: If a different database name is given
        """
        if database_name is not None and database_name != self.database_name:
            raise TenantDatabaseNameImmutableError(
                f"Tenant {self.id} is bound to database {self.database_name!r}"
            )

        metadata = dict(metadata or {})
        errors = _check_name(name) + _check_slug(slug) + _check_metadata(metadata)
        if errors:
            raise InvalidTenantError(errors)

        self.name = name.strip()
        self.slug = slug
        self.is_active = is_active
        self.metadata = metadata
        self.updated_at = datetime.now(UTC)

    def mark_deleted(self) -> None:
        """Soft-delete the tenant. Idempotent."""
        if not self.is_deleted:
            self.is_deleted = True
            self.updated_at = datetime.now(UTC)

    @property
    def is_routable(self) -> bool:
        """Whether requests may be routed to this tenant's database."""
        return self.is_active and not self.is_deleted
