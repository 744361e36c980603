"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
Required values (directory URL, tenant connection template, validation
secret) have no defaults: a missing value fails settings construction,
which aborts application startup.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DATABASE_NAME_PLACEHOLDER = "{DatabaseName}"


class DatabaseSettings(BaseSettings):
    """Tenant Directory database settings.

    Environment variables:
        LMS_DB_DIRECTORY_URL: SQLAlchemy async URL of the shared directory database (required)
        LMS_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        LMS_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        LMS_DB_ECHO: Log SQL statements (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="LMS_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    directory_url: SecretStr = Field(
        description="Async SQLAlchemy URL for the Tenant Directory database",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )
    echo: bool = Field(default=False, description="Log SQL statements")

    @field_validator("directory_url")
    @classmethod
    def validate_directory_url(cls, value: SecretStr) -> SecretStr:
        """Reject a blank directory URL."""
        if not value.get_secret_value().strip():
            raise ValueError("directory_url must not be empty")
        return value

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self


class TenancySettings(BaseSettings):
    """Tenant routing and identity validation settings.

    Environment variables:
        LMS_TENANCY_CONNECTION_TEMPLATE: Tenant database URL containing {DatabaseName} (required)
        LMS_TENANCY_VALIDATION_SECRET: Secret mixed into identity validation hashes (required)
        LMS_TENANCY_TENANT_CLAIM_NAME: Canonical tenant claim name (default: tenant_id)
        LMS_TENANCY_CLAIM_NAMESPACES: Accepted claim namespaces, JSON list (default: any)
        LMS_TENANCY_TENANT_HEADER_NAME: Header selecting one of several claimed tenants (default: X-Tenant-Id)
        LMS_TENANCY_SUPERADMIN_ROLE: Role that may select any tenant (default: superadmin)
        LMS_TENANCY_CONNECTION_MAX_ATTEMPTS: Tenant database connection attempts (default: 3)
        LMS_TENANCY_CONNECTION_RETRY_BASE_DELAY_SECONDS: First retry delay (default: 0.1)
        LMS_TENANCY_CONNECTION_RETRY_MAX_DELAY_SECONDS: Retry delay ceiling (default: 2.0)
        LMS_TENANCY_RESOLUTION_TIMEOUT_SECONDS: Bound for a whole resolution (default: 10)
        LMS_TENANCY_EXEMPT_PATH_PREFIXES: Routes that skip tenant resolution, JSON list
    """

    model_config = SettingsConfigDict(
        env_prefix="LMS_TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    connection_template: SecretStr = Field(
        description="Tenant database URL template with a {DatabaseName} placeholder",
    )
    validation_secret: SecretStr = Field(
        description="Server-side secret used in tenant identity validation hashes",
    )
    tenant_claim_name: str = Field(
        default="tenant_id",
        description="Canonical claim carrying the tenant identifier",
        min_length=1,
    )
    claim_namespaces: list[str] = Field(
        default_factory=list,
        description="Namespace prefixes accepted for namespaced claims (empty = any)",
    )
    tenant_header_name: str = Field(
        default="X-Tenant-Id",
        description="Header a caller with several tenant claims uses to pick one",
        min_length=1,
    )
    superadmin_role: str = Field(
        default="superadmin",
        description="Role whose holders may select any tenant with the tenant header",
        min_length=1,
    )
    connection_max_attempts: int = Field(
        default=3,
        description="Attempts to reach a tenant database before giving up",
        ge=1,
        le=10,
    )
    connection_retry_base_delay_seconds: float = Field(
        default=0.1,
        description="Delay before the first retry, doubled on each further retry",
        ge=0,
    )
    connection_retry_max_delay_seconds: float = Field(
        default=2.0,
        description="Upper bound for a single retry delay",
        ge=0,
    )
    resolution_timeout_seconds: float = Field(
        default=10.0,
        description="Upper bound for the whole tenant resolution sequence",
        gt=0,
    )
    exempt_path_prefixes: list[str] = Field(
        default_factory=lambda: [
            "/health",
            "/docs",
            "/redoc",
            "/openapi.json",
            "/api/v1/solution/",
        ],
        description="Route prefixes that never require tenant context",
    )

    @field_validator("connection_template")
    @classmethod
    def validate_connection_template(cls, value: SecretStr) -> SecretStr:
        """The template must contain the database name placeholder exactly once."""
        count = value.get_secret_value().count(DATABASE_NAME_PLACEHOLDER)
        if count != 1:
            raise ValueError(
                f"connection_template must contain {DATABASE_NAME_PLACEHOLDER} "
                f"exactly once (found {count})"
            )
        return value

    @field_validator("validation_secret")
    @classmethod
    def validate_validation_secret(cls, value: SecretStr) -> SecretStr:
        """Reject short validation secrets."""
        if len(value.get_secret_value()) < 16:
            raise ValueError("validation_secret must be at least 16 characters")
        return value


class OIDCSettings(BaseSettings):
    """OIDC bearer token validation settings.

    Environment variables:
        LMS_OIDC_ISSUER_URL: Token issuer (default: http://localhost:8080/realms/lms)
        LMS_OIDC_AUDIENCE: Expected audience (default: atomic-lms-api)
        LMS_OIDC_USER_ID_CLAIM: Claim holding the subject id (default: sub)
        LMS_OIDC_USERNAME_CLAIM: Claim holding the username (default: preferred_username)
        LMS_OIDC_ROLES_CLAIM: Canonical roles claim (default: roles)
    """

    model_config = SettingsConfigDict(
        env_prefix="LMS_OIDC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    issuer_url: str = Field(
        default="http://localhost:8080/realms/lms",
        description="OIDC issuer URL",
    )
    audience: str = Field(default="atomic-lms-api", description="Expected audience")
    user_id_claim: str = Field(default="sub", description="Subject claim")
    username_claim: str = Field(
        default="preferred_username", description="Username claim"
    )
    roles_claim: str = Field(default="roles", description="Canonical roles claim")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="LMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="Atomic LMS API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()  # type: ignore[call-arg]


@lru_cache
def get_tenancy_settings() -> TenancySettings:
    """Get cached tenancy settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return TenancySettings()  # type: ignore[call-arg]


@lru_cache
def get_oidc_settings() -> OIDCSettings:
    """Get cached OIDC settings."""
    return OIDCSettings()
