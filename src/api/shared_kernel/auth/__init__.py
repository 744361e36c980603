"""Authentication shared kernel module."""

from shared_kernel.auth.claims import (
    collect_claim_values,
    normalize_claims,
    normalize_roles,
)
from shared_kernel.auth.jwt_validator import (
    AuthenticatedPrincipal,
    InvalidTokenError,
    JWTValidator,
)
from shared_kernel.auth.observability import (
    DefaultJWTValidatorProbe,
    JWTValidatorProbe,
)

__all__ = [
    "AuthenticatedPrincipal",
    "DefaultJWTValidatorProbe",
    "InvalidTokenError",
    "JWTValidator",
    "JWTValidatorProbe",
    "collect_claim_values",
    "normalize_claims",
    "normalize_roles",
]
