"""Authenticated principal dependency.

Bearer tokens are optional at this layer: a request without one gets
``None`` and the route decides whether that is acceptable. A token that is
present but invalid is always rejected.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from infrastructure.settings import get_oidc_settings, get_tenancy_settings
from shared_kernel.auth import (
    AuthenticatedPrincipal,
    DefaultJWTValidatorProbe,
    InvalidTokenError,
    JWTValidator,
)
from tenancy.application.exceptions import UnauthorizedError

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_jwt_validator() -> JWTValidator:
    """Get cached JWT validator.

    A single instance is reused across requests so its JWKS cache is shared.
    """
    oidc = get_oidc_settings()
    return JWTValidator(
        issuer_url=oidc.issuer_url,
        audience=oidc.audience,
        probe=DefaultJWTValidatorProbe(),
        user_id_claim=oidc.user_id_claim,
        username_claim=oidc.username_claim,
        roles_claim=oidc.roles_claim,
        claim_namespaces=get_tenancy_settings().claim_namespaces,
    )


async def authenticate(
    credentials: HTTPAuthorizationCredentials | None,
    validator: JWTValidator,
) -> AuthenticatedPrincipal | None:
    """Turn optional bearer credentials into a principal.

    Args:
        credentials: Parsed ``Authorization: Bearer`` header, if any
        validator: Token validator

    Returns:
        The principal, or None when no bearer token was sent

    Raises:
        UnauthorizedError: If a token was sent but failed verification
    """
    if credentials is None or not credentials.credentials:
        return None
    try:
        return await validator.authenticate(credentials.credentials)
    except InvalidTokenError as e:
        raise UnauthorizedError() from e


async def get_principal(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
    validator: Annotated[JWTValidator, Depends(get_jwt_validator)],
) -> AuthenticatedPrincipal | None:
    """FastAPI dependency returning the caller's principal, if authenticated."""
    return await authenticate(credentials, validator)


async def require_principal(
    principal: Annotated[AuthenticatedPrincipal | None, Depends(get_principal)],
) -> AuthenticatedPrincipal:
    """FastAPI dependency for routes that need authentication but no tenant.

    Raises:
        UnauthorizedError: If the request is not authenticated
    """
    if principal is None:
        raise UnauthorizedError()
    return principal
