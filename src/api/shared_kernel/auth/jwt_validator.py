"""Bearer token validation against the OIDC provider.

Tokens are verified with the provider's JWKS, which is cached for a
configurable TTL. A verified token becomes an ``AuthenticatedPrincipal``
carrying the raw claims so that tenant routing can normalize them later.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Mapping

import httpx
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

from shared_kernel.auth.claims import normalize_roles

if TYPE_CHECKING:
    from shared_kernel.auth.observability import JWTValidatorProbe


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """Caller identity established from a verified token.

    Attributes:
        subject: Stable user identifier (the configured user id claim)
        username: Display username, when the provider sends one
        roles: Normalized role names
        claims: Every claim of the verified token, unmodified
    """

    subject: str
    username: str | None = None
    roles: frozenset[str] = frozenset()
    claims: Mapping[str, Any] = field(default_factory=dict, repr=False)

    def has_role(self, role: str) -> bool:
        return role in self.roles


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be verified."""


class JWTValidator:
    """Verifies RS256 tokens issued by the configured OIDC provider.

    Signature, expiry, issuer and audience are all checked. The JWKS is
    fetched through OpenID discovery and cached for ``jwks_cache_ttl``.
    """

    def __init__(
        self,
        issuer_url: str,
        audience: str,
        probe: JWTValidatorProbe,
        user_id_claim: str = "sub",
        username_claim: str = "preferred_username",
        roles_claim: str = "roles",
        claim_namespaces: list[str] | None = None,
        jwks_cache_ttl: timedelta = timedelta(hours=24),
    ):
        """Initialize the validator.

        Args:
            issuer_url: OIDC issuer URL
            audience: Expected audience claim value
            probe: Observability probe
            user_id_claim: Claim holding the user id
            username_claim: Claim holding the display username
            roles_claim: Canonical name of the roles claim
            claim_namespaces: Accepted namespaces for URL-namespaced claims
            jwks_cache_ttl: How long fetched keys stay valid
        """
        self._issuer_url = issuer_url.rstrip("/")
        self._audience = audience
        self._probe = probe
        self._user_id_claim = user_id_claim
        self._username_claim = username_claim
        self._roles_claim = roles_claim
        self._claim_namespaces = list(claim_namespaces or [])
        self._jwks_cache_ttl = jwks_cache_ttl

        self._jwks: dict[str, Any] | None = None
        self._jwks_fetched_at: datetime | None = None
        self._jwks_lock = asyncio.Lock()

    def _reject(self, reason: str, message: str) -> InvalidTokenError:
        self._probe.token_rejected(reason=reason)
        return InvalidTokenError(message)

    async def authenticate(self, token: str) -> AuthenticatedPrincipal:
        """Verify a bearer token and build the principal it identifies.

        Args:
            token: Encoded JWT without the ``Bearer`` prefix

        Returns:
            The authenticated principal

        Raises:
            InvalidTokenError: If the token is malformed, expired, signed by
                an unknown key, or lacks the user id claim.
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise self._reject("malformed", f"Invalid token format: {e}") from e
        if not header:
            raise self._reject("missing_header", "Invalid token: missing header")

        jwks = await self._get_jwks()

        try:
            claims = jwt.decode(
                token=token,
                key=jwks,
                algorithms=["RS256"],
                audience=self._audience,
                issuer=self._issuer_url,
            )
        except ExpiredSignatureError as e:
            raise self._reject("expired", "Token has expired") from e
        except JWTClaimsError as e:
            message = str(e).lower()
            if "audience" in message:
                raise self._reject("invalid_audience", "Invalid audience claim") from e
            if "issuer" in message:
                raise self._reject("invalid_issuer", "Invalid issuer claim") from e
            raise self._reject("invalid_claims", f"Invalid token claims: {e}") from e
        except JWTError as e:
            if "signature" in str(e).lower():
                raise self._reject("invalid_signature", "Invalid token signature") from e
            raise self._reject("invalid_token", f"Invalid token: {e}") from e

        subject = claims.get(self._user_id_claim)
        if subject is None or str(subject).strip() == "":
            raise self._reject(
                f"missing_{self._user_id_claim}",
                f"Missing required claim: {self._user_id_claim}",
            )

        username = claims.get(self._username_claim)
        principal = AuthenticatedPrincipal(
            subject=str(subject),
            username=str(username) if username is not None else None,
            roles=normalize_roles(claims, self._roles_claim, self._claim_namespaces),
            claims=dict(claims),
        )
        self._probe.principal_authenticated(
            subject=principal.subject, role_count=len(principal.roles)
        )
        return principal

    async def _get_jwks(self) -> dict[str, Any]:
        if self._is_cache_valid():
            self._probe.jwks_cache_hit()
            return self._jwks  # type: ignore[return-value]

        async with self._jwks_lock:
            # Another request may have refreshed the keys while we waited
            if self._is_cache_valid():
                self._probe.jwks_cache_hit()
                return self._jwks  # type: ignore[return-value]
            return await self._fetch_jwks()

    def _is_cache_valid(self) -> bool:
        if self._jwks is None or self._jwks_fetched_at is None:
            return False
        age = datetime.now(tz=timezone.utc) - self._jwks_fetched_at
        return age < self._jwks_cache_ttl

    async def _fetch_jwks(self) -> dict[str, Any]:
        """Fetch keys through the provider's OpenID discovery document.

        Raises:
            InvalidTokenError: If discovery or the key download fails.
        """
        discovery_url = f"{self._issuer_url}/.well-known/openid-configuration"
        try:
            async with httpx.AsyncClient() as client:
                discovery = await client.get(discovery_url)
                discovery.raise_for_status()
                jwks_uri = discovery.json().get("jwks_uri")
                if not jwks_uri:
                    self._probe.jwks_fetch_failed(
                        error="Missing jwks_uri in OpenID configuration"
                    )
                    raise InvalidTokenError(
                        "OIDC provider missing jwks_uri in configuration"
                    )

                keys_response = await client.get(jwks_uri)
                keys_response.raise_for_status()
                jwks = keys_response.json()
        except httpx.HTTPError as e:
            self._probe.jwks_fetch_failed(error=str(e))
            raise InvalidTokenError(
                f"Failed to fetch JWKS from OIDC provider: {e}"
            ) from e
        except ValueError as e:
            self._probe.jwks_fetch_failed(error=str(e))
            raise InvalidTokenError(f"OIDC provider returned invalid JSON: {e}") from e

        self._jwks = jwks
        self._jwks_fetched_at = datetime.now(tz=timezone.utc)
        self._probe.jwks_fetched(key_count=len(jwks.get("keys", [])))
        return jwks
