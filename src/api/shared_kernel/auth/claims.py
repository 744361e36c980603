"""Claim normalization for tokens issued by different identity providers.

Identity providers place custom claims under different names: a bare
``tenant_id``, a camel-case ``tenantId``, an Auth0-style URL-namespaced
``https://lms.example.com/tenant_id`` or a nested ``app_metadata`` object.
The functions here fold those variants into one canonical value before any
tenant routing happens. They are pure and hold no state.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

APP_METADATA_CLAIM = "app_metadata"


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _is_namespaced(claim: str, name: str, namespaces: Iterable[str]) -> bool:
    """Whether ``claim`` is a URL-namespaced variant of ``name``.

    With no configured namespaces any ``http(s)://.../<name>`` claim matches;
    otherwise the claim must start with one of the namespaces.
    """
    if not claim.startswith(("https://", "http://")):
        return False
    if not claim.endswith(f"/{name}"):
        return False
    allowed = [ns.rstrip("/") for ns in namespaces]
    if not allowed:
        return True
    prefix = claim[: -len(name) - 1]
    return prefix in allowed


def _flatten(value: Any) -> list[str]:
    """Turn a claim value into a list of non-blank strings.

    Accepts a string, a JSON array encoded as a string, or a list of strings.
    """
    if value is None:
        return []
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("[") and stripped.endswith("]"):
            try:
                decoded = json.loads(stripped)
            except json.JSONDecodeError:
                return [stripped]
            return _flatten(decoded)
        return [stripped] if stripped else []
    if isinstance(value, (list, tuple)):
        result: list[str] = []
        for item in value:
            result.extend(_flatten(item))
        return result
    return [str(value)]


def collect_claim_values(
    raw_claims: Mapping[str, Any],
    name: str,
    namespaces: Iterable[str] = (),
) -> list[str]:
    """Collect every value carried by the recognized variants of a claim.

    Recognized claim-name patterns, in order:

    1. the canonical name (``tenant_id``)
    2. its camel-case alias (``tenantId``)
    3. URL-namespaced claims ending in ``/<name>``
    4. ``app_metadata.<name>``

    Args:
        raw_claims: Decoded token claims
        name: Canonical claim name
        namespaces: Accepted namespace prefixes for pattern 3 (empty = any)

    Returns:
        Distinct values in first-seen order
    """
    namespaces = list(namespaces)
    values: list[str] = []

    for claim, value in raw_claims.items():
        if claim in (name, _camel_case(name)) or _is_namespaced(
            claim, name, namespaces
        ):
            values.extend(_flatten(value))

    app_metadata = raw_claims.get(APP_METADATA_CLAIM)
    if isinstance(app_metadata, Mapping):
        values.extend(_flatten(app_metadata.get(name)))

    return list(dict.fromkeys(values))


def normalize_claims(
    raw_claims: Mapping[str, Any],
    claim_name: str = "tenant_id",
    namespaces: Iterable[str] = (),
) -> str | None:
    """Extract the single canonical tenant identifier from raw claims.

    Args:
        raw_claims: Decoded token claims
        claim_name: Canonical tenant claim name
        namespaces: Accepted namespace prefixes for namespaced claims

    Returns:
        The tenant identifier, or None when no recognized claim carries a
        value or when the recognized claims carry more than one tenant.
    """
    values = collect_claim_values(raw_claims, claim_name, namespaces)
    if len(values) != 1:
        return None
    return values[0]


def normalize_roles(
    raw_claims: Mapping[str, Any],
    claim_name: str = "roles",
    namespaces: Iterable[str] = (),
) -> frozenset[str]:
    """Collect role names from all recognized role claim variants."""
    return frozenset(collect_claim_values(raw_claims, claim_name, namespaces))
