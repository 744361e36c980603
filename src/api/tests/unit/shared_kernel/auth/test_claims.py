"""Unit tests for claim normalization."""

import pytest

from shared_kernel.auth.claims import (
    collect_claim_values,
    normalize_claims,
    normalize_roles,
)

TENANT = "01HQ3V9Z8K6M4XJ2T7RPWN5B0C"
OTHER_TENANT = "01HQ3VA1D2F3G4H5J6K7M8N9P0"


class TestNormalizeClaims:
    """Tests for extracting the canonical tenant id."""

    @pytest.mark.parametrize(
        "claims",
        [
            {"tenant_id": TENANT},
            {"tenantId": TENANT},
            {"https://lms.example.com/tenant_id": TENANT},
            {"http://idp.example.org/claims/tenant_id": TENANT},
            {"app_metadata": {"tenant_id": TENANT}},
        ],
        ids=["canonical", "camel_case", "namespaced_https", "namespaced_http", "app_metadata"],
    )
    def test_recognized_patterns_yield_tenant(self, claims):
        """Every recognized claim-name pattern yields the same tenant id."""
        assert normalize_claims(claims) == TENANT

    def test_no_tenant_claim_returns_none(self):
        assert normalize_claims({"sub": "user-1", "email": "a@b.c"}) is None

    def test_blank_tenant_claim_returns_none(self):
        assert normalize_claims({"tenant_id": "   "}) is None

    def test_agreeing_claims_are_accepted(self):
        """The same value under several patterns is not ambiguous."""
        claims = {
            "tenant_id": TENANT,
            "https://lms.example.com/tenant_id": TENANT,
            "app_metadata": {"tenant_id": TENANT},
        }
        assert normalize_claims(claims) == TENANT

    def test_conflicting_claims_return_none(self):
        """Two different tenant ids are not one canonical tenant."""
        claims = {"tenant_id": TENANT, "tenantId": OTHER_TENANT}
        assert normalize_claims(claims) is None

    def test_multi_valued_claim_returns_none(self):
        assert normalize_claims({"tenant_id": [TENANT, OTHER_TENANT]}) is None

    def test_whitespace_is_trimmed(self):
        assert normalize_claims({"tenant_id": f"  {TENANT} "}) == TENANT

    def test_unrelated_suffix_is_not_matched(self):
        """Only claims ending in exactly /tenant_id count."""
        claims = {"https://lms.example.com/parent_tenant_id": TENANT}
        assert normalize_claims(claims) is None

    def test_unnamespaced_path_is_not_matched(self):
        assert normalize_claims({"custom/tenant_id": TENANT}) is None

    def test_configured_namespaces_restrict_matches(self):
        claims = {"https://evil.example.com/tenant_id": TENANT}
        namespaces = ["https://lms.example.com"]

        assert normalize_claims(claims, namespaces=namespaces) is None
        assert (
            normalize_claims(
                {"https://lms.example.com/tenant_id": TENANT}, namespaces=namespaces
            )
            == TENANT
        )

    def test_namespace_trailing_slash_is_ignored(self):
        claims = {"https://lms.example.com/tenant_id": TENANT}
        assert (
            normalize_claims(claims, namespaces=["https://lms.example.com/"]) == TENANT
        )

    def test_custom_claim_name(self):
        claims = {"organizationId": TENANT}
        assert normalize_claims(claims, claim_name="organization_id") == TENANT

    def test_non_mapping_app_metadata_is_ignored(self):
        assert normalize_claims({"app_metadata": "tenant_id"}) is None


class TestNormalizeRoles:
    """Tests for collecting role names."""

    def test_plain_list(self):
        assert normalize_roles({"roles": ["admin", "teacher"]}) == frozenset(
            {"admin", "teacher"}
        )

    def test_json_array_string(self):
        """Some providers send array claims as a JSON-encoded string."""
        claims = {"roles": '["admin", "teacher"]'}
        assert normalize_roles(claims) == frozenset({"admin", "teacher"})

    def test_single_string(self):
        assert normalize_roles({"roles": "student"}) == frozenset({"student"})

    def test_unparseable_json_is_kept_as_text(self):
        assert normalize_roles({"roles": "[admin"}) == frozenset({"[admin"})

    def test_roles_merged_across_patterns(self):
        claims = {
            "roles": ["teacher"],
            "https://lms.example.com/roles": ["admin"],
            "app_metadata": {"roles": ["auditor"]},
        }
        assert normalize_roles(claims) == frozenset({"teacher", "admin", "auditor"})

    def test_missing_roles_is_empty(self):
        assert normalize_roles({"sub": "user-1"}) == frozenset()


class TestCollectClaimValues:
    """Tests for the underlying value collection."""

    def test_values_are_distinct_in_first_seen_order(self):
        claims = {"roles": ["b", "a", "b"], "app_metadata": {"roles": ["a", "c"]}}
        assert collect_claim_values(claims, "roles") == ["b", "a", "c"]

    def test_non_string_values_are_stringified(self):
        assert collect_claim_values({"tenant_id": 42}, "tenant_id") == ["42"]

    def test_null_value_is_skipped(self):
        assert collect_claim_values({"tenant_id": None}, "tenant_id") == []

    def test_tenant_claims_across_patterns_are_all_kept(self):
        """Callers holding several tenants get every one of them."""
        claims = {"tenant_id": [TENANT], "https://lms.example.com/tenant_id": OTHER_TENANT}
        assert collect_claim_values(claims, "tenant_id") == [TENANT, OTHER_TENANT]
