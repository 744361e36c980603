"""Unit tests for identity validation hashing."""

import base64
import hashlib
from dataclasses import replace
from datetime import UTC, datetime, timedelta, timezone

from tenancy.application.security import (
    compute_validation_hash,
    format_created_at,
    verify_validation_hash,
)
from tests.unit.fakes import TEST_SECRET, make_identity

TENANT = "01HQ3V9Z8K6M4XJ2T7RPWN5B0C"
CREATED_AT = datetime(2024, 3, 1, 12, 30, 45, 123456, tzinfo=UTC)


class TestFormatCreatedAt:
    def test_utc_with_microseconds_and_z(self):
        assert format_created_at(CREATED_AT) == "2024-03-01T12:30:45.123456Z"

    def test_other_offsets_are_converted_to_utc(self):
        local = CREATED_AT.astimezone(timezone(timedelta(hours=2)))
        assert format_created_at(local) == "2024-03-01T12:30:45.123456Z"

    def test_naive_timestamps_are_taken_as_utc(self):
        naive = CREATED_AT.replace(tzinfo=None)
        assert format_created_at(naive) == "2024-03-01T12:30:45.123456Z"

    def test_zero_microseconds_are_kept(self):
        value = datetime(2024, 3, 1, tzinfo=UTC)
        assert format_created_at(value) == "2024-03-01T00:00:00.000000Z"


class TestComputeValidationHash:
    def test_matches_documented_format(self):
        payload = f"{TENANT}|lms_acme|2024-03-01T12:30:45.123456Z|{TEST_SECRET}"
        expected = base64.b64encode(
            hashlib.sha256(payload.encode("utf-8")).digest()
        ).decode("ascii")

        assert (
            compute_validation_hash(TENANT, "lms_acme", CREATED_AT, TEST_SECRET)
            == expected
        )

    def test_is_deterministic(self):
        first = compute_validation_hash(TENANT, "lms_acme", CREATED_AT, TEST_SECRET)
        second = compute_validation_hash(TENANT, "lms_acme", CREATED_AT, TEST_SECRET)
        assert first == second

    def test_depends_on_every_field(self):
        base = compute_validation_hash(TENANT, "lms_acme", CREATED_AT, TEST_SECRET)

        assert base != compute_validation_hash(
            "01HQ3VA1D2F3G4H5J6K7M8N9P0", "lms_acme", CREATED_AT, TEST_SECRET
        )
        assert base != compute_validation_hash(TENANT, "lms_other", CREATED_AT, TEST_SECRET)
        assert base != compute_validation_hash(
            TENANT, "lms_acme", CREATED_AT + timedelta(microseconds=1), TEST_SECRET
        )
        assert base != compute_validation_hash(
            TENANT, "lms_acme", CREATED_AT, TEST_SECRET + "x"
        )


class TestVerifyValidationHash:
    def test_valid_record(self):
        identity = make_identity(TENANT, "lms_acme")
        assert verify_validation_hash(identity, TEST_SECRET) is True

    def test_wrong_secret(self):
        identity = make_identity(TENANT, "lms_acme")
        assert verify_validation_hash(identity, "another-secret-value") is False

    def test_single_byte_tamper_is_detected(self):
        identity = make_identity(TENANT, "lms_acme")
        stored = identity.validation_hash
        flipped = ("B" if stored[0] == "A" else "A") + stored[1:]

        tampered = replace(identity, validation_hash=flipped)

        assert verify_validation_hash(tampered, TEST_SECRET) is False

    def test_tampered_field_is_detected(self):
        identity = make_identity(TENANT, "lms_acme")
        tampered = replace(identity, database_name="lms_other")

        assert verify_validation_hash(tampered, TEST_SECRET) is False

    def test_non_ascii_stored_hash_does_not_raise(self):
        identity = replace(make_identity(TENANT, "lms_acme"), validation_hash="é" * 44)
        assert verify_validation_hash(identity, TEST_SECRET) is False
