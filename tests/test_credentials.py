"""Tests for password hashing and user id derivation."""

import re

import pytest

from src.shortlink.core.errors import HashingError
from src.shortlink.services.credential_service import derive_user_id


class TestCredentialManager:

    def test_verify_round_trip(self, credentials):
        password_hash = credentials.hash("secret123")
        assert credentials.verify("secret123", password_hash)

    def test_wrong_password(self, credentials):
        password_hash = credentials.hash("secret123")
        assert not credentials.verify("secret124", password_hash)

    def test_hash_is_salted(self, credentials):
        """Hashing the same password twice gives different hashes."""
        assert credentials.hash("secret123") != credentials.hash("secret123")

    def test_hash_is_not_plaintext(self, credentials):
        assert "secret123" not in credentials.hash("secret123")

    def test_malformed_hash_returns_false(self, credentials):
        assert credentials.verify("secret123", "not-a-bcrypt-hash") is False

    def test_hashing_failure_is_reported(self, credentials):
        with pytest.raises(HashingError):
            credentials.hash(None)


class TestDeriveUserId:

    def test_deterministic(self):
        assert derive_user_id("alice") == derive_user_id("alice")

    def test_distinct_usernames(self):
        assert derive_user_id("alice") != derive_user_id("bob")

    def test_format(self):
        assert re.fullmatch(r"[0-9a-f]{64}", derive_user_id("alice"))
