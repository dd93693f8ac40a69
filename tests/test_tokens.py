"""Tests for session token issue and validation."""

from datetime import datetime, timedelta, UTC

import pytest
from jose import jwt

from src.shortlink.core.errors import AuthError
from src.shortlink.services.token_service import TokenService

SECRET = "unit-test-secret-0123456789"


@pytest.fixture
def tokens():
    return TokenService(SECRET)


class TestTokenService:

    def test_issue_and_validate(self, tokens):
        token = tokens.issue("user-1", "alice")
        claims = tokens.validate(token)

        assert claims.user_id == "user-1"
        assert claims.username == "alice"

    def test_expiry_is_24_hours(self, tokens):
        token = tokens.issue("user-1", "alice")
        claims = tokens.validate(token)

        assert claims.expires_at - claims.issued_at == 24 * 3600

    def test_valid_until_expiry(self, tokens):
        issued = datetime(2024, 1, 1, tzinfo=UTC)
        token = tokens.issue("user-1", "alice", now=issued)

        assert tokens.validate(token, now=issued + timedelta(hours=23)).username == "alice"
        with pytest.raises(AuthError):
            tokens.validate(token, now=issued + timedelta(hours=24))

    def test_expired_token(self, tokens):
        token = tokens.issue("user-1", "alice", now=datetime.now(UTC) - timedelta(hours=25))
        with pytest.raises(AuthError):
            tokens.validate(token)

    def test_foreign_signature(self, tokens):
        forged = TokenService("another-secret-0123456789").issue("user-1", "alice")
        with pytest.raises(AuthError):
            tokens.validate(forged)

    def test_garbage_token(self, tokens):
        with pytest.raises(AuthError):
            tokens.validate("not-a-token")

    def test_missing_claims(self, tokens):
        token = jwt.encode({"sub": "user-1"}, SECRET, algorithm="HS256")
        with pytest.raises(AuthError):
            tokens.validate(token)

    def test_secret_required(self):
        with pytest.raises(ValueError):
            TokenService("")
