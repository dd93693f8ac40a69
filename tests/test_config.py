"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from src.shortlink.core.config import DummyRedis, Settings, connect_redis


class TestSettings:

    def test_secret_key_required(self, monkeypatch):
        monkeypatch.delenv("SECRET_KEY", raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_short_secret_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, SECRET_KEY="short")

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", "environment-secret-0123")
        monkeypatch.setenv("RATE_LIMIT_BURST", "7")
        monkeypatch.setenv("RATE_LIMIT_SCOPE", "CLIENT")

        settings = Settings(_env_file=None)

        assert settings.SECRET_KEY == "environment-secret-0123"
        assert settings.RATE_LIMIT_BURST == 7
        assert settings.RATE_LIMIT_SCOPE == "client"

    def test_defaults(self):
        settings = Settings(_env_file=None, SECRET_KEY="default-secret-0123")

        assert settings.ACCESS_TOKEN_EXPIRE_HOURS == 24
        assert settings.SHORT_CODE_LENGTH == 8
        assert settings.RATE_LIMIT_PER_SECOND == 1.0
        assert settings.RATE_LIMIT_BURST == 5

    def test_invalid_scope(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, SECRET_KEY="default-secret-0123", RATE_LIMIT_SCOPE="user")

    def test_allowed_origins(self, make_settings):
        settings = make_settings(ALLOWED_ORIGINS="http://a.example, http://b.example")
        assert settings.allowed_origins == ["http://a.example", "http://b.example"]

    def test_cache_disabled_without_url(self, make_settings):
        assert isinstance(connect_redis(make_settings(REDIS_URL=None)), DummyRedis)
