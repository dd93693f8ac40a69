"""Tests for short code generation."""

import re

from src.shortlink.services.url_service import generate_short_code


class TestGenerateShortCode:
    """Test short code derivation."""

    def test_deterministic(self):
        """The same URL always yields the same code."""
        url = "https://example.com/test"
        assert generate_short_code(url) == generate_short_code(url)

    def test_default_format(self):
        """Codes are 8 lowercase hex characters by default."""
        code = generate_short_code("http://example.com")
        assert re.fullmatch(r"[0-9a-f]{8}", code)

    def test_known_digest_prefix(self):
        """Codes are the SHA-256 hex digest prefix of the input."""
        assert generate_short_code("abc") == "ba7816bf"

    def test_custom_length(self):
        """Test code with custom length."""
        assert len(generate_short_code("http://example.com", length=12)) == 12

    def test_exact_input_bytes(self):
        """Inputs differing in any byte give different codes."""
        assert generate_short_code("http://example.com") != generate_short_code("http://example.com/")
        assert generate_short_code("http://example.com") != generate_short_code("HTTP://example.com")
