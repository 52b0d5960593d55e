"""Tests for lighthouse.validation.sanitize."""

import pytest

from lighthouse.validation.sanitize import (
    sanitize_email,
    sanitize_float,
    sanitize_int,
    sanitize_string,
    sanitize_url,
)


class TestSanitizeString:
    def test_trims_and_escapes(self) -> None:
        assert sanitize_string("  <script>alert('x')</script>  ") == (
            "&lt;script&gt;alert(&#x27;x&#x27;)&lt;/script&gt;"
        )

    def test_escapes_double_quotes_and_ampersand(self) -> None:
        assert sanitize_string('a "b" & c') == "a &quot;b&quot; &amp; c"

    def test_none_is_empty(self) -> None:
        assert sanitize_string(None) == ""


class TestSanitizeEmail:
    def test_trims(self) -> None:
        assert sanitize_email("  user@example.com ") == "user@example.com"

    def test_drops_disallowed_characters(self) -> None:
        assert sanitize_email("us(er)@exa mple.com") == "user@example.com"
        assert sanitize_email("<a@b.com>") == "a@b.com"


class TestSanitizeUrl:
    def test_trims(self) -> None:
        assert sanitize_url("  https://example.com/path  ") == "https://example.com/path"

    def test_drops_disallowed_characters(self) -> None:
        assert sanitize_url("https://exa mple.com/ä") == "https://example.com/"


class TestSanitizeNumbers:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(" 123abc ", 123), ("-42", -42), ("abc", 0), ("", 0), (None, 0), (7, 7), ("1,234", 1234)],
    )
    def test_int(self, value, expected) -> None:
        assert sanitize_int(value) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(" 12.34abc ", 12.34), ("-0.5", -0.5), ("abc", 0.0), (3, 3.0), (".5", 0.5)],
    )
    def test_float(self, value, expected) -> None:
        assert sanitize_float(value) == pytest.approx(expected)
