"""
Tests for pURLs common utilities

Tests the shared helpers including:
- Query component encoding and decoding
- Absolute URL validation and base building
- Query-string parsing
- JSON and environment helpers
"""

import pytest

from purls.common import URLTools, safe_json_parse, get_env_setting, parse_bool


class TestEncoding:
    """Test component encoding and decoding."""

    def test_encode_reserved_characters(self):
        """Test that separators inside keys and values are escaped."""
        assert URLTools.encode_component("a b&c=d") == "a%20b%26c%3Dd"
        assert URLTools.encode_component("#frag?") == "%23frag%3F"

    def test_encode_keeps_unreserved_marks(self):
        """Test that the encodeURIComponent safe set is left alone."""
        assert URLTools.encode_component("a-b_c.d~e!f*g'h(i)") == "a-b_c.d~e!f*g'h(i)"

    def test_encode_unicode(self):
        """Test that non-ASCII text is UTF-8 percent-encoded."""
        assert URLTools.encode_component("café") == "caf%C3%A9"

    def test_encode_slash(self):
        """Test that slashes are escaped in components."""
        assert URLTools.encode_component("a/b") == "a%2Fb"

    def test_decode_does_not_treat_plus_as_space(self):
        """Test plain percent-decoding."""
        assert URLTools.decode_component("a%20b+c") == "a b+c"

    def test_decode_malformed_escape(self):
        """Test that malformed escapes do not raise."""
        assert URLTools.decode_component("100%") == "100%"


class TestValidateAbsoluteUrl:
    """Test absolute URL validation."""

    def test_valid_url(self):
        """Test that a normal URL passes validation."""
        parsed = URLTools.validate_absolute_url("https://example.com/path?a=1#top")

        assert parsed.scheme == "https"
        assert parsed.hostname == "example.com"
        assert parsed.query == "a=1"
        assert parsed.fragment == "top"

    @pytest.mark.parametrize("url", [
        "",
        "example.com/path",
        "/relative/path",
        "http://",
        "mailto:someone@example.com",
        "http://example.com/a b",
        "http://example.com:99999/",
        "http://example.com:abc/",
    ])
    def test_invalid_urls(self, url):
        """Test that non-absolute or malformed URLs are rejected."""
        with pytest.raises(ValueError):
            URLTools.validate_absolute_url(url)


class TestBuildBase:
    """Test base URL construction."""

    def _base(self, url):
        return URLTools.build_base(URLTools.validate_absolute_url(url))

    def test_simple_base(self):
        """Test scheme, host and path are kept."""
        assert self._base("http://e.com/p?a=1") == "http://e.com/p"

    def test_lowercases_scheme_and_host(self):
        """Test that scheme and host are lowercased but path is not."""
        assert self._base("HTTP://Example.COM/Path") == "http://example.com/Path"

    def test_empty_path_becomes_slash(self):
        """Test that a missing path is rendered as '/'."""
        assert self._base("https://example.com?a=1") == "https://example.com/"

    def test_default_port_dropped(self):
        """Test that default ports are removed."""
        assert self._base("http://e.com:80/p") == "http://e.com/p"
        assert self._base("https://e.com:443/p") == "https://e.com/p"

    def test_custom_port_kept(self):
        """Test that non-default ports are kept."""
        assert self._base("https://e.com:8443/p") == "https://e.com:8443/p"

    def test_credentials_dropped(self):
        """Test that userinfo is not part of the base."""
        assert self._base("https://user:pw@e.com/p") == "https://e.com/p"

    def test_ipv6_host(self):
        """Test that IPv6 hosts keep their brackets."""
        assert self._base("http://[::1]:8080/p") == "http://[::1]:8080/p"


class TestQueryParsing:
    """Test query-string helpers."""

    def test_query_pairs_keep_blank_values(self):
        """Test that blank and value-less keys are kept."""
        assert URLTools.query_pairs("a=1&b=&c") == [("a", "1"), ("b", ""), ("c", "")]

    def test_query_pairs_plus_is_space(self):
        """Test form-style decoding of '+'."""
        assert URLTools.query_pairs("q=a+b%2Bc") == [("q", "a b+c")]

    def test_query_map_last_wins(self):
        """Test that repeated keys keep their last value."""
        result = URLTools.query_map("http://e.com/?a=1&b=2&a=3")

        assert result == {"a": "3", "b": "2"}
        assert list(result) == ["a", "b"]

    def test_query_map_ignores_fragment(self):
        """Test that fragment text is not parsed as query."""
        assert URLTools.query_map("http://e.com/?a=1#b=2") == {"a": "1"}

    def test_query_map_no_query(self):
        """Test URL without query string."""
        assert URLTools.query_map("http://e.com/") == {}

    def test_query_map_unparseable_host(self):
        """Test that a URL the parser rejects still yields its query."""
        assert URLTools.query_map("http://[bad?x=1&y=a+b#z=2") == {"x": "1", "y": "a b"}


class TestResolveLocation:
    """Test Location header resolution."""

    def test_absolute_location(self):
        """Test absolute Location replaces the URL."""
        assert URLTools.resolve_location("http://a.test/x", "https://b.test/y") == "https://b.test/y"

    def test_root_relative_location(self):
        """Test root-relative Location keeps scheme and host."""
        assert URLTools.resolve_location("http://a.test/x/y?q=1", "/z?id=7") == "http://a.test/z?id=7"

    def test_path_relative_location(self):
        """Test path-relative Location resolves against the directory."""
        assert URLTools.resolve_location("http://a.test/x/y", "z") == "http://a.test/x/z"

    def test_scheme_relative_location(self):
        """Test protocol-relative Location keeps the scheme."""
        assert URLTools.resolve_location("https://a.test/x", "//b.test/y") == "https://b.test/y"

    def test_location_is_normalized(self):
        """Test that host case, default port and empty path are normalized."""
        assert URLTools.resolve_location("http://a.test/x", "https://B.test") == "https://b.test/"
        assert URLTools.resolve_location("http://a.test/x", "HTTP://b.test:80?q=1#f") == "http://b.test/?q=1#f"

    def test_malformed_location(self):
        """Test that an unparseable Location raises ValueError."""
        with pytest.raises(ValueError):
            URLTools.resolve_location("http://a.test/x", "http://[::1/oops")


class TestNormalizeUrl:
    """Test URL normalization."""

    def test_keeps_credentials_and_custom_port(self):
        """Test that userinfo and non-default ports survive."""
        assert URLTools.normalize_url("https://User:pw@Example.COM:8443/Path") == "https://User:pw@example.com:8443/Path"

    def test_ipv6_host(self):
        """Test that IPv6 hosts keep their brackets."""
        assert URLTools.normalize_url("http://[::1]:80") == "http://[::1]/"

    def test_non_hierarchical_unchanged(self):
        """Test that URLs without a host are returned as-is."""
        assert URLTools.normalize_url("mailto:someone@example.com") == "mailto:someone@example.com"


class TestSafeJsonParse:
    """Test JSON parsing helper."""

    def test_valid_json_bytes(self):
        """Test parsing a JSON body."""
        assert safe_json_parse(b'{"url": "http://e.com"}') == {"url": "http://e.com"}

    def test_invalid_json_returns_default(self):
        """Test malformed input falls back to default."""
        assert safe_json_parse("not json") is None
        assert safe_json_parse("not json", default={}) == {}

    def test_empty_input_returns_default(self):
        """Test empty input falls back to default."""
        assert safe_json_parse(b"", default=[]) == []
        assert safe_json_parse(None) is None


class TestEnvHelpers:
    """Test environment helpers."""

    def test_get_env_setting(self, monkeypatch):
        """Test reading and stripping a variable."""
        monkeypatch.setenv("PURLS_TEST_SETTING", "  5 ")
        assert get_env_setting("PURLS_TEST_SETTING") == "5"

    def test_blank_env_setting_is_unset(self, monkeypatch):
        """Test that blank variables are treated as missing."""
        monkeypatch.setenv("PURLS_TEST_SETTING", "   ")
        assert get_env_setting("PURLS_TEST_SETTING") is None

    def test_missing_env_setting(self, monkeypatch):
        """Test missing variable."""
        monkeypatch.delenv("PURLS_TEST_SETTING", raising=False)
        assert get_env_setting("PURLS_TEST_SETTING") is None

    @pytest.mark.parametrize("text,expected", [
        ("true", True), ("YES", True), ("1", True), ("on", True),
        ("false", False), ("No", False), ("0", False), ("off", False),
    ])
    def test_parse_bool(self, text, expected):
        """Test boolean parsing."""
        assert parse_bool(text) is expected

    def test_parse_bool_invalid(self):
        """Test unrecognized boolean text."""
        with pytest.raises(ValueError):
            parse_bool("maybe")
