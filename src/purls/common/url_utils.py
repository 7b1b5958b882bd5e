"""
pURLs URL Utilities

Shared URL parsing, encoding, and query-string helpers.
"""

from urllib.parse import SplitResult, urlsplit, urlunsplit, parse_qsl, quote, unquote, urljoin
from typing import Dict, List, Tuple


# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_.~"
COMPONENT_SAFE_CHARS = "!*'()"

DEFAULT_PORTS: Dict[str, int] = {
    'http': 80,
    'https': 443,
}


class URLTools:
    """Handles URL validation, encoding and query parsing."""

    @staticmethod
    def encode_component(text: str) -> str:
        """
        Percent-encode a single query key or value.

        Args:
            text: Raw key or value

        Returns:
            Encoded text safe to place between '&' and '=' separators
        """
        return quote(text, safe=COMPONENT_SAFE_CHARS)

    @staticmethod
    def decode_component(text: str) -> str:
        """
        Percent-decode text without treating '+' as a space.

        Malformed escapes are kept as-is instead of raising.
        """
        return unquote(text)

    @staticmethod
    def validate_absolute_url(url: str) -> SplitResult:
        """
        Parse and validate an absolute URL.

        Validation rules:
        - No whitespace characters are allowed.
        - Scheme, network location and hostname must be non-empty.
        - Port, if present, must be a valid number.

        Args:
            url: Input URL string

        Returns:
            Split URL components

        Raises:
            ValueError: If the input is not an absolute URL
        """
        if not url:
            raise ValueError("URL is empty")

        if any(char.isspace() for char in url):
            raise ValueError("URL must not contain whitespace")

        parsed = urlsplit(url)

        if not parsed.scheme:
            raise ValueError("URL must have a non-empty scheme")
        if not parsed.netloc:
            raise ValueError("URL must have a network location (host[:port])")
        if not parsed.hostname:
            raise ValueError("URL must have a hostname")

        # Raises ValueError for ports that are out of range or not numeric
        parsed.port

        return parsed

    @staticmethod
    def build_base(parsed: SplitResult) -> str:
        """
        Build the base URL (scheme, host, port, path) from split components.

        Scheme and host are lowercased, credentials are dropped, default
        ports are removed and an empty path becomes "/".

        Args:
            parsed: Components from validate_absolute_url()

        Returns:
            Base URL without query or fragment
        """
        scheme = parsed.scheme.lower()
        host = (parsed.hostname or '').lower()
        if ':' in host:
            host = f"[{host}]"

        port = parsed.port
        if port is not None and DEFAULT_PORTS.get(scheme) != port:
            host = f"{host}:{port}"

        path = parsed.path or '/'
        return f"{scheme}://{host}{path}"

    @staticmethod
    def query_pairs(query: str) -> List[Tuple[str, str]]:
        """
        Parse a query string into ordered (key, value) pairs.

        Blank values are kept, so "a&b=" yields [("a", ""), ("b", "")].
        """
        return parse_qsl(query, keep_blank_values=True)

    @staticmethod
    def query_map(url: str) -> Dict[str, str]:
        """
        Parse a URL's query string into a key -> value mapping.

        The last occurrence wins when a key repeats; insertion order follows
        the first appearance of each key.

        Args:
            url: Full URL

        Returns:
            Mapping of query keys to values
        """
        try:
            query = urlsplit(url).query
        except ValueError:
            # Unparseable authority (e.g. "http://[bad?x=1"): split the text
            query = url.split('#', 1)[0].partition('?')[2]

        result: Dict[str, str] = {}
        for key, value in URLTools.query_pairs(query):
            result[key] = value
        return result

    @staticmethod
    def resolve_location(current_url: str, location: str) -> str:
        """
        Resolve a Location header against the URL that returned it.

        Args:
            current_url: URL of the redirecting response
            location: Raw Location header value (absolute or relative)

        Returns:
            Absolute URL of the next hop, normalized with normalize_url()

        Raises:
            ValueError: If the Location cannot be parsed
        """
        return URLTools.normalize_url(urljoin(current_url, location.strip()))

    @staticmethod
    def normalize_url(url: str) -> str:
        """
        Normalize an absolute URL the way browsers serialize it.

        Scheme and host are lowercased, default ports are dropped and an
        empty path becomes "/". Credentials, query and fragment are kept.
        URLs without a scheme or host are returned unchanged.

        Raises:
            ValueError: If the host or port is malformed
        """
        parsed = urlsplit(url)
        if not parsed.scheme or not parsed.hostname:
            return url

        scheme = parsed.scheme.lower()
        host = parsed.hostname.lower()
        if ':' in host:
            host = f"[{host}]"

        port = parsed.port
        if port is not None and DEFAULT_PORTS.get(scheme) != port:
            host = f"{host}:{port}"

        userinfo, at, _ = parsed.netloc.rpartition('@')
        netloc = f"{userinfo}{at}{host}"

        return urlunsplit((scheme, netloc, parsed.path or '/', parsed.query, parsed.fragment))
