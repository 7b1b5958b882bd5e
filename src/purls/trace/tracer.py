"""
pURLs Redirect Tracer

Follows HTTP redirects hop by hop with HEAD requests, recording every
response, without letting the HTTP client follow redirects itself.
"""

import logging
import threading
import time
from dataclasses import dataclass
from http.cookiejar import DefaultCookiePolicy
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..common import URLTools

logger = logging.getLogger("purls.trace")

DEFAULT_MAX_REDIRECTS = 10
DEFAULT_USER_AGENT = "purls/1.0"

# Reasons a trace stops
STOP_FINAL = "final"
STOP_MISSING_LOCATION = "missing_location"
STOP_MAX_REDIRECTS = "max_redirects"
STOP_TRANSPORT_ERROR = "transport_error"
STOP_CANCELLED = "cancelled"
STOP_NOT_TRACED = "not_traced"


@dataclass(frozen=True)
class Hop:
    """One observed response within a trace."""

    url: str
    status_code: int
    location: Optional[str] = None
    duration_ms: float = 0.0

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'status': self.status_code,
            'location': self.location,
            'duration_ms': round(self.duration_ms, 2)
        }


@dataclass(frozen=True)
class RedirectChain:
    """
    Ordered URLs visited during a trace, origin first.

    Each URL after the first is the Location of the previous hop resolved
    against the previous URL.
    """

    urls: Tuple[str, ...]
    hops: Tuple[Hop, ...] = ()
    stop_reason: str = STOP_FINAL
    error: Optional[str] = None

    @property
    def origin_url(self) -> str:
        return self.urls[0]

    @property
    def final_url(self) -> str:
        return self.urls[-1]

    @property
    def redirect_count(self) -> int:
        return len(self.urls) - 1

    def to_dict(self, detailed: bool = False) -> Dict[str, Any]:
        """Convert to the trace response shape for JSON serialization."""
        data: Dict[str, Any] = {
            'redirectChain': list(self.urls),
            'finalUrl': self.final_url,
            'redirectCount': self.redirect_count
        }
        if detailed:
            data['hops'] = [hop.to_dict() for hop in self.hops]
            data['stopReason'] = self.stop_reason
            data['error'] = self.error
        return data


class RedirectTracer:
    """
    Trace the redirect chain of a URL.

    Features:
    - HEAD requests with automatic redirect following disabled
    - Relative Location headers resolved against the current URL
    - Hop bound as the only loop breaker
    - Transport failures and cancellation end the trace with the partial chain

    Example:
        tracer = RedirectTracer(timeout=5)
        chain = tracer.trace('http://example.com/promo?utm_source=news')
        print(chain.final_url, chain.redirect_count)
    """

    def __init__(
        self,
        timeout: float = 10,
        verify_ssl: bool = True,
        max_retries: int = 0,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize Redirect Tracer.

        Args:
            timeout: Per-hop request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            max_retries: Connection-level retry attempts per hop
            user_agent: User-Agent header sent with each request
            session: Optional pre-built session (mainly for tests)
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.max_retries = max_retries
        self.user_agent = user_agent

        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create HTTP session with retry configuration."""
        session = requests.Session()

        # Traces share this session, so no cookie may carry over between them
        session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))

        # Redirect responses must reach the tracer, so never retry on status
        retry_strategy = Retry(
            total=self.max_retries,
            backoff_factor=0.5,
            status_forcelist=[],
            allowed_methods=["HEAD"],
            raise_on_status=False,
            redirect=False
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def _head(self, url: str) -> Hop:
        """
        Issue a single HEAD request and record the response.

        Raises:
            requests.RequestException: On transport failure
        """
        start_time = time.time()

        response = self.session.head(
            url,
            headers={'User-Agent': self.user_agent},
            timeout=self.timeout,
            verify=self.verify_ssl,
            allow_redirects=False
        )

        try:
            duration_ms = (time.time() - start_time) * 1000
            return Hop(
                url=url,
                status_code=response.status_code,
                location=response.headers.get('Location'),
                duration_ms=duration_ms
            )
        finally:
            response.close()

    def trace(
        self,
        url: str,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        cancel_event: Optional[threading.Event] = None
    ) -> RedirectChain:
        """
        Follow redirects from url until a final response or the hop bound.

        Never raises: failures end the trace and the chain built so far is
        returned.

        Args:
            url: Starting URL
            max_redirects: Maximum number of redirects to follow
            cancel_event: Optional event; once set, no further hop is issued

        Returns:
            RedirectChain with at most max_redirects + 1 URLs
        """
        urls: List[str] = [url]
        hops: List[Hop] = []

        if max_redirects <= 0:
            return RedirectChain(urls=tuple(urls), stop_reason=STOP_NOT_TRACED)

        current = url
        stop_reason = STOP_FINAL
        error: Optional[str] = None

        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Trace cancelled after {len(urls) - 1} redirects: {url}")
                stop_reason = STOP_CANCELLED
                break

            try:
                hop = self._head(current)
            except (requests.RequestException, ValueError) as e:
                logger.warning(f"Error fetching {current}: {e}")
                stop_reason = STOP_TRANSPORT_ERROR
                error = str(e)
                break

            hops.append(hop)
            logger.debug(f"HEAD {current} -> {hop.status_code} ({hop.duration_ms:.0f}ms)")

            if not hop.is_redirect:
                stop_reason = STOP_FINAL
                break

            if not hop.location:
                logger.info(f"Redirect without Location header from {current}")
                stop_reason = STOP_MISSING_LOCATION
                break

            try:
                current = URLTools.resolve_location(current, hop.location)
            except ValueError as e:
                logger.warning(f"Invalid Location {hop.location!r} from {current}: {e}")
                stop_reason = STOP_TRANSPORT_ERROR
                error = str(e)
                break
            urls.append(current)

            if len(urls) - 1 >= max_redirects:
                stop_reason = STOP_MAX_REDIRECTS
                break

        return RedirectChain(
            urls=tuple(urls),
            hops=tuple(hops),
            stop_reason=stop_reason,
            error=error
        )

    def close(self):
        """Release pooled connections held by the session."""
        self.session.close()
