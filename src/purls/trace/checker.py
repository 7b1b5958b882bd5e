"""
pURLs Redirect Checker

Ties the pieces together: compose the edited URL, trace its redirects and
diff the query parameters of the origin against the final destination.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .analyzer import ParameterDiff, diff_parameters
from .trace_config import TraceConfig
from .tracer import RedirectChain, RedirectTracer
from ..editor import DecomposedUrl, compose_decomposed, decompose

logger = logging.getLogger("purls.trace")


class InvalidTraceRequest(ValueError):
    """Raised when a trace request is missing a usable URL or bound."""


@dataclass(frozen=True)
class RedirectReport:
    """Redirect chain of a URL plus the parameter diff along it."""

    chain: RedirectChain
    diff: ParameterDiff

    @property
    def origin_url(self) -> str:
        return self.chain.origin_url

    @property
    def final_url(self) -> str:
        return self.chain.final_url

    @property
    def redirect_chain(self) -> Tuple[str, ...]:
        return self.chain.urls

    @property
    def redirect_count(self) -> int:
        return self.chain.redirect_count

    def to_dict(self, detailed: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        labels = self.diff.labels()
        data = self.chain.to_dict(detailed=detailed)
        data.update({
            'preservedParams': labels['preserved'],
            'lostParams': labels['lost'],
            'newParams': labels['added'],
            'changedParams': [entry.key for entry in self.diff.changed]
        })
        return data


def parse_trace_request(payload: Any, default_max_redirects: int) -> Tuple[str, int]:
    """
    Validate a trace request body.

    Args:
        payload: Decoded JSON body, expected {"url": str, "maxRedirects"?: int}
        default_max_redirects: Bound used when maxRedirects is omitted

    Returns:
        (url, max_redirects)

    Raises:
        InvalidTraceRequest: If the URL is missing, not a string or blank,
            or maxRedirects is not a non-negative integer
    """
    if not isinstance(payload, dict):
        raise InvalidTraceRequest("Invalid URL")

    url = payload.get('url')
    if not isinstance(url, str) or not url.strip():
        raise InvalidTraceRequest("Invalid URL")

    max_redirects = payload.get('maxRedirects', default_max_redirects)
    if max_redirects is None:
        max_redirects = default_max_redirects
    if isinstance(max_redirects, bool) or not isinstance(max_redirects, int) or max_redirects < 0:
        raise InvalidTraceRequest("maxRedirects must be a non-negative integer")

    return url, max_redirects


class RedirectChecker:
    """
    Compose, trace and diff in one call.

    Holds no per-trace state, so one checker can serve concurrent requests.

    Example:
        checker = RedirectChecker()
        report = checker.check(decompose('http://site.test/x?utm_source=news&id=7'))
        if report and report.diff.has_losses:
            print(report.to_dict()['lostParams'])
    """

    def __init__(
        self,
        tracer: Optional[RedirectTracer] = None,
        config: Optional[TraceConfig] = None
    ):
        """
        Initialize checker.

        Args:
            tracer: Optional RedirectTracer (built from config if None)
            config: Optional TraceConfig for defaults
        """
        self.config = config or TraceConfig()
        self.tracer = tracer or self.config.create_tracer()

    def _resolve_bound(self, max_redirects: Optional[int]) -> int:
        return self.config.max_redirects if max_redirects is None else max_redirects

    def trace(
        self,
        url: str,
        max_redirects: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> RedirectChain:
        """Trace a URL using the configured bound when none is given."""
        return self.tracer.trace(url, self._resolve_bound(max_redirects), cancel_event=cancel_event)

    def check_url(
        self,
        url: str,
        max_redirects: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> Optional[RedirectReport]:
        """
        Trace an already composed URL and diff origin against final.

        Returns:
            RedirectReport, or None when url is empty
        """
        if not url:
            return None

        chain = self.trace(url, max_redirects, cancel_event=cancel_event)
        diff = diff_parameters(chain.origin_url, chain.final_url)

        logger.info(
            f"Checked {url}: {chain.redirect_count} redirects, "
            f"{len(diff.preserved)} preserved, {len(diff.lost)} lost, {len(diff.added)} added"
        )
        return RedirectReport(chain=chain, diff=diff)

    def check(
        self,
        decomposed: DecomposedUrl,
        max_redirects: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> Optional[RedirectReport]:
        """
        Compose an edited URL, then trace and diff it.

        Returns:
            RedirectReport, or None when composition yields nothing to check
        """
        url = compose_decomposed(decomposed)
        if not url:
            logger.debug("Nothing to check: composed URL is empty")
            return None
        return self.check_url(url, max_redirects, cancel_event=cancel_event)

    def handle_trace_request(
        self,
        payload: Any,
        cancel_event: Optional[threading.Event] = None
    ) -> Dict[str, Any]:
        """
        Serve a trace request: {"url", "maxRedirects"?} -> chain summary.

        Raises:
            InvalidTraceRequest: If the request is malformed
        """
        url, max_redirects = parse_trace_request(payload, self.config.max_redirects)
        return self.trace(url, max_redirects, cancel_event=cancel_event).to_dict()

    def handle_check_request(
        self,
        payload: Any,
        cancel_event: Optional[threading.Event] = None
    ) -> Dict[str, Any]:
        """
        Serve a full check: decompose the raw URL, recompose it, trace, diff.

        Returns:
            {"url": composed URL, "report": report dict or None}

        Raises:
            InvalidTraceRequest: If the request is malformed
        """
        url, max_redirects = parse_trace_request(payload, self.config.max_redirects)
        decomposed = decompose(url)
        report = self.check(decomposed, max_redirects, cancel_event=cancel_event)
        return {
            'url': compose_decomposed(decomposed),
            'report': report.to_dict(detailed=True) if report else None
        }
