"""
Tests for pURLs Redirect Checker

Tests the compose-trace-diff flow including:
- End-to-end parameter loss detection
- Request validation
- Configured default bounds
"""

from unittest.mock import Mock

import pytest
import requests

from purls.editor import DecomposedUrl, QueryParam, Fragment, decompose
from purls.trace import (
    InvalidTraceRequest,
    RedirectChecker,
    RedirectTracer,
    TraceConfig,
    parse_trace_request,
)


def make_response(status_code, location=None):
    """Build a mock HEAD response."""
    response = Mock()
    response.status_code = status_code
    response.headers = {'Location': location} if location is not None else {}
    return response


@pytest.fixture
def session():
    """Mock session with one relative redirect that drops utm_source."""
    session = Mock()
    session.head.side_effect = [
        make_response(301, "/y?id=7"),
        make_response(200),
    ]
    return session


@pytest.fixture
def checker(session):
    """Checker around a tracer using the mock session."""
    return RedirectChecker(tracer=RedirectTracer(session=session))


class TestCheck:
    """Test full checks."""

    def test_lost_parameter(self, checker):
        """Test that a dropped marketing parameter is reported."""
        report = checker.check_url("http://site.test/x?utm_source=news&id=7")

        data = report.to_dict()
        assert data['finalUrl'] == "http://site.test/y?id=7"
        assert data['redirectChain'] == ["http://site.test/x?utm_source=news&id=7", "http://site.test/y?id=7"]
        assert data['redirectCount'] == 1
        assert data['lostParams'] == ["utm_source=news"]
        assert data['preservedParams'] == ["id=7"]
        assert data['newParams'] == []
        assert data['changedParams'] == []
        assert report.diff.has_losses

    def test_check_decomposed(self, checker, session):
        """Test that the edited URL is composed before tracing."""
        decomposed = DecomposedUrl(
            base="http://site.test/x",
            parameters=(Fragment("top"), QueryParam("utm_source", "news"), QueryParam("id", "7"))
        )

        report = checker.check(decomposed)

        assert report.origin_url == "http://site.test/x?utm_source=news&id=7#top"
        assert session.head.call_args_list[0][0][0] == "http://site.test/x?utm_source=news&id=7#top"
        assert report.to_dict()['lostParams'] == ["utm_source=news"]

    def test_empty_base_is_not_checked(self, checker, session):
        """Test that nothing is traced for an empty composition."""
        assert checker.check(DecomposedUrl()) is None
        assert checker.check_url("") is None
        session.head.assert_not_called()

    def test_changed_value(self):
        """Test a redirect that rewrites a value."""
        session = Mock()
        session.head.side_effect = [
            make_response(302, "http://b.test/?utm_source=b"),
            make_response(200),
        ]
        checker = RedirectChecker(tracer=RedirectTracer(session=session))

        data = checker.check_url("http://a.test/?utm_source=a").to_dict()

        assert data['preservedParams'] == ["utm_source=b (changed from a)"]
        assert data['changedParams'] == ["utm_source"]

    def test_config_bound_is_default(self):
        """Test that the configured bound applies when none is given."""
        session = Mock()
        session.head.return_value = make_response(302, "http://loop.test/")
        checker = RedirectChecker(
            tracer=RedirectTracer(session=session),
            config=TraceConfig(max_redirects=2)
        )

        report = checker.check_url("http://loop.test/")

        assert report.redirect_count == 2
        assert session.head.call_count == 2

    def test_unparseable_url_still_reports(self):
        """Test that a URL the client cannot fetch gives a zero-redirect report."""
        session = Mock()
        session.head.side_effect = requests.exceptions.InvalidURL("Invalid IPv6 URL")
        checker = RedirectChecker(tracer=RedirectTracer(session=session))

        report = checker.check(decompose("http://[bad?x=1"))

        assert report.redirect_chain == ("http://[bad?x=1",)
        assert report.redirect_count == 0
        assert report.chain.stop_reason == "transport_error"
        assert report.to_dict()['preservedParams'] == ["x=1"]
        assert report.to_dict()['lostParams'] == []

    def test_detailed_report(self, checker):
        """Test detailed output carries hops and stop reason."""
        data = checker.check_url("http://site.test/x?utm_source=news&id=7").to_dict(detailed=True)

        assert data['stopReason'] == "final"
        assert [hop['status'] for hop in data['hops']] == [301, 200]


class TestParseTraceRequest:
    """Test request validation."""

    def test_valid(self):
        """Test a request with a bound."""
        assert parse_trace_request({"url": "http://a.test/", "maxRedirects": 3}, 10) == ("http://a.test/", 3)

    def test_default_bound(self):
        """Test omitted and null bounds."""
        assert parse_trace_request({"url": "http://a.test/"}, 10) == ("http://a.test/", 10)
        assert parse_trace_request({"url": "http://a.test/", "maxRedirects": None}, 4) == ("http://a.test/", 4)

    def test_zero_bound(self):
        """Test that zero is allowed."""
        assert parse_trace_request({"url": "http://a.test/", "maxRedirects": 0}, 10)[1] == 0

    @pytest.mark.parametrize("payload", [
        None,
        [],
        "http://a.test/",
        {},
        {"url": ""},
        {"url": "   "},
        {"url": 42},
        {"url": "http://a.test/", "maxRedirects": -1},
        {"url": "http://a.test/", "maxRedirects": "5"},
        {"url": "http://a.test/", "maxRedirects": 2.5},
        {"url": "http://a.test/", "maxRedirects": True},
    ])
    def test_invalid(self, payload):
        """Test rejected request bodies."""
        with pytest.raises(InvalidTraceRequest):
            parse_trace_request(payload, 10)

    def test_is_value_error(self):
        """Test the exception hierarchy."""
        assert issubclass(InvalidTraceRequest, ValueError)


class TestHandlers:
    """Test request handlers."""

    def test_handle_trace_request(self, checker):
        """Test the trace handler response shape."""
        result = checker.handle_trace_request({"url": "http://site.test/x?utm_source=news&id=7"})

        assert result == {
            'redirectChain': ["http://site.test/x?utm_source=news&id=7", "http://site.test/y?id=7"],
            'finalUrl': "http://site.test/y?id=7",
            'redirectCount': 1,
        }

    def test_handle_trace_request_invalid(self, checker, session):
        """Test that an invalid request issues no network call."""
        with pytest.raises(InvalidTraceRequest):
            checker.handle_trace_request({"url": ""})
        session.head.assert_not_called()

    def test_handle_check_request(self, checker):
        """Test the check handler normalizes and reports."""
        result = checker.handle_check_request({"url": "http://site.test/x#top?utm_source=news&id=7"})

        assert result['url'] == "http://site.test/x?utm_source=news&id=7#top"
        assert result['report']['lostParams'] == ["utm_source=news"]
        assert result['report']['stopReason'] == "final"
