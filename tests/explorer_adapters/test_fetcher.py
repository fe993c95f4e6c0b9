"""
Tests for the HTML fetcher.
"""

import asyncio
from urllib.parse import parse_qs, urlsplit

import aiohttp
import pytest

from explorer_adapters.config import ExplorerConfig
from explorer_adapters.exceptions import ConfigurationError, FetchFailure, TransportError
from explorer_adapters.fetcher import HtmlFetcher


# ============================================================
# FAKE SESSION
# ============================================================

class FakeResponse:
    """Minimal stand-in for aiohttp's response context manager."""

    def __init__(
        self,
        status: int = 200,
        body: str = "",
        error: Exception = None,
        text_error: Exception = None,
    ):
        self.status = status
        self._body = body
        self._error = error
        self._text_error = text_error
        self.text_errors = None

    async def __aenter__(self):
        if self._error is not None:
            raise self._error
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False

    async def text(self, errors: str = "strict") -> str:
        self.text_errors = errors
        if self._text_error is not None and errors == "strict":
            raise self._text_error
        return self._body


class FakeSession:
    """Records GET calls and replays canned responses."""

    def __init__(self, *responses: FakeResponse):
        self._responses = list(responses)
        self.calls = []
        self.closed = False

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        return self._responses.pop(0)

    async def close(self):
        self.closed = True


@pytest.fixture
def config():
    return ExplorerConfig(base_url="http://proxy.local/oklink/", timeout_seconds=5.0)


# ============================================================
# URL BUILDING
# ============================================================

class TestBuildUrl:
    """Tests for cache-busted URL construction."""

    def test_appends_cache_buster(self, config):
        fetcher = HtmlFetcher(config, session=FakeSession())

        url = fetcher.build_url("/tron/address/T1")

        parts = urlsplit(url)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "http://proxy.local/oklink/tron/address/T1"
        assert list(parse_qs(parts.query)) == ["_ts"]

    def test_uses_ampersand_when_query_present(self, config):
        fetcher = HtmlFetcher(config, session=FakeSession())

        url = fetcher.build_url("/tron/address/T1?tab=1")

        assert "?tab=1&_ts=" in url

    def test_adds_leading_slash(self, config):
        fetcher = HtmlFetcher(config, session=FakeSession())

        assert fetcher.build_url("tron/address/T1").startswith("http://proxy.local/oklink/tron/")

    def test_stamps_strictly_increase(self, config):
        fetcher = HtmlFetcher(config, session=FakeSession())

        stamps = [
            int(parse_qs(urlsplit(fetcher.build_url("/x")).query)["_ts"][0])
            for _ in range(50)
        ]

        assert stamps == sorted(set(stamps))

    def test_rejects_existing_cache_buster(self, config):
        fetcher = HtmlFetcher(config, session=FakeSession())

        with pytest.raises(ValueError, match="_ts"):
            fetcher.build_url("/tron/address/T1?_ts=1")

    def test_invalid_config_rejected(self):
        with pytest.raises(ConfigurationError):
            HtmlFetcher(ExplorerConfig(base_url=""))


# ============================================================
# FETCH
# ============================================================

class TestFetch:
    """Tests for HtmlFetcher.fetch."""

    @pytest.mark.asyncio
    async def test_returns_body_on_success(self, config):
        session = FakeSession(FakeResponse(200, "<html>ok</html>"))
        fetcher = HtmlFetcher(config, session=session)

        assert await fetcher.fetch("/tron/address/T1") == "<html>ok</html>"

        call = session.calls[0]
        assert call["headers"]["Cache-Control"] == "no-cache, no-store"
        assert call["headers"]["Accept-Language"] == config.accept_language
        assert call["headers"]["User-Agent"] == config.user_agent
        assert call["timeout"].total == 5.0

    @pytest.mark.asyncio
    async def test_per_call_timeout_override(self, config):
        session = FakeSession(FakeResponse(200, "ok"))
        fetcher = HtmlFetcher(config, session=session)

        await fetcher.fetch("/x", timeout=1.5)

        assert session.calls[0]["timeout"].total == 1.5

    @pytest.mark.asyncio
    async def test_constructor_timeout_override(self, config):
        session = FakeSession(FakeResponse(200, "ok"))
        fetcher = HtmlFetcher(config, session=session, timeout=2.0)

        await fetcher.fetch("/x")

        assert session.calls[0]["timeout"].total == 2.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [301, 403, 404, 429, 500, 503])
    async def test_non_success_raises_fetch_failure(self, config, status):
        session = FakeSession(FakeResponse(status, "denied" * 200))
        fetcher = HtmlFetcher(config, session=session)

        with pytest.raises(FetchFailure) as exc_info:
            await fetcher.fetch("/tron/address/T1")

        error = exc_info.value
        assert error.status_code == status
        assert error.request_url.startswith("http://proxy.local/oklink/tron/address/T1?_ts=")
        assert len(error.response_body) == HtmlFetcher.MAX_ERROR_BODY
        assert str(status) in error.message

    @pytest.mark.asyncio
    async def test_client_error_raises_transport_error(self, config):
        cause = aiohttp.ClientConnectionError("connection reset")
        fetcher = HtmlFetcher(config, session=FakeSession(FakeResponse(error=cause)))

        with pytest.raises(TransportError) as exc_info:
            await fetcher.fetch("/x")

        assert exc_info.value.original_error is cause

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self, config):
        fetcher = HtmlFetcher(config, session=FakeSession(FakeResponse(error=asyncio.TimeoutError())))

        with pytest.raises(TransportError, match="timed out"):
            await fetcher.fetch("/x")

    @pytest.mark.asyncio
    async def test_undecodable_body_raises_transport_error(self, config):
        cause = UnicodeDecodeError("utf-8", b"\xff\xfe", 0, 1, "invalid start byte")
        response = FakeResponse(200, text_error=cause)
        fetcher = HtmlFetcher(config, session=FakeSession(response))

        with pytest.raises(TransportError, match="Undecodable") as exc_info:
            await fetcher.fetch("/x")

        assert exc_info.value.original_error is cause
        assert exc_info.value.request_url.startswith("http://proxy.local/oklink/x?")

    @pytest.mark.asyncio
    async def test_error_body_decoded_leniently(self, config):
        cause = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        response = FakeResponse(502, "bad gateway", text_error=cause)
        fetcher = HtmlFetcher(config, session=FakeSession(response))

        with pytest.raises(FetchFailure) as exc_info:
            await fetcher.fetch("/x")

        assert exc_info.value.status_code == 502
        assert response.text_errors == "replace"

    @pytest.mark.asyncio
    async def test_injected_session_not_closed(self, config):
        session = FakeSession()

        async with HtmlFetcher(config, session=session):
            pass

        assert session.closed is False


class TestFailureClassification:
    """Tests for FetchFailure.is_transient."""

    @pytest.mark.parametrize("status,expected", [
        (429, True),
        (500, True),
        (502, True),
        (404, False),
        (403, False),
        (None, False),
    ])
    def test_is_transient(self, status, expected):
        assert FetchFailure("x", status_code=status).is_transient is expected
