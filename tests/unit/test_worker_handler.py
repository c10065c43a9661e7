"""
Unit tests for the Cloudflare Worker adapter.

The Worker path is exercised with the sandboxed transport and an injected
host fetch, the same wiring the Worker uses at runtime minus Pyodide.
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest

from rssfilter.feed.parser import FeedParser
from rssfilter.handlers.worker_handler import (
    configure_worker_logging,
    env_binding,
    handle_worker_request,
)
from rssfilter.transport.host_fetch import HostFetchTransport

FEED_URL = "https://blog.example.com/feed.xml"
WORKER = "https://rssfilter.example.workers.dev"


class HostResponse:
    def __init__(self, body, status=200, headers=None):
        self.status = status
        self.headers = headers or {"content-type": "application/rss+xml"}
        self._body = body

    async def bytes(self):
        return self._body


@pytest.fixture
def host_fetch(rss_feed):
    calls = []

    async def fetch(url, **init):
        calls.append((url, init))
        return HostResponse(rss_feed)

    fetch.calls = calls
    return fetch


@pytest.fixture
def transport(host_fetch):
    return HostFetchTransport(fetch=host_fetch)


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("rssfilter.handlers.worker_handler.configure_application_logging"):
        yield


def _titles(body: bytes):
    return [i.title for i in FeedParser().parse(body, allow_empty=True).items]


class TestHandleWorkerRequest:
    """Test Worker request handling."""

    @pytest.mark.asyncio
    async def test_success(self, transport, host_fetch, settings):
        response = await handle_worker_request(
            "GET",
            f"{WORKER}/?url={FEED_URL}&link_filter_regex=ads%5C.example",
            {"Accept-Language": "fr", "CF-Connecting-IP": "203.0.113.9"},
            transport=transport,
            settings=settings,
        )

        assert response.status == 200
        assert response.all_headers()["Content-Type"] == "application/rss+xml; charset=utf-8"
        assert _titles(response.body) == ["Official blog post", "Guest post"]

        url, init = host_fetch.calls[0]
        assert url == FEED_URL
        assert init["headers"]["accept-language"] == "fr"
        assert "cf-connecting-ip" not in init["headers"]

    @pytest.mark.asyncio
    async def test_no_query(self, transport, host_fetch, settings):
        response = await handle_worker_request("GET", f"{WORKER}/", {}, transport=transport, settings=settings)

        assert response.status == 400
        assert "url" in response.text
        assert host_fetch.calls == []

    @pytest.mark.asyncio
    async def test_wrong_path(self, transport, host_fetch, settings):
        response = await handle_worker_request(
            "GET", f"{WORKER}/feed?url={FEED_URL}", {}, transport=transport, settings=settings
        )

        assert response.status == 404
        assert response.text == "Not Found"
        assert host_fetch.calls == []

    @pytest.mark.asyncio
    async def test_wrong_method(self, transport, host_fetch, settings):
        response = await handle_worker_request(
            "DELETE", f"{WORKER}/?url={FEED_URL}", {}, transport=transport, settings=settings
        )

        assert response.status == 405
        assert response.all_headers()["Allow"] == "GET"

    @pytest.mark.asyncio
    async def test_path_checked_before_method(self, transport, settings):
        response = await handle_worker_request(
            "POST", f"{WORKER}/other", {}, transport=transport, settings=settings
        )

        assert response.status == 404

    @pytest.mark.asyncio
    async def test_upstream_failure(self, settings):
        async def failing_fetch(url, **init):
            return HostResponse(b"oops", status=503)

        response = await handle_worker_request(
            "GET",
            f"{WORKER}/?url={FEED_URL}&title_filter_regex=x",
            {},
            transport=HostFetchTransport(fetch=failing_fetch),
            settings=settings,
        )

        assert response.status == 502
        assert "oops" not in response.text


class TestWorkerLogging:
    """Test env binding overrides."""

    def test_env_binding_sources(self):
        assert env_binding({"LOG_LEVEL": "debug"}, "LOG_LEVEL") == "debug"
        assert env_binding(SimpleNamespace(LOG_FORMAT="json"), "LOG_FORMAT") == "json"
        assert env_binding(SimpleNamespace(), "LOG_LEVEL") is None
        assert env_binding(None, "LOG_LEVEL") is None

    def test_bindings_override_settings(self, settings):
        env = SimpleNamespace(LOG_LEVEL="error", LOG_FORMAT="json")

        with patch("rssfilter.handlers.worker_handler.configure_application_logging") as configure:
            configure_worker_logging(settings, env)

        kwargs = configure.call_args.kwargs
        assert kwargs["log_level"] == "ERROR"
        assert kwargs["structured_logging"] is True
        assert kwargs["target"] == "worker"
