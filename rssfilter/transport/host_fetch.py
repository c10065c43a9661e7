"""
Sandboxed Feed Transport
=======================

Fetches origin feeds through the fetch capability provided by a WebAssembly
host (Cloudflare Workers running Pyodide). There are no sockets or threads
here: the request is handed to the host and awaited on the host's event loop.
"""

import asyncio
from typing import Any, Awaitable, Callable, Mapping, Optional

from .base import FeedTransport, FetchedFeed
from .headers import collect_headers
from ..utils.exceptions import (
    BodyTooLargeError,
    ConnectionFailedError,
    FetchTimeoutError,
    NonSuccessStatusError,
    TransportError,
)
from ..utils.logging import get_transport_logger

HostFetch = Callable[..., Awaitable[Any]]


def _default_host_fetch() -> HostFetch:
    # Only importable inside the Pyodide runtime.
    from pyodide.http import pyfetch

    return pyfetch


def _header(headers: Any, name: str) -> Optional[str]:
    if not headers:
        return None
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


class HostFetchTransport(FeedTransport):
    """Transport over a host-provided ``fetch(url, **init)`` coroutine.

    The fetch callable must return a response object exposing ``status``,
    ``headers`` (a mapping) and an awaitable ``bytes()``, as Pyodide's
    ``FetchResponse`` does.
    """

    name = "host_fetch"

    def __init__(
        self,
        fetch: Optional[HostFetch] = None,
        max_body_bytes: int = 10 * 1024 * 1024,
    ):
        super().__init__(max_body_bytes)
        self._host_fetch = fetch
        self.logger = get_transport_logger()

    @property
    def host_fetch(self) -> HostFetch:
        if self._host_fetch is None:
            self._host_fetch = _default_host_fetch()
        return self._host_fetch

    async def fetch(
        self,
        url: str,
        timeout: float,
        headers: Optional[Mapping[str, str]] = None,
    ) -> FetchedFeed:
        """Fetch a feed, bounded by ``timeout`` seconds end to end."""
        host_fetch = self.host_fetch

        try:
            return await asyncio.wait_for(
                self._fetch(host_fetch, url, dict(headers or {})), timeout
            )
        except asyncio.TimeoutError as e:
            raise FetchTimeoutError(
                f"Request timeout after {timeout}s", feed_url=url, timeout=timeout
            ) from e
        except TransportError:
            raise
        except (OSError, ConnectionError) as e:
            # pyfetch reports network failures as OSError
            raise ConnectionFailedError(f"Connection failed: {e}", feed_url=url) from e
        except Exception as e:
            raise TransportError(f"Host fetch error: {e}", feed_url=url) from e

    async def _fetch(self, host_fetch: HostFetch, url: str, headers: dict) -> FetchedFeed:
        response = await host_fetch(url, method="GET", headers=headers, redirect="follow")

        status = int(response.status)
        if not 200 <= status < 300:
            self.logger.warning(
                f"Feed fetch failed for {url}: HTTP {status}", extra={"status": status}
            )
            raise NonSuccessStatusError(status, feed_url=url)

        if self.exceeds_limit(_header(response.headers, "content-length")):
            raise BodyTooLargeError(self.max_body_bytes, feed_url=url)

        body = await response.bytes()
        if len(body) > self.max_body_bytes:
            raise BodyTooLargeError(self.max_body_bytes, feed_url=url)

        self.logger.debug(
            f"Fetched {len(body)} bytes from {url}",
            extra={"status": status, "size_bytes": len(body)},
        )

        return FetchedFeed(
            url=getattr(response, "url", None) or url,
            status=status,
            body=bytes(body),
            content_type=_header(response.headers, "content-type"),
            headers=collect_headers(response.headers),
        )
