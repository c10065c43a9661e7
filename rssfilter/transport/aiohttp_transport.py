"""
Native Feed Transport
====================

Fetches origin feeds with aiohttp over real sockets. Used by the CLI and the
Lambda function.
"""

import asyncio
import ssl
from contextlib import asynccontextmanager
from typing import Mapping, Optional

import aiohttp
import certifi

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

CHUNK_SIZE = 64 * 1024


class AiohttpTransport(FeedTransport):
    """aiohttp-based transport with pooled connections inside one session."""

    name = "aiohttp"

    def __init__(
        self,
        max_body_bytes: int = 10 * 1024 * 1024,
        max_redirects: int = 10,
        limit_per_host: int = 5,
    ):
        """Initialize native transport.

        Args:
            max_body_bytes: Largest body accepted from the origin
            max_redirects: Redirects followed before giving up
            limit_per_host: Pooled connections per origin host
        """
        super().__init__(max_body_bytes)
        self.max_redirects = max_redirects
        self.limit_per_host = limit_per_host
        self.logger = get_transport_logger()

        # SSL context for secure requests
        self.ssl_context = ssl.create_default_context(cafile=certifi.where())

    @asynccontextmanager
    async def get_session(self, timeout: float):
        """Get configured aiohttp session."""
        connector = aiohttp.TCPConnector(
            ssl=self.ssl_context,
            limit_per_host=self.limit_per_host,
            enable_cleanup_closed=True,
        )

        async with aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=timeout),
            auto_decompress=True,
        ) as session:
            yield session

    async def fetch(
        self,
        url: str,
        timeout: float,
        headers: Optional[Mapping[str, str]] = None,
    ) -> FetchedFeed:
        """Fetch a feed, bounded by ``timeout`` seconds end to end."""
        try:
            return await asyncio.wait_for(
                self._fetch(url, timeout, dict(headers or {})), timeout
            )
        except asyncio.TimeoutError as e:
            raise FetchTimeoutError(
                f"Request timeout after {timeout}s", feed_url=url, timeout=timeout
            ) from e
        except aiohttp.TooManyRedirects as e:
            raise TransportError(
                f"Too many redirects (max {self.max_redirects})", feed_url=url
            ) from e
        except aiohttp.ClientConnectionError as e:
            raise ConnectionFailedError(f"Connection failed: {e}", feed_url=url) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Fetch error: {e}", feed_url=url) from e

    async def _fetch(self, url: str, timeout: float, headers: dict) -> FetchedFeed:
        async with self.get_session(timeout) as session:
            async with session.get(
                url,
                headers=headers,
                allow_redirects=True,
                max_redirects=self.max_redirects,
            ) as response:
                if not 200 <= response.status < 300:
                    self.logger.warning(
                        f"Feed fetch failed for {url}: HTTP {response.status} {response.reason}",
                        extra={"status": response.status},
                    )
                    raise NonSuccessStatusError(response.status, feed_url=url)

                if self.exceeds_limit(response.headers.get("Content-Length")):
                    raise BodyTooLargeError(self.max_body_bytes, feed_url=url)

                body = bytearray()
                async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                    body.extend(chunk)
                    if len(body) > self.max_body_bytes:
                        raise BodyTooLargeError(self.max_body_bytes, feed_url=url)

                self.logger.debug(
                    f"Fetched {len(body)} bytes from {response.url}",
                    extra={"status": response.status, "size_bytes": len(body)},
                )

                return FetchedFeed(
                    url=str(response.url),
                    status=response.status,
                    body=bytes(body),
                    content_type=response.headers.get("Content-Type"),
                    headers=collect_headers(response.headers),
                )
