"""
Feed Transport Contract
======================

The single platform boundary of the engine: fetch the bytes behind a URL
within a time budget. Native and sandboxed implementations share this
contract and the :class:`TransportError` taxonomy.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional


@dataclass(frozen=True)
class FetchedFeed:
    """Successful origin response."""

    url: str
    status: int
    body: bytes = field(repr=False)
    content_type: Optional[str] = None
    # Origin response headers, names lower-cased
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.body)


class FeedTransport(ABC):
    """Fetches origin feed bytes.

    Implementations must:

    * bound connect, headers and body by one ``timeout`` and raise
      ``FetchTimeoutError`` on expiry without returning a partial body;
    * raise ``NonSuccessStatusError`` for non-2xx answers;
    * raise ``BodyTooLargeError`` once the body exceeds ``max_body_bytes``;
    * raise ``ConnectionFailedError`` when the origin is unreachable and
      ``TransportError`` for anything else;
    * never retry.
    """

    name = "transport"

    def __init__(self, max_body_bytes: int):
        self.max_body_bytes = max_body_bytes

    @abstractmethod
    async def fetch(
        self,
        url: str,
        timeout: float,
        headers: Optional[Mapping[str, str]] = None,
    ) -> FetchedFeed:
        """Fetch ``url``.

        Args:
            url: Absolute http(s) URL
            timeout: Wall-clock budget in seconds
            headers: Request headers to send

        Returns:
            The origin's 2xx response
        """

    def exceeds_limit(self, content_length: Optional[str]) -> bool:
        """Whether a declared Content-Length is over the cap."""
        if content_length is None:
            return False
        try:
            return int(content_length) > self.max_body_bytes
        except ValueError:
            return False
