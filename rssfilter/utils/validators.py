"""
RSSFilter Input Validators
=========================

Validation of the feed URL supplied by the caller.
"""

import ipaddress
from urllib.parse import urlsplit
from typing import Optional

from .exceptions import InvalidURLError, ErrorCode


class URLValidator:
    """URL validation utilities."""

    # Allowed schemes for feed URLs
    ALLOWED_SCHEMES = ("http", "https")

    PRIVATE_HOSTNAMES = {"localhost", "localhost.localdomain", "ip6-localhost"}

    @classmethod
    def validate_feed_url(
        cls, url: Optional[str], block_private_hosts: bool = False
    ) -> str:
        """Validate a feed URL without rewriting it.

        Args:
            url: URL to validate
            block_private_hosts: Reject loopback, private and link-local hosts

        Returns:
            The URL exactly as supplied

        Raises:
            InvalidURLError: If the URL is missing or invalid
        """
        if url is None or not isinstance(url, str) or not url.strip():
            raise InvalidURLError(
                "Missing required parameter 'url'",
                error_code=ErrorCode.REQUEST_MISSING_URL,
            )

        try:
            parsed = urlsplit(url)
            hostname = parsed.hostname
            # Accessing the port validates it
            parsed.port
        except ValueError:
            raise InvalidURLError(
                f"Invalid 'url' parameter {url!r}: not a valid URL", url=url
            )

        if parsed.scheme.lower() not in cls.ALLOWED_SCHEMES:
            raise InvalidURLError(
                f"Invalid 'url' parameter {url!r}: must be an absolute http or https URL",
                url=url,
            )

        if not hostname:
            raise InvalidURLError(
                f"Invalid 'url' parameter {url!r}: must include a hostname", url=url
            )

        if any(ch.isspace() for ch in url):
            raise InvalidURLError(
                f"Invalid 'url' parameter {url!r}: must not contain whitespace",
                url=url,
            )

        if block_private_hosts and cls.is_private_host(hostname):
            raise InvalidURLError(
                f"Invalid 'url' parameter {url!r}: private network hosts are not allowed",
                url=url,
            )

        return url

    @classmethod
    def is_private_host(cls, hostname: str) -> bool:
        """Check whether a hostname names a loopback/private/link-local host."""
        hostname = hostname.lower().rstrip(".")
        if hostname in cls.PRIVATE_HOSTNAMES or hostname.endswith(".localhost"):
            return True

        try:
            address = ipaddress.ip_address(hostname)
        except ValueError:
            return False

        return (
            address.is_loopback
            or address.is_private
            or address.is_link_local
            or address.is_reserved
            or address.is_unspecified
        )
