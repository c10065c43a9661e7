"""
RSSFilter Transport Module
=========================

Platform-specific feed fetching behind one contract. Implementations are
imported lazily so the sandboxed runtime never loads the socket client and
vice versa.
"""

from enum import Enum

from .base import FeedTransport, FetchedFeed
from .headers import filter_request_headers, filter_response_headers


class RuntimeTarget(str, Enum):
    """Execution targets the engine is deployed to."""

    CLI = "cli"
    LAMBDA = "lambda"
    WORKER = "worker"


def create_transport(target: RuntimeTarget, settings=None, **kwargs) -> FeedTransport:
    """Build the transport for an execution target.

    Args:
        target: Where the engine runs
        settings: Application settings (default: global settings)
        **kwargs: Passed to the transport constructor

    Returns:
        Configured transport
    """
    if settings is None:
        from ..config.settings import get_settings
        settings = get_settings()

    target = RuntimeTarget(target)
    if target is RuntimeTarget.WORKER:
        from .host_fetch import HostFetchTransport
        return HostFetchTransport(max_body_bytes=settings.fetch.max_body_bytes, **kwargs)

    from .aiohttp_transport import AiohttpTransport
    return AiohttpTransport(
        max_body_bytes=settings.fetch.max_body_bytes,
        max_redirects=settings.fetch.max_redirects,
        **kwargs,
    )


__all__ = [
    "FeedTransport",
    "FetchedFeed",
    "RuntimeTarget",
    "create_transport",
    "filter_request_headers",
    "filter_response_headers",
]
