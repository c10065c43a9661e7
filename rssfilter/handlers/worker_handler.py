"""
Cloudflare Worker Adapter
========================

Serves requests inside the Pyodide sandbox. The only I/O available is the
host's fetch capability, reached through :class:`HostFetchTransport`.
"""

from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

from ..config.settings import RSSFilterSettings, get_settings
from ..processing.responses import FilterResponse
from ..transport import RuntimeTarget, create_transport
from ..transport.base import FeedTransport
from ..utils.logging import configure_application_logging
from .http import run_http_request
from .query import parse_query_string


def env_binding(env: Any, name: str) -> Optional[str]:
    """Read a Worker variable binding, None when it is not bound."""
    if env is None:
        return None
    if isinstance(env, Mapping):
        value = env.get(name)
    else:
        value = getattr(env, name, None)
    return str(value) if value is not None else None


def configure_worker_logging(settings: RSSFilterSettings, env: Any) -> None:
    """Set up logging once per isolate; LOG_LEVEL and LOG_FORMAT bindings win."""
    level, structured = settings.resolve_log_config(
        level=env_binding(env, "LOG_LEVEL"),
        log_format=env_binding(env, "LOG_FORMAT"),
    )
    # No filesystem in the sandbox
    configure_application_logging(
        log_level=level,
        enable_console=True,
        structured_logging=structured,
        target=RuntimeTarget.WORKER.value,
    )


async def handle_worker_request(
    method: str,
    url: str,
    headers: Optional[Mapping[str, str]],
    env: Any = None,
    transport: Optional[FeedTransport] = None,
    settings: Optional[RSSFilterSettings] = None,
) -> FilterResponse:
    """Serve one Worker request.

    Args:
        method: HTTP method of the incoming request
        url: Full URL of the incoming request
        headers: Incoming request headers
        env: Worker environment bindings
        transport: Transport override (default: host fetch transport)
        settings: Application settings (default: global settings)

    Returns:
        Response for the Worker entry point to convert
    """
    settings = settings or get_settings()
    configure_worker_logging(settings, env)

    parts = urlsplit(url)
    return await run_http_request(
        method,
        parts.path or "/",
        parse_query_string(parts.query),
        headers=headers,
        transport=transport or create_transport(RuntimeTarget.WORKER, settings),
        settings=settings,
    )
