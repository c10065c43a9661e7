"""
RSSFilter - Cloudflare Python Worker entry point
================================================

Deployed with ``main = "worker.py"`` in wrangler.toml. Bind ``LOG_LEVEL``
and ``LOG_FORMAT`` as plain-text variables to tune logging.
"""

from workers import Response

from rssfilter.handlers.worker_handler import handle_worker_request


def request_headers(request):
    """Incoming headers as a plain dict."""
    headers = request.headers
    if hasattr(headers, "items"):
        return dict(headers.items())
    # JS Headers object: entries() yields [name, value] pairs
    return {str(name): str(value) for name, value in headers.entries()}


async def on_fetch(request, env):
    response = await handle_worker_request(
        request.method,
        request.url,
        request_headers(request),
        env=env,
    )
    return Response(response.text, status=response.status, headers=response.all_headers())
