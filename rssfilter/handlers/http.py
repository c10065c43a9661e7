"""
HTTP routing and request metrics shared by the Lambda function and the Worker.
"""

import time
import uuid
from typing import Mapping, Optional

from ..config.settings import RSSFilterSettings
from ..processing.pipeline import FeedFilterPipeline
from ..processing.responses import FilterResponse
from ..transport.base import FeedTransport
from ..utils.logging import get_logger_for_component
from .query import QueryPairs, request_parameters

ROOT_PATH = "/"
ALLOWED_METHOD = "GET"

logger = get_logger_for_component("http")


def route_request(method: Optional[str], path: Optional[str]) -> Optional[FilterResponse]:
    """Reject requests for anything but ``GET /``.

    Returns:
        The 404/405 response, or None when the request should be served
    """
    if (path or ROOT_PATH) != ROOT_PATH:
        logger.info(f"Path not found: {path}", extra={"path": path, "status": 404})
        return FilterResponse.plain(404)

    if (method or "").upper() != ALLOWED_METHOD:
        logger.info(
            f"Method not allowed: {method}", extra={"method": method, "status": 405}
        )
        return FilterResponse.plain(405, headers={"Allow": ALLOWED_METHOD})

    return None


def new_request_id() -> str:
    return str(uuid.uuid4())


async def run_http_request(
    method: Optional[str],
    path: Optional[str],
    query: QueryPairs,
    headers: Optional[Mapping[str, str]],
    transport: FeedTransport,
    settings: RSSFilterSettings,
    request_id: Optional[str] = None,
) -> FilterResponse:
    """Route one HTTP request and run it through the pipeline.

    Args:
        method: HTTP method
        path: Request path, without the query string
        query: Decoded query parameters in request order
        headers: Incoming request headers
        transport: Transport for the current target
        settings: Application settings
        request_id: Identifier for log correlation (generated when absent)

    Returns:
        Response to adapt to the target's own shape
    """
    request_id = request_id or new_request_id()
    start_time = time.perf_counter()

    response = route_request(method, path)
    url = None
    if response is None:
        url, raw_specs = request_parameters(query)
        pipeline = FeedFilterPipeline(transport, settings=settings, request_id=request_id)
        response = await pipeline.run(url, raw_specs, headers=headers)

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    logger.info(
        "Request completed",
        extra={
            "request_id": request_id,
            "url": url,
            "status": response.status,
            "duration_ms": duration_ms,
        },
    )
    return response
