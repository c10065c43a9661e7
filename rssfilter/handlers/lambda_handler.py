"""
AWS Lambda Adapter
=================

Translates API Gateway (REST and HTTP API) and Lambda function URL events into
pipeline runs, and pipeline responses back into proxy response dicts.
"""

import asyncio
import os
from typing import Any, Dict, Mapping, Optional, Tuple

from ..config.settings import RSSFilterSettings, get_settings
from ..processing.responses import FilterResponse
from ..transport import RuntimeTarget, create_transport
from ..transport.base import FeedTransport
from ..utils.logging import configure_application_logging
from .http import run_http_request
from .query import QueryPairs, parse_query_string


def configure_lambda_logging(settings: RSSFilterSettings) -> None:
    """Set up logging once per execution environment.

    AWS_LAMBDA_LOG_LEVEL and AWS_LAMBDA_LOG_FORMAT (Lambda advanced logging
    controls) take precedence over RSSFILTER_LOGGING__* settings.
    """
    level, structured = settings.resolve_log_config(
        level=os.environ.get("AWS_LAMBDA_LOG_LEVEL"),
        log_format=os.environ.get("AWS_LAMBDA_LOG_FORMAT"),
    )
    configure_application_logging(
        log_level=level,
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=structured,
        target=RuntimeTarget.LAMBDA.value,
    )


def _is_v2_event(event: Mapping[str, Any]) -> bool:
    return event.get("version") == "2.0" or "http" in (event.get("requestContext") or {})


def parse_event(event: Mapping[str, Any]) -> Tuple[Optional[str], Optional[str], QueryPairs]:
    """Extract method, path and decoded query pairs from a Lambda event.

    Args:
        event: API Gateway REST (payload 1.0), HTTP API or function URL
            (payload 2.0) event

    Returns:
        Tuple of method, path and query pairs
    """
    if _is_v2_event(event):
        http = (event.get("requestContext") or {}).get("http") or {}
        method = http.get("method")
        path = event.get("rawPath") or http.get("path")
        query = parse_query_string(event.get("rawQueryString"))
        return method, path, query

    method = event.get("httpMethod")
    path = event.get("path")

    # API Gateway has already decoded these values
    query = []
    multi_value = event.get("multiValueQueryStringParameters")
    if multi_value:
        for name, values in multi_value.items():
            query.extend((name, value) for value in values or [])
    else:
        query.extend((event.get("queryStringParameters") or {}).items())

    return method, path, query


def to_proxy_response(response: FilterResponse) -> Dict[str, Any]:
    """Lambda proxy integration response for a pipeline response."""
    return {
        "statusCode": response.status,
        "headers": response.all_headers(),
        "body": response.text,
        "isBase64Encoded": False,
    }


def handle_lambda_event(
    event: Mapping[str, Any],
    context: Any = None,
    transport: Optional[FeedTransport] = None,
    settings: Optional[RSSFilterSettings] = None,
) -> Dict[str, Any]:
    """Serve one Lambda invocation.

    Args:
        event: Lambda event
        context: Lambda context; its ``aws_request_id`` tags the logs
        transport: Transport override (default: native transport)
        settings: Application settings (default: global settings)

    Returns:
        Proxy response dict
    """
    settings = settings or get_settings()
    configure_lambda_logging(settings)

    method, path, query = parse_event(event)
    response = asyncio.run(
        run_http_request(
            method,
            path,
            query,
            headers=event.get("headers"),
            transport=transport or create_transport(RuntimeTarget.LAMBDA, settings),
            settings=settings,
            request_id=getattr(context, "aws_request_id", None),
        )
    )
    return to_proxy_response(response)
