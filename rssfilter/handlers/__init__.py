"""
RSSFilter Handlers Module
========================

Adapters between the execution targets (AWS Lambda, Cloudflare Worker) and
the shared request pipeline.
"""

from .http import route_request, run_http_request
from .lambda_handler import handle_lambda_event
from .query import parse_query_string, request_parameters
from .worker_handler import handle_worker_request

__all__ = [
    'route_request',
    'run_http_request',
    'handle_lambda_event',
    'parse_query_string',
    'request_parameters',
    'handle_worker_request',
]
