"""
RSSFilter - AWS Lambda entry point
==================================

Handler: ``lambda_function.lambda_handler``. Works behind API Gateway REST
and HTTP APIs and behind a Lambda function URL.
"""

from rssfilter.handlers.lambda_handler import handle_lambda_event


def lambda_handler(event, context):
    """Filter the feed named by the event's query string."""
    return handle_lambda_event(event, context)
