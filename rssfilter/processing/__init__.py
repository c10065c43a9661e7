"""
RSSFilter Processing Module
==========================

Request orchestration: the pipeline every execution target runs and the
response it produces.
"""

from .pipeline import FeedFilterPipeline, PipelineOutcome, PipelineStage
from .responses import FilterResponse, response_for_error

__all__ = [
    'FeedFilterPipeline',
    'PipelineOutcome',
    'PipelineStage',
    'FilterResponse',
    'response_for_error',
]
