"""
RSSFilter Filtering Module
=========================

Filter specifications and the exclusion rule applied to feed items.
"""

from .filter_spec import FeedRequest, FilterField, FilterSpec, compile_filters
from .evaluator import apply_filters, evaluate_item

__all__ = [
    'FeedRequest',
    'FilterField',
    'FilterSpec',
    'compile_filters',
    'apply_filters',
    'evaluate_item',
]
