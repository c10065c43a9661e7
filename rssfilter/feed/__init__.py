"""
RSSFilter Feed Module
====================

Feed document model, parser and serializer for RSS 2.0, RSS 1.0 and Atom.
"""

from .models import Channel, FeedFormat, Item
from .parser import FeedParser
from .serializer import FeedSerializer

__all__ = [
    'Channel',
    'FeedFormat',
    'Item',
    'FeedParser',
    'FeedSerializer',
]
