"""
RSSFilter - Feed Item Filtering Service
=======================================

Fetches an RSS or Atom feed, drops the items whose title, link or GUID match
caller-supplied regular expressions and re-emits the feed.

Main Components:
- Filtering: filter specifications and the exclusion rule
- Feed: parsing and serialization of RSS 2.0, RSS 1.0 and Atom documents
- Transport: native (aiohttp) and sandboxed (host fetch) feed fetching
- Processing: the request pipeline shared by every execution target
- Handlers: command line, AWS Lambda and Cloudflare Worker adapters
"""

__version__ = "1.0.0"
__author__ = "RSSFilter Development Team"
__description__ = "Regex-based RSS/Atom feed item filter"

# Core imports for easy access
from .config.settings import get_settings
from .processing.pipeline import FeedFilterPipeline
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import RSSFilterError

__all__ = [
    "get_settings",
    "FeedFilterPipeline",
    "configure_application_logging",
    "get_logger_for_component",
    "RSSFilterError",
]
