"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and configuration for RSSFilter tests.

- Sample RSS 2.0, RSS 1.0 (RDF) and Atom documents
- A recording transport that counts network calls without touching sockets
- Settings built from defaults, isolated from the developer's environment
"""

import os
import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
os.environ["RSSFILTER_DEBUG"] = "false"
os.environ["RSSFILTER_LOGGING__LEVEL"] = "DEBUG"
os.environ["RSSFILTER_LOGGING__CONSOLE_LOGGING"] = "false"


# ============================================================================
# Sample Feeds
# ============================================================================

RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Example Blog</title>
    <link>https://blog.example.com/</link>
    <description>Posts from the example blog</description>
    <language>en-us</language>
    <item>
      <title>Official blog post</title>
      <link>https://blog.example.com/official</link>
      <guid isPermaLink="false">post-1</guid>
      <dc:creator>Staff</dc:creator>
    </item>
    <item>
      <title>Guest post</title>
      <link>https://blog.example.com/guest</link>
      <guid isPermaLink="false">post-2</guid>
      <description><![CDATA[<p>Written by a <b>guest</b></p>]]></description>
    </item>
    <item>
      <title>Sponsored: buy things</title>
      <link>https://ads.example.com/promo</link>
      <guid isPermaLink="false">promo-3</guid>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Atom</title>
  <link href="https://atom.example.com/" rel="alternate"/>
  <link href="https://atom.example.com/feed.xml" rel="self"/>
  <id>urn:uuid:60a76c80-d399-11d9-b93C-0003939e0af6</id>
  <updated>2024-09-07T00:00:01Z</updated>
  <entry>
    <title>Release notes</title>
    <link href="https://atom.example.com/release" rel="alternate"/>
    <id>tag:atom.example.com,2024:release</id>
    <updated>2024-09-06T12:00:00Z</updated>
  </entry>
  <entry>
    <title>Weekly promo</title>
    <link href="https://atom.example.com/promo"/>
    <id>tag:atom.example.com,2024:promo</id>
    <updated>2024-09-05T12:00:00Z</updated>
  </entry>
</feed>
"""

RDF_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns="http://purl.org/rss/1.0/">
  <channel rdf:about="https://rdf.example.com/">
    <title>Example RDF</title>
    <link>https://rdf.example.com/</link>
    <description>An RSS 1.0 feed</description>
    <items>
      <rdf:Seq>
        <rdf:li rdf:resource="https://rdf.example.com/one"/>
        <rdf:li rdf:resource="https://rdf.example.com/two"/>
      </rdf:Seq>
    </items>
  </channel>
  <item rdf:about="https://rdf.example.com/one">
    <title>First</title>
    <link>https://rdf.example.com/one</link>
  </item>
  <item rdf:about="https://rdf.example.com/two">
    <title>Second</title>
    <link>https://rdf.example.com/two</link>
  </item>
</rdf:RDF>
"""

EMPTY_RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Quiet Blog</title>
    <link>https://quiet.example.com/</link>
    <description>Nothing here yet</description>
  </channel>
</rss>
"""

NO_LINK_RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Linkless</title>
    <link>https://linkless.example.com/</link>
    <description>Items without links</description>
    <item>
      <title>Note without link</title>
      <guid isPermaLink="false">note-1</guid>
    </item>
    <item>
      <title>Linked note</title>
      <link>https://linkless.example.com/linked</link>
    </item>
  </channel>
</rss>
"""

FEED_URL = "https://blog.example.com/feed.xml"


@pytest.fixture
def rss_feed() -> bytes:
    return RSS_FEED


@pytest.fixture
def atom_feed() -> bytes:
    return ATOM_FEED


@pytest.fixture
def rdf_feed() -> bytes:
    return RDF_FEED


@pytest.fixture
def empty_rss_feed() -> bytes:
    return EMPTY_RSS_FEED


@pytest.fixture
def no_link_rss_feed() -> bytes:
    return NO_LINK_RSS_FEED


@pytest.fixture
def feed_url() -> str:
    return FEED_URL


# ============================================================================
# Settings
# ============================================================================


@pytest.fixture
def settings():
    """Fresh settings built from defaults and the test environment."""
    from rssfilter.config.settings import RSSFilterSettings

    return RSSFilterSettings()


# ============================================================================
# Transport Fixtures
# ============================================================================


class RecordingTransport:
    """Transport double that serves canned bytes and counts fetches.

    Pass ``error`` to make every fetch raise it instead.
    """

    name = "recording"

    def __init__(
        self,
        body: bytes = RSS_FEED,
        content_type: Optional[str] = "application/rss+xml; charset=utf-8",
        error: Optional[Exception] = None,
        response_headers: Optional[dict] = None,
    ):
        self.body = body
        self.response_headers = response_headers or {}
        self.content_type = content_type
        self.error = error
        self.calls: List[dict] = []
        self.max_body_bytes = 10 * 1024 * 1024

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def fetch(self, url, timeout, headers=None):
        from rssfilter.transport.base import FetchedFeed

        self.calls.append({"url": url, "timeout": timeout, "headers": dict(headers or {})})
        if self.error is not None:
            raise self.error
        return FetchedFeed(
            url=url,
            status=200,
            body=self.body,
            content_type=self.content_type,
            headers=dict(self.response_headers),
        )


@pytest.fixture
def recording_transport():
    """Transport serving the sample RSS feed."""
    return RecordingTransport()


@pytest.fixture
def make_transport():
    """Factory for transports serving a given body or raising a given error."""

    def _make(
        body: bytes = RSS_FEED,
        content_type: Optional[str] = "application/rss+xml",
        error=None,
        response_headers=None,
    ):
        return RecordingTransport(
            body=body, content_type=content_type, error=error, response_headers=response_headers
        )

    return _make
