"""
Feed Models
==========

In-memory representation of one parsed feed. The parsed XML tree is kept as
the source of truth so that every channel and item element the origin sent is
written back unchanged; the model only lifts out what filtering needs.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

from lxml import etree


ATOM_NS = "http://www.w3.org/2005/Atom"
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RSS1_NS = "http://purl.org/rss/1.0/"


class FeedFormat(str, Enum):
    """Feed document families."""

    RSS = "rss"
    RDF = "rdf"
    ATOM = "atom"

    @property
    def media_type(self) -> str:
        return {
            FeedFormat.RSS: "application/rss+xml",
            FeedFormat.RDF: "application/rdf+xml",
            FeedFormat.ATOM: "application/atom+xml",
        }[self]


@dataclass(frozen=True)
class Item:
    """One feed entry.

    ``title``, ``link`` and ``guid`` are the verbatim text of the source
    elements, or None when the element is absent. ``position`` is the
    item's index in the source document.
    """

    position: int
    element: etree._Element = field(repr=False, compare=False)
    title: Optional[str] = None
    link: Optional[str] = None
    guid: Optional[str] = None


@dataclass(frozen=True)
class Channel:
    """Feed-level metadata plus the ordered items."""

    format: FeedFormat
    root: etree._Element = field(repr=False, compare=False)
    element: etree._Element = field(repr=False, compare=False)
    items: List[Item] = field(default_factory=list)
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None

    def with_items(self, items: List[Item]) -> "Channel":
        """Same channel, different item sequence."""
        return replace(self, items=list(items))

    @property
    def media_type(self) -> str:
        return self.format.media_type
