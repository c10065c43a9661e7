"""
Feed Parser
==========

Decodes fetched bytes into a :class:`Channel`.

Supports RSS 2.0 (any ``<rss>`` version), RSS 1.0 (RDF) and Atom 1.0. The
envelope must be well-formed XML; unknown elements are tolerated and carried
through to the output untouched.
"""

from typing import Iterator, List, Optional

from lxml import etree

from .models import ATOM_NS, RDF_NS, RSS1_NS, Channel, FeedFormat, Item
from ..utils.exceptions import (
    EmptyFeedError,
    MalformedFeedError,
    UnsupportedContentTypeError,
)
from ..utils.logging import get_logger_for_component


FEED_CONTENT_TYPES = (
    "application/rss+xml",
    "application/atom+xml",
    "application/rdf+xml",
    "application/xml",
    "text/xml",
)


def _atom(tag: str) -> str:
    return f"{{{ATOM_NS}}}{tag}"


def _rss1(tag: str) -> str:
    return f"{{{RSS1_NS}}}{tag}"


def _text(element: Optional[etree._Element]) -> Optional[str]:
    """Verbatim text content of an element, None when the element is absent."""
    if element is None:
        return None
    return "".join(element.itertext())


def _atom_link(element: etree._Element) -> Optional[str]:
    for link in element.iterchildren(_atom("link")):
        if link.get("rel", "alternate") == "alternate" and link.get("href") is not None:
            return link.get("href")
    return None


def xml_parser() -> etree.XMLParser:
    """Parser configured for untrusted input."""
    return etree.XMLParser(
        remove_blank_text=True,
        resolve_entities=False,
        no_network=True,
        strip_cdata=False,
        huge_tree=False,
    )


class FeedParser:
    """Builds the channel/item model from raw feed bytes."""

    def __init__(self, strict_content_type: bool = False):
        """Initialize feed parser.

        Args:
            strict_content_type: Reject bodies whose declared content type
                is not a feed or XML type
        """
        self.strict_content_type = strict_content_type
        self.logger = get_logger_for_component("parser")

    def check_content_type(self, content_type: Optional[str]) -> None:
        """Validate the origin's declared content type.

        Raises:
            UnsupportedContentTypeError: In strict mode, for non-feed types
        """
        if not self.strict_content_type:
            return

        mime = (content_type or "").split(";", 1)[0].strip().lower()
        if mime not in FEED_CONTENT_TYPES:
            raise UnsupportedContentTypeError(content_type or "<none>")

    def parse(
        self,
        data: bytes,
        content_type: Optional[str] = None,
        allow_empty: bool = False,
    ) -> Channel:
        """Parse feed bytes.

        Args:
            data: Raw document bytes as fetched
            content_type: Content-Type declared by the origin, if any
            allow_empty: Return an item-less channel instead of raising

        Returns:
            Parsed channel with items in document order

        Raises:
            UnsupportedContentTypeError: In strict mode, for non-feed types
            MalformedFeedError: If the bytes are not a feed document
            EmptyFeedError: If the feed has no items and allow_empty is False
        """
        self.check_content_type(content_type)

        try:
            root = etree.fromstring(data, parser=xml_parser())
        except etree.XMLSyntaxError as e:
            raise MalformedFeedError(f"XML syntax error: {e}") from e

        if root is None:
            raise MalformedFeedError("document is empty")

        channel = self._build_channel(root)

        self.logger.debug(
            f"Parsed {channel.format.value} feed with {len(channel.items)} items",
            extra={"feed_format": channel.format.value, "item_count": len(channel.items)},
        )

        if not channel.items and not allow_empty:
            raise EmptyFeedError(channel)

        return channel

    def _build_channel(self, root: etree._Element) -> Channel:
        if root.tag == "rss":
            element = root.find("channel")
            if element is None:
                raise MalformedFeedError("<rss> document has no <channel>")
            return Channel(
                format=FeedFormat.RSS,
                root=root,
                element=element,
                items=list(self._rss_items(element)),
                title=_text(element.find("title")),
                link=_text(element.find("link")),
                description=_text(element.find("description")),
            )

        if root.tag == f"{{{RDF_NS}}}RDF":
            element = root.find(_rss1("channel"))
            if element is None:
                raise MalformedFeedError("RDF document has no RSS 1.0 <channel>")
            return Channel(
                format=FeedFormat.RDF,
                root=root,
                element=element,
                items=list(self._rdf_items(root)),
                title=_text(element.find(_rss1("title"))),
                link=_text(element.find(_rss1("link"))),
                description=_text(element.find(_rss1("description"))),
            )

        if root.tag == _atom("feed"):
            return Channel(
                format=FeedFormat.ATOM,
                root=root,
                element=root,
                items=list(self._atom_entries(root)),
                title=_text(root.find(_atom("title"))),
                link=_atom_link(root),
                description=_text(root.find(_atom("subtitle"))),
            )

        raise MalformedFeedError(f"unrecognised document element <{root.tag}>")

    def _rss_items(self, channel: etree._Element) -> Iterator[Item]:
        for position, element in enumerate(channel.iterchildren("item")):
            yield Item(
                position=position,
                element=element,
                title=_text(element.find("title")),
                link=_text(element.find("link")),
                guid=_text(element.find("guid")),
            )

    def _rdf_items(self, root: etree._Element) -> Iterator[Item]:
        for position, element in enumerate(root.iterchildren(_rss1("item"))):
            yield Item(
                position=position,
                element=element,
                title=_text(element.find(_rss1("title"))),
                link=_text(element.find(_rss1("link"))),
                guid=element.get(f"{{{RDF_NS}}}about"),
            )

    def _atom_entries(self, root: etree._Element) -> Iterator[Item]:
        for position, element in enumerate(root.iterchildren(_atom("entry"))):
            yield Item(
                position=position,
                element=element,
                title=_text(element.find(_atom("title"))),
                link=_atom_link(element),
                guid=_text(element.find(_atom("id"))),
            )


def item_elements(channel: Channel, root: etree._Element) -> List[etree._Element]:
    """Item elements of ``root`` (the channel's tree or a copy of it), in order."""
    if channel.format is FeedFormat.RSS:
        container = root.find("channel")
        return list(container.iterchildren("item"))
    if channel.format is FeedFormat.RDF:
        return list(root.iterchildren(_rss1("item")))
    return list(root.iterchildren(_atom("entry")))
