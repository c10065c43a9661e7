"""
Feed Serializer
==============

Writes a filtered :class:`Channel` back to a UTF-8 feed document of the same
format family. Works on a copy of the parsed tree: channel metadata and the
surviving items are emitted exactly as parsed, the rest are dropped.
"""

import copy

from lxml import etree

from .models import RDF_NS, RSS1_NS, Channel, FeedFormat
from .parser import item_elements
from ..utils.exceptions import SerializeError
from ..utils.logging import get_logger_for_component


class FeedSerializer:
    """Re-encodes channels to feed documents."""

    def __init__(self, pretty_print: bool = True):
        self.pretty_print = pretty_print
        self.logger = get_logger_for_component("serializer")

    def serialize(self, channel: Channel) -> bytes:
        """Serialize a channel and its (possibly empty) items.

        Args:
            channel: Channel to write

        Returns:
            Encoded feed document

        Raises:
            SerializeError: If the document cannot be encoded
        """
        retained = {item.position for item in channel.items}

        try:
            root = copy.deepcopy(channel.root)
            dropped = []
            for position, element in enumerate(item_elements(channel, root)):
                if position not in retained:
                    dropped.append(element)
                    element.getparent().remove(element)

            if channel.format is FeedFormat.RDF:
                _drop_rdf_references(root, dropped)

            document = etree.tostring(
                root,
                xml_declaration=True,
                encoding="utf-8",
                pretty_print=self.pretty_print,
            )
        except (etree.LxmlError, ValueError, TypeError) as e:
            raise SerializeError(
                f"Failed to encode {channel.format.value} feed: {e}",
                context={"feed_format": channel.format.value},
            ) from e

        self.logger.debug(
            f"Serialized {len(channel.items)} items ({len(document)} bytes)",
            extra={"item_count": len(channel.items), "size_bytes": len(document)},
        )
        return document

    @staticmethod
    def media_type(channel: Channel) -> str:
        """Content-Type for a serialized channel."""
        return f"{channel.media_type}; charset=utf-8"


def _drop_rdf_references(root: etree._Element, dropped) -> None:
    """Remove ``channel/items/rdf:Seq`` entries that point at dropped items."""
    about = f"{{{RDF_NS}}}about"
    resource = f"{{{RDF_NS}}}resource"
    removed = {element.get(about) for element in dropped if element.get(about)}
    if not removed:
        return

    seq_path = f"{{{RSS1_NS}}}channel/{{{RSS1_NS}}}items/{{{RDF_NS}}}Seq/{{{RDF_NS}}}li"
    for entry in root.iterfind(seq_path):
        if entry.get(resource) in removed:
            entry.getparent().remove(entry)
