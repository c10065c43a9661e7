"""
Filter Evaluator
===============

Applies compiled filter specs to a channel. An item is dropped when any spec
matches its target field; everything else is kept in its original order.
"""

from typing import Optional, Sequence

from .filter_spec import FilterField, FilterSpec
from ..feed.models import Channel, Item
from ..utils.logging import get_logger_for_component

logger = get_logger_for_component("evaluator")


def field_value(item: Item, field: FilterField) -> Optional[str]:
    if field is FilterField.TITLE:
        return item.title
    if field is FilterField.LINK:
        return item.link
    return item.guid


def evaluate_item(item: Item, specs: Sequence[FilterSpec]) -> Optional[FilterSpec]:
    """Return the first spec that excludes ``item``, or None to keep it."""
    for spec in specs:
        if spec.matches(field_value(item, spec.field)):
            return spec
    return None


def apply_filters(channel: Channel, specs: Sequence[FilterSpec]) -> Channel:
    """Remove every item matched by at least one spec.

    Args:
        channel: Parsed channel
        specs: Compiled filter specs (OR across all of them)

    Returns:
        New channel with the surviving items; metadata unchanged
    """
    retained = []
    for item in channel.items:
        matched = evaluate_item(item, specs)
        if matched is None:
            retained.append(item)
        else:
            logger.debug(
                f"Filtering out item {item.link or item.title!r} ({matched})",
                extra={"item_position": item.position},
            )

    n_at_start = len(channel.items)
    n_filtered = n_at_start - len(retained)
    if n_filtered:
        logger.info(
            f"Filtered {n_filtered} of {n_at_start} items",
            extra={
                "channel_link": channel.link,
                "items_at_start": n_at_start,
                "items_at_end": len(retained),
                "items_filtered": n_filtered,
            },
        )
    else:
        logger.info("No items filtered from feed", extra={"channel_link": channel.link})

    return channel.with_items(retained)
