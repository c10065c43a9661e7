"""
Request parameter extraction shared by the HTTP targets.
"""

from typing import Iterable, List, Optional, Tuple
from urllib.parse import parse_qsl

from ..filtering.filter_spec import FilterField, RawFilterSpec

URL_PARAMETER = "url"

QueryPairs = List[Tuple[str, str]]


def parse_query_string(query: Optional[str]) -> QueryPairs:
    """Split and percent-decode a raw query string.

    Values are decoded exactly once. Blank values are kept so that
    ``?url=`` is reported as a missing URL rather than silently dropped.
    """
    if not query:
        return []
    return parse_qsl(query.lstrip("?"), keep_blank_values=True)


def request_parameters(pairs: Iterable[Tuple[str, str]]) -> Tuple[Optional[str], List[RawFilterSpec]]:
    """Pick the feed URL and filter patterns out of decoded query pairs.

    The first ``url`` wins; filter parameters keep their order; anything
    else is ignored.

    Returns:
        Tuple of the feed URL (None when absent) and ``(field, pattern)`` pairs
    """
    url = None
    raw_specs = []

    for name, value in pairs:
        if name == URL_PARAMETER:
            if url is None:
                url = value
            continue

        field = FilterField.from_parameter(name)
        if field is not None:
            raw_specs.append((field, value))

    return url, raw_specs
