"""
Header forwarding in both directions.

Callers' headers are passed on to the origin, minus those that belong to this
hop or that would change the meaning of the response. The origin's response
headers (ETag, Last-Modified, Cache-Control, ...) are passed back to the
caller, minus those describing the body that was rewritten.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

KEY_PREFIXES_TO_STRIP = ("x-", "cf-")

HEADERS_TO_STRIP = frozenset(
    {
        "host",
        "connection",
        "keep-alive",
        "authorization",
        "cookie",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "content-length",
        "accept-encoding",
        "forwarded",
        "via",
        # a 304 carries no feed to filter
        "if-none-match",
        "if-modified-since",
        "if-match",
        "if-unmodified-since",
        "if-range",
    }
)


def filter_request_headers(
    headers: Optional[Mapping[str, str]], accept: str, user_agent: str
) -> Dict[str, str]:
    """Build the header set sent to the origin.

    Args:
        headers: Incoming request headers (any case)
        accept: Accept header to always send
        user_agent: User-Agent header to always send

    Returns:
        Headers with lower-case names
    """
    filtered = {}
    for name, value in (headers or {}).items():
        key = name.lower()
        if key in HEADERS_TO_STRIP or key.startswith(KEY_PREFIXES_TO_STRIP):
            continue
        filtered[key] = value

    filtered["accept"] = accept
    filtered["user-agent"] = user_agent
    return filtered


HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)

# The filtered body has its own length, encoding and media type
BODY_HEADERS = frozenset({"content-length", "content-encoding", "content-type"})

HeaderSource = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


def collect_headers(headers: Optional[HeaderSource]) -> Dict[str, str]:
    """Lower-case header names, joining repeated headers with ``", "``.

    Accepts a mapping (including multi-dicts, whose ``items()`` repeat keys)
    or an iterable of ``(name, value)`` pairs.
    """
    if not headers:
        return {}

    pairs = headers.items() if hasattr(headers, "items") else headers
    collected: Dict[str, str] = {}
    for name, value in pairs:
        key = str(name).lower()
        if key in collected:
            collected[key] = f"{collected[key]}, {value}"
        else:
            collected[key] = str(value)
    return collected


def filter_response_headers(headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Origin response headers safe to send back with the filtered feed.

    Args:
        headers: Origin response headers (any case)

    Returns:
        Headers with lower-case names
    """
    return {
        name: value
        for name, value in collect_headers(headers).items()
        if name not in HOP_BY_HOP_HEADERS and name not in BODY_HEADERS
    }
