"""
Pipeline Responses
=================

Maps pipeline results to the response every execution target adapts: an HTTP
status, a body and headers, plus the equivalent CLI exit code.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, TYPE_CHECKING

from ..utils.exceptions import (
    RSSFilterError,
    get_user_friendly_message,
    is_client_error,
    is_upstream_error,
)

if TYPE_CHECKING:
    from .pipeline import PipelineOutcome


TEXT_PLAIN = "text/plain; charset=utf-8"

# sysexits.h codes
EXIT_OK = 0
EXIT_USAGE = 64
EXIT_UNAVAILABLE = 69
EXIT_SOFTWARE = 70
EXIT_CONFIG = 78

HTTP_REASONS = {
    200: "OK",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
    502: "Bad Gateway",
}


@dataclass
class FilterResponse:
    """Transport-neutral response produced for one invocation."""

    status: int
    body: bytes
    content_type: str = TEXT_PLAIN
    headers: Dict[str, str] = field(default_factory=dict)
    exit_code: int = EXIT_OK
    outcome: Optional["PipelineOutcome"] = None

    @property
    def ok(self) -> bool:
        return self.status == 200

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def all_headers(self) -> Dict[str, str]:
        return {"Content-Type": self.content_type, **self.headers}

    @classmethod
    def plain(
        cls, status: int, message: Optional[str] = None, **kwargs
    ) -> "FilterResponse":
        """Plain-text response, defaulting the body to the reason phrase."""
        message = message if message is not None else HTTP_REASONS.get(status, "")
        return cls(status=status, body=message.encode("utf-8"), **kwargs)


def status_for_error(error: RSSFilterError) -> int:
    """HTTP status for a pipeline error."""
    if is_client_error(error):
        return 400
    if is_upstream_error(error):
        return 502
    return 500


def exit_code_for_error(error: RSSFilterError) -> int:
    """CLI exit code for a pipeline error."""
    if is_client_error(error):
        return EXIT_USAGE
    if is_upstream_error(error):
        return EXIT_UNAVAILABLE
    return EXIT_SOFTWARE


def response_for_error(
    error: RSSFilterError, outcome: Optional["PipelineOutcome"] = None
) -> FilterResponse:
    """Build the error response; the body is the caller-safe message only."""
    return FilterResponse.plain(
        status_for_error(error),
        get_user_friendly_message(error),
        exit_code=exit_code_for_error(error),
        outcome=outcome,
    )
