"""
RSSFilter Custom Exceptions
==========================

Exception hierarchy for the feed filtering engine. Every pipeline stage raises
one of these typed errors; only the request orchestrator turns them into HTTP
statuses or exit codes.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration errors (C001-C099)
    CONFIG_INVALID = "C001"

    # Request validation errors (V001-V099)
    REQUEST_MISSING_URL = "V001"
    REQUEST_INVALID_URL = "V002"
    FILTER_INVALID_PATTERN = "V003"
    FILTER_NONE_PROVIDED = "V004"

    # Upstream fetch errors (F001-F099)
    FETCH_TIMEOUT = "F001"
    FETCH_CONNECTION_FAILED = "F002"
    FETCH_BAD_STATUS = "F003"
    FETCH_BODY_TOO_LARGE = "F004"
    FETCH_FAILED = "F005"

    # Feed parsing errors (P001-P099)
    FEED_MALFORMED = "P001"
    FEED_EMPTY = "P002"
    FEED_UNSUPPORTED_CONTENT_TYPE = "P003"

    # Internal errors (S001-S099)
    SERIALIZE_FAILED = "S001"
    INTERNAL_ERROR = "S002"


class RSSFilterError(Exception):
    """Base exception for all RSSFilter errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: bool = False,
    ):
        """Initialize RSSFilter error.

        Args:
            message: Technical error message for logging
            error_code: Categorized error code
            context: Additional context information
            user_message: Message that is safe to show to the caller
            recoverable: Whether a later attempt could succeed
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}
        self.user_message = user_message or message
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        """String representation with error code."""
        if self.error_code:
            return f"[{self.error_code.value}] {super().__str__()}"
        return super().__str__()


class ConfigurationError(RSSFilterError):
    """Configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", ErrorCode.CONFIG_INVALID),
            context=context,
            user_message=kwargs.pop("user_message", f"Configuration error: {message}"),
            **kwargs,
        )


# Request errors: the caller's fault, never retried.


class RequestError(RSSFilterError):
    """Invalid request parameters."""

    def __init__(self, message: str, parameter: Optional[str] = None, **kwargs):
        """Initialize request error.

        Args:
            message: Error message naming the invalid input
            parameter: Name of the offending request parameter
            **kwargs: Additional arguments for RSSFilterError
        """
        context = kwargs.pop("context", {})
        if parameter:
            context["parameter"] = parameter
        self.parameter = parameter

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", ErrorCode.REQUEST_INVALID_URL),
            context=context,
            user_message=kwargs.pop("user_message", message),
            recoverable=False,
            **kwargs,
        )


class InvalidURLError(RequestError):
    """The feed URL is missing or is not an absolute http(s) URL."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if url is not None:
            context["url"] = url
        super().__init__(message, parameter="url", context=context, **kwargs)


class FilterError(RequestError):
    """Filter specification errors."""


class InvalidPatternError(FilterError):
    """A filter pattern is not a valid regular expression."""

    def __init__(self, parameter: str, pattern: str, cause: Exception):
        self.pattern = pattern
        self.cause = cause
        super().__init__(
            f"Invalid regular expression for '{parameter}': {pattern!r} ({cause})",
            parameter=parameter,
            error_code=ErrorCode.FILTER_INVALID_PATTERN,
            context={"pattern": pattern},
        )


class NoFiltersError(FilterError):
    """No filter patterns were supplied."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "At least one title_filter_regex, link_filter_regex or guid_filter_regex must be provided",
            error_code=ErrorCode.FILTER_NONE_PROVIDED,
        )


# Transport errors: the origin's fault.


class TransportError(RSSFilterError):
    """Fetching the origin feed failed."""

    category = "fetch failed"

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        """Initialize transport error.

        Args:
            message: Error message
            feed_url: Feed URL that caused the error
            **kwargs: Additional arguments for RSSFilterError
        """
        context = kwargs.pop("context", {})
        if feed_url:
            context["feed_url"] = feed_url

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", ErrorCode.FETCH_FAILED),
            context=context,
            user_message=kwargs.pop(
                "user_message", f"Upstream feed could not be fetched: {self.category}"
            ),
            recoverable=kwargs.pop("recoverable", True),
            **kwargs,
        )


class FetchTimeoutError(TransportError):
    """The fetch did not complete within its time budget."""

    category = "timed out"

    def __init__(self, message: str, timeout: Optional[float] = None, **kwargs):
        context = kwargs.pop("context", {})
        if timeout is not None:
            context["timeout_seconds"] = timeout
        super().__init__(
            message, error_code=ErrorCode.FETCH_TIMEOUT, context=context, **kwargs
        )


class ConnectionFailedError(TransportError):
    """The origin could not be reached."""

    category = "connection failed"

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code=ErrorCode.FETCH_CONNECTION_FAILED, **kwargs)


class NonSuccessStatusError(TransportError):
    """The origin answered with a non-2xx status."""

    category = "origin returned an error status"

    def __init__(self, status: int, **kwargs):
        self.status = status
        context = kwargs.pop("context", {})
        context["status"] = status
        super().__init__(
            f"Origin responded with HTTP {status}",
            error_code=ErrorCode.FETCH_BAD_STATUS,
            context=context,
            user_message=f"Upstream feed could not be fetched: origin responded with HTTP {status}",
            recoverable=status >= 500,
            **kwargs,
        )


class BodyTooLargeError(TransportError):
    """The origin body exceeds the configured size cap."""

    category = "feed is too large"

    def __init__(self, max_size: int, **kwargs):
        self.max_size = max_size
        context = kwargs.pop("context", {})
        context["max_size"] = max_size
        super().__init__(
            f"Feed body exceeds {max_size} bytes",
            error_code=ErrorCode.FETCH_BODY_TOO_LARGE,
            context=context,
            recoverable=False,
            **kwargs,
        )


# Parse errors: the origin returned unusable content.


class ParseError(RSSFilterError):
    """The fetched body is not a usable feed document."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", ErrorCode.FEED_MALFORMED),
            context=kwargs.pop("context", {}),
            user_message=kwargs.pop(
                "user_message", "Upstream feed could not be parsed"
            ),
            recoverable=False,
            **kwargs,
        )


class MalformedFeedError(ParseError):
    """The body is not well-formed XML or not a feed document."""

    def __init__(self, detail: str, **kwargs):
        self.detail = detail
        context = kwargs.pop("context", {})
        context["detail"] = detail
        super().__init__(f"Malformed feed: {detail}", context=context, **kwargs)


class EmptyFeedError(ParseError):
    """The feed parsed correctly but contains no items."""

    def __init__(self, channel: Any = None):
        self.channel = channel
        super().__init__(
            "Feed contains no items",
            error_code=ErrorCode.FEED_EMPTY,
            user_message="Upstream feed contains no items",
        )


class UnsupportedContentTypeError(ParseError):
    """The origin declared a content type that is not a feed."""

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(
            f"Invalid content type: {content_type}",
            error_code=ErrorCode.FEED_UNSUPPORTED_CONTENT_TYPE,
            context={"content_type": content_type},
            user_message="Upstream response is not a feed document",
        )


# Internal errors.


class SerializeError(RSSFilterError):
    """Encoding the filtered feed failed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", ErrorCode.SERIALIZE_FAILED),
            context=kwargs.pop("context", {}),
            user_message=kwargs.pop(
                "user_message", "Internal error while writing the filtered feed"
            ),
            recoverable=False,
            **kwargs,
        )


class InternalError(RSSFilterError):
    """Unexpected failure inside the engine."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.INTERNAL_ERROR,
            context=kwargs.pop("context", {}),
            user_message="Internal error while filtering the feed",
            recoverable=False,
            **kwargs,
        )


# Exception handling utilities


def handle_exception(
    exception: Exception,
    logger,
    operation: str,
    context: Optional[Dict[str, Any]] = None,
) -> RSSFilterError:
    """Convert generic exceptions to RSSFilter exceptions with proper logging.

    Args:
        exception: Original exception
        logger: Logger instance for error logging
        operation: Operation that was being performed
        context: Additional context information

    Returns:
        RSSFilter exception with proper categorization
    """
    if isinstance(exception, RSSFilterError):
        return exception

    context = context or {}
    context["operation"] = operation
    context["original_exception_type"] = type(exception).__name__

    error = InternalError(
        f"Unexpected error during {operation}: {exception}", context=context
    )
    logger.error(
        f"Operation '{operation}' failed", extra=error.to_dict(), exc_info=exception
    )
    return error


def is_client_error(exception: Exception) -> bool:
    """Check whether an error was caused by the caller's request."""
    return isinstance(exception, RequestError)


def is_upstream_error(exception: Exception) -> bool:
    """Check whether an error was caused by the origin feed or its server."""
    return isinstance(exception, (TransportError, ParseError))


def get_user_friendly_message(exception: Exception) -> str:
    """Get a caller-safe message for any exception."""
    if isinstance(exception, RSSFilterError):
        return exception.user_message

    return "An unexpected error occurred"
