"""
RSSFilter Logging Configuration
==============================

Structured logging setup shared by the CLI, the Lambda function and the
Worker, plus the stage span used to bracket each pipeline stage.

All handlers write to stderr: stdout belongs to the filtered feed when the
CLI is used.
"""

import logging
import logging.handlers
import sys
import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Optional

from rich.console import Console
from rich.logging import RichHandler


# Attributes every LogRecord has; anything else arrived through ``extra``
_RESERVED_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` fields nested."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_RECORD_ATTRS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        return json.dumps(log_data, ensure_ascii=False, default=str)


# Plain text for non-terminal stderr (Lambda, Worker, pipes)
TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"


def _stderr_handler(structured: bool) -> logging.Handler:
    """Handler for stderr: JSON, rich output on a terminal, else plain text."""
    if structured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter())
        return handler

    if hasattr(sys.stderr, "isatty") and sys.stderr.isatty():
        return RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
            log_time_format="%H:%M:%S",
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    return handler


def setup_logger(
    name: str = "rssfilter",
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True,
    structured: bool = False,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Attach fresh handlers to the ``name`` logger.

    Args:
        name: Logger name
        level: Level name
        log_file: Rotating JSON log file, if any
        console: Whether to log to stderr
        structured: JSON records on stderr instead of text
        max_file_size: Rotation threshold in bytes
        backup_count: Rotated files to keep

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level.upper())

    # Replace, never stack, handlers on reconfiguration
    logger.handlers.clear()

    if console:
        logger.addHandler(_stderr_handler(structured))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


class LoggerAdapter(logging.LoggerAdapter):
    """Custom logger adapter for adding context to log messages."""

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> tuple:
        """Process log message with extra context."""
        if "extra" in kwargs:
            kwargs["extra"] = {**self.extra, **kwargs["extra"]}
        else:
            kwargs["extra"] = self.extra.copy()

        return msg, kwargs


def get_logger_for_component(
    component_name: str,
    request_id: Optional[str] = None,
    url: Optional[str] = None,
) -> LoggerAdapter:
    """Get a logger adapter with component-specific context.

    Args:
        component_name: Name of the component (e.g., 'transport', 'pipeline')
        request_id: Associated request ID (optional)
        url: Associated feed URL (optional)

    Returns:
        Logger adapter with context
    """
    base_logger = logging.getLogger(f"rssfilter.{component_name}")

    extra_context = {
        "component": component_name,
    }

    if request_id:
        extra_context["request_id"] = request_id
    if url:
        extra_context["feed_url"] = url

    return LoggerAdapter(base_logger, extra_context)


_configured_target: Optional[str] = None


def configure_application_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    structured_logging: bool = False,
    target: str = "cli",
    force: bool = False,
) -> None:
    """Configure application-wide logging settings.

    Repeated calls for the same target are no-ops, so warm Lambda and Worker
    invocations keep the handlers installed on the first request.

    Args:
        log_level: Global log level
        log_file: Path to main log file
        enable_console: Whether to enable stderr logging
        structured_logging: Whether to use JSON structured logging
        target: Execution target the process runs as
        force: Reconfigure even if already configured
    """
    global _configured_target

    if _configured_target == target and not force:
        return

    setup_logger(
        name="rssfilter",
        level=log_level,
        log_file=log_file,
        console=enable_console,
        structured=structured_logging,
    )

    # Configure third-party library logging levels
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    _configured_target = target


def get_pipeline_logger(
    request_id: Optional[str] = None, url: Optional[str] = None
) -> LoggerAdapter:
    """Get logger for the request orchestrator."""
    return get_logger_for_component("pipeline", request_id=request_id, url=url)


def get_transport_logger(url: Optional[str] = None) -> LoggerAdapter:
    """Get logger for feed transports."""
    return get_logger_for_component("transport", url=url)


class StageSpan:
    """Context manager bracketing exactly one unit of work.

    Emits a start record and an end record carrying ``duration_seconds`` and
    ``success``. Attributes set while the span is open are attached to the
    end record. Exceptions are logged and re-raised unchanged.
    """

    def __init__(self, logger: logging.LoggerAdapter, stage: str, **attributes):
        """Initialize stage span.

        Args:
            logger: Logger instance
            stage: Name of the stage being bracketed
            **attributes: Additional key-value attributes for the span
        """
        self.logger = logger
        self.stage = stage
        self.attributes = dict(attributes)
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def __enter__(self) -> "StageSpan":
        self.start_time = time.perf_counter()
        self.logger.debug(
            f"Starting {self.stage}",
            extra={"span": self.stage, "span_event": "start", **self.attributes},
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.duration = time.perf_counter() - self.start_time

        context = {
            **self.attributes,
            "span": self.stage,
            "span_event": "end",
            "duration_seconds": self.duration,
            "success": exc_type is None,
        }

        if exc_type is None:
            self.logger.info(
                f"Completed {self.stage} in {self.duration:.3f}s", extra=context
            )
        else:
            context["error_type"] = exc_type.__name__
            self.logger.warning(
                f"Failed {self.stage} in {self.duration:.3f}s", extra=context
            )
