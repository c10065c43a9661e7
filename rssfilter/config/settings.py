"""
RSSFilter Configuration System
=============================

Configuration management with environment variables and Pydantic models.
Environment variables (prefix ``RSSFILTER_``, nested with ``__``) override
Field defaults. Execution targets may layer their own overrides for logging
on top (Lambda advanced logging controls, Worker bindings).
"""

from typing import Optional, Tuple
from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from ..utils.exceptions import ConfigurationError, ErrorCode


FEED_ACCEPT = (
    "application/rss+xml, application/rdf+xml;q=0.8, application/atom+xml;q=0.6, "
    "application/xml;q=0.4, text/xml;q=0.4"
)


class LogLevel(str, Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# Level names used by other runtimes, e.g. Lambda advanced logging controls
LOG_LEVEL_ALIASES = {
    "TRACE": "DEBUG",
    "WARN": "WARNING",
    "FATAL": "CRITICAL",
}


class FetchSettings(BaseModel):
    """Upstream fetch configuration."""
    timeout_seconds: float = Field(default=10.0, gt=0, le=300, description="Wall-clock budget for one fetch")
    max_body_bytes: int = Field(default=10 * 1024 * 1024, ge=1024, description="Largest feed body accepted")
    max_redirects: int = Field(default=10, ge=0, le=30, description="Redirects followed by the native client")
    user_agent: Optional[str] = Field(default=None, description="User-Agent sent to the origin (default: <app_name>/<version>)")
    accept: str = Field(default=FEED_ACCEPT, description="Accept header sent to the origin")
    block_private_hosts: bool = Field(default=False, description="Reject feed URLs on loopback/private hosts")


class FeedSettings(BaseModel):
    """Feed parsing configuration."""
    allow_empty_feeds: bool = Field(default=True, description="Serve feeds that contain no items")
    strict_content_type: bool = Field(default=False, description="Reject origin responses not labelled as feeds")


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.INFO, description="Global log level")
    file_path: Optional[str] = Field(default=None, description="Log file path")
    structured_logging: bool = Field(default=False, description="Use structured JSON logging")
    console_logging: bool = Field(default=True, description="Enable stderr logging")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        """Accept level names in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


class RSSFilterSettings(BaseSettings):
    """Main application settings."""

    fetch: FetchSettings = Field(default_factory=FetchSettings)
    feed: FeedSettings = Field(default_factory=FeedSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    app_name: str = Field(default="rssfilter", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "env_prefix": "RSSFILTER_",
        "extra": "ignore",
    }

    def get_effective_log_level(self) -> str:
        """Get effective log level considering debug mode."""
        if self.debug:
            return "DEBUG"
        return self.logging.level.value

    def get_effective_user_agent(self) -> str:
        """User-Agent for origin requests, derived from the app identity unless set."""
        return self.fetch.user_agent or f"{self.app_name}/{self.version}"

    def resolve_log_config(
        self, level: Optional[str] = None, log_format: Optional[str] = None
    ) -> Tuple[str, bool]:
        """Resolve (level, structured) for an execution target.

        Explicit overrides win when they are valid; invalid overrides fall
        back to the configured values.

        Args:
            level: Level override, e.g. a Worker binding or AWS_LAMBDA_LOG_LEVEL
            log_format: Format override, ``json`` or ``text``

        Returns:
            Tuple of level name and whether to log structured JSON
        """
        resolved_level = self.get_effective_log_level()
        if level:
            name = level.strip().upper()
            name = LOG_LEVEL_ALIASES.get(name, name)
            if name in LogLevel.__members__:
                resolved_level = name

        structured = self.logging.structured_logging
        if log_format:
            fmt = log_format.strip().lower()
            if fmt == "json":
                structured = True
            elif fmt in ("text", "pretty"):
                structured = False

        return resolved_level, structured


def load_settings() -> RSSFilterSettings:
    """Load settings from environment variables and defaults.

    Returns:
        Loaded and validated settings

    Raises:
        ConfigurationError: If configuration is invalid
    """
    # Load environment variables from .env file
    from dotenv import load_dotenv
    load_dotenv()

    try:
        return RSSFilterSettings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to initialize settings: {e}",
            error_code=ErrorCode.CONFIG_INVALID
        )


# Global settings instance
_settings: Optional[RSSFilterSettings] = None


def get_settings(reload: bool = False) -> RSSFilterSettings:
    """Get global settings instance (singleton pattern).

    Args:
        reload: Force reload of settings

    Returns:
        Global settings instance
    """
    global _settings

    if _settings is None or reload:
        _settings = load_settings()

    return _settings
