#!/usr/bin/env python3
"""
RSSFilter - Feed Item Filter
============================

Command line entry point. Fetches a feed, drops matching items and writes the
filtered feed to stdout; diagnostics go to stderr.

Usage:
    python main.py --help
    python main.py -t '^Sponsored' https://example.com/feed.xml
    python main.py -l '/ads/' -g 'tag:example.com,2024:promo' https://example.com/atom.xml
"""

import sys
import asyncio
from pathlib import Path
from typing import Optional, Tuple

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from rssfilter.config.settings import FetchSettings, RSSFilterSettings, get_settings
from rssfilter.filtering.filter_spec import FilterField
from rssfilter.processing.pipeline import FeedFilterPipeline
from rssfilter.processing.responses import EXIT_CONFIG, FilterResponse
from rssfilter.transport import RuntimeTarget, create_transport
from rssfilter.utils.exceptions import ConfigurationError
from rssfilter.utils.logging import configure_application_logging

# stdout carries the feed
console = Console(stderr=True)


def build_raw_specs(
    title_patterns: Tuple[str, ...],
    link_patterns: Tuple[str, ...],
    guid_patterns: Tuple[str, ...],
):
    """Pair each pattern with the field it targets."""
    return (
        [(FilterField.TITLE, p) for p in title_patterns]
        + [(FilterField.LINK, p) for p in link_patterns]
        + [(FilterField.GUID, p) for p in guid_patterns]
    )


def load_cli_settings(debug: bool, timeout: Optional[float]) -> RSSFilterSettings:
    """Global settings with command line overrides applied."""
    settings = get_settings()
    updates = {}
    if debug:
        updates["debug"] = True
    if timeout is not None:
        try:
            updates["fetch"] = FetchSettings.model_validate(
                {**settings.fetch.model_dump(), "timeout_seconds": timeout}
            )
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid --timeout {timeout}: {e.errors()[0]['msg']}",
                config_key="fetch.timeout_seconds",
            ) from e
    return settings.model_copy(update=updates) if updates else settings


async def filter_feed(url, raw_specs, settings: RSSFilterSettings) -> FilterResponse:
    transport = create_transport(RuntimeTarget.CLI, settings)
    pipeline = FeedFilterPipeline(transport, settings=settings)
    return await pipeline.run(url, raw_specs)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("url", required=False)
@click.option("--title-filter-regex", "-t", "title_patterns", multiple=True,
              help="Drop items whose title matches this regex (repeatable)")
@click.option("--link-filter-regex", "-l", "link_patterns", multiple=True,
              help="Drop items whose link matches this regex (repeatable)")
@click.option("--guid-filter-regex", "-g", "guid_patterns", multiple=True,
              help="Drop items whose GUID matches this regex (repeatable)")
@click.option("--debug", "-d", is_flag=True, help="Enable debug logging")
@click.option("--timeout", type=click.FloatRange(min=0, max=300, min_open=True), default=None,
              help="Fetch timeout in seconds")
def cli(url, title_patterns, link_patterns, guid_patterns, debug, timeout):
    """Filter items out of the RSS or Atom feed at URL."""
    try:
        settings = load_cli_settings(debug, timeout)
    except ConfigurationError as e:
        console.print(f"[bold red]❌ Configuration error:[/bold red] {escape(str(e))}", soft_wrap=True)
        sys.exit(EXIT_CONFIG)

    level, structured = settings.resolve_log_config()
    configure_application_logging(
        log_level=level,
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=structured,
        target=RuntimeTarget.CLI.value,
    )

    raw_specs = build_raw_specs(title_patterns, link_patterns, guid_patterns)
    response = asyncio.run(filter_feed(url, raw_specs, settings))

    if not response.ok:
        console.print(f"[bold red]❌ Error:[/bold red] {escape(response.text)}", soft_wrap=True)
        sys.exit(response.exit_code)

    click.echo(response.body, nl=False)


if __name__ == "__main__":
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
