"""
Request Orchestrator
===================

Drives one request through validate → fetch → parse → filter → serialize and
turns the result into a :class:`FilterResponse`. This is the single entry
point used by the CLI, the Lambda function and the Worker; it is also the only
place where an error becomes a status code.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Optional

from ..config.settings import RSSFilterSettings, get_settings
from ..feed.models import Channel
from ..feed.parser import FeedParser
from ..feed.serializer import FeedSerializer
from ..filtering.evaluator import apply_filters
from ..filtering.filter_spec import FeedRequest, RawFilterSpec
from ..transport.base import FeedTransport
from ..transport.headers import filter_request_headers, filter_response_headers
from ..utils.exceptions import (
    RSSFilterError,
    handle_exception,
    is_client_error,
    is_upstream_error,
)
from ..utils.logging import StageSpan, get_pipeline_logger
from .responses import FilterResponse, response_for_error


class PipelineStage(str, Enum):
    """States of one pass through the pipeline."""

    RECEIVED = "received"
    VALIDATING = "validating"
    FETCHING = "fetching"
    PARSING = "parsing"
    FILTERING = "filtering"
    SERIALIZING = "serializing"
    RESPONDING = "responding"
    ERRORED = "errored"


@dataclass
class PipelineOutcome:
    """What happened during one invocation."""

    stage: PipelineStage = PipelineStage.RECEIVED
    failed_stage: Optional[PipelineStage] = None
    error: Optional[RSSFilterError] = None
    request: Optional[FeedRequest] = None
    items_total: int = 0
    items_retained: int = 0
    empty_feed: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.stage is PipelineStage.RESPONDING


class FeedFilterPipeline:
    """Single-pass feed filtering pipeline."""

    def __init__(
        self,
        transport: FeedTransport,
        settings: Optional[RSSFilterSettings] = None,
        request_id: Optional[str] = None,
    ):
        """Initialize pipeline.

        Args:
            transport: Feed transport for the current execution target
            settings: Application settings (default: global settings)
            request_id: Identifier attached to every log record
        """
        self.transport = transport
        self.settings = settings or get_settings()
        self.request_id = request_id
        self.logger = get_pipeline_logger(request_id=request_id)
        self.parser = FeedParser(strict_content_type=self.settings.feed.strict_content_type)
        self.serializer = FeedSerializer()

    def validate(self, url: Optional[str], raw_specs: Iterable[RawFilterSpec]) -> FeedRequest:
        """Build the request; performs no I/O."""
        return FeedRequest.build(
            url,
            raw_specs,
            block_private_hosts=self.settings.fetch.block_private_hosts,
        )

    async def run(
        self,
        url: Optional[str],
        raw_specs: Iterable[RawFilterSpec],
        headers: Optional[Mapping[str, str]] = None,
    ) -> FilterResponse:
        """Run one request to completion.

        Args:
            url: Origin feed URL as supplied by the caller
            raw_specs: ``(field, pattern)`` pairs as supplied by the caller
            headers: Caller headers to forward to the origin

        Returns:
            The response for this request. Cancellation propagates and
            produces no response.
        """
        outcome = PipelineOutcome()

        try:
            outcome.stage = PipelineStage.VALIDATING
            with StageSpan(self.logger, "validating"):
                request = self.validate(url, list(raw_specs))
            outcome.request = request
            self.logger.debug(
                f"Filtering feed {request.url} with {request.describe_filters()}"
            )

            outcome.stage = PipelineStage.FETCHING
            with StageSpan(self.logger, "fetching", feed_url=request.url) as span:
                fetched = await self.transport.fetch(
                    request.url,
                    timeout=self.settings.fetch.timeout_seconds,
                    headers=filter_request_headers(
                        headers,
                        accept=self.settings.fetch.accept,
                        user_agent=self.settings.get_effective_user_agent(),
                    ),
                )
                span.set_attribute("status", fetched.status)
                span.set_attribute("size_bytes", fetched.size)

            outcome.stage = PipelineStage.PARSING
            with StageSpan(self.logger, "parsing") as span:
                channel = self._parse(fetched.body, fetched.content_type, outcome)
                span.set_attribute("feed_format", channel.format.value)
                span.set_attribute("item_count", len(channel.items))
            outcome.items_total = len(channel.items)

            outcome.stage = PipelineStage.FILTERING
            with StageSpan(self.logger, "filtering") as span:
                filtered = apply_filters(channel, request.specs)
                span.set_attribute("items_retained", len(filtered.items))
            outcome.items_retained = len(filtered.items)

            outcome.stage = PipelineStage.SERIALIZING
            with StageSpan(self.logger, "serializing") as span:
                document = self.serializer.serialize(filtered)
                span.set_attribute("size_bytes", len(document))

        except RSSFilterError as e:
            return self._fail(outcome, e)
        except Exception as e:
            error = handle_exception(
                e, self.logger, outcome.stage.value, context={"request_id": self.request_id}
            )
            return self._fail(outcome, error)

        outcome.stage = PipelineStage.RESPONDING
        with StageSpan(self.logger, "responding", status=200):
            return FilterResponse(
                status=200,
                body=document,
                content_type=self.serializer.media_type(filtered),
                headers=filter_response_headers(fetched.headers),
                outcome=outcome,
            )

    def _parse(self, body: bytes, content_type: Optional[str], outcome: PipelineOutcome) -> Channel:
        channel = self.parser.parse(
            body,
            content_type=content_type,
            allow_empty=self.settings.feed.allow_empty_feeds,
        )
        if not channel.items:
            self.logger.info("Origin feed contains no items")
            outcome.empty_feed = True
        return channel

    def _fail(self, outcome: PipelineOutcome, error: RSSFilterError) -> FilterResponse:
        outcome.failed_stage = outcome.stage
        outcome.error = error
        outcome.stage = PipelineStage.ERRORED

        extra = {"failed_stage": outcome.failed_stage.value, **error.to_dict()}
        if is_client_error(error):
            self.logger.info(f"Rejected request: {error}", extra=extra)
        elif is_upstream_error(error):
            self.logger.warning(f"Upstream feed unusable: {error}", extra=extra)
        else:
            self.logger.error(f"Failed to filter feed: {error}", extra=extra, exc_info=error)

        with StageSpan(self.logger, "responding", failed_stage=outcome.failed_stage.value):
            return response_for_error(error, outcome)
