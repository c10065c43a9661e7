"""
Unit tests for filter specifications and request building.

Covers:
- Mapping between fields and request parameter names
- Pattern compilation and invalid pattern reporting
- URL validation ordering and the no-filters rule
"""

import re

import pytest

from rssfilter.filtering.filter_spec import (
    FeedRequest,
    FilterField,
    FilterSpec,
    compile_filters,
)
from rssfilter.utils.exceptions import (
    ErrorCode,
    InvalidPatternError,
    InvalidURLError,
    NoFiltersError,
    RequestError,
)


class TestFilterField:
    """Test field/parameter mapping."""

    @pytest.mark.parametrize(
        "field,parameter",
        [
            (FilterField.TITLE, "title_filter_regex"),
            (FilterField.LINK, "link_filter_regex"),
            (FilterField.GUID, "guid_filter_regex"),
        ],
    )
    def test_parameter_names(self, field, parameter):
        assert field.parameter == parameter
        assert FilterField.from_parameter(parameter) is field

    def test_unknown_parameter(self):
        assert FilterField.from_parameter("description_filter_regex") is None
        assert FilterField.from_parameter("url") is None


class TestFilterSpec:
    """Test matching semantics of a single spec."""

    def test_unanchored_search(self):
        spec = FilterSpec(FilterField.TITLE, re.compile("Official"))

        assert spec.matches("The Official blog post")
        assert not spec.matches("Guest post")

    def test_case_sensitive_by_default(self):
        spec = FilterSpec(FilterField.TITLE, re.compile("official"))

        assert not spec.matches("Official blog post")

    def test_inline_flags_respected(self):
        spec = FilterSpec(FilterField.TITLE, re.compile("(?i)official"))

        assert spec.matches("OFFICIAL")

    def test_absent_value_never_matches(self):
        # Even a pattern that matches the empty string
        spec = FilterSpec(FilterField.LINK, re.compile(".*"))

        assert not spec.matches(None)
        assert spec.matches("")

    def test_str_names_parameter(self):
        spec = FilterSpec(FilterField.GUID, re.compile("promo"))

        assert str(spec) == "guid_filter_regex='promo'"


class TestCompileFilters:
    """Test pattern compilation."""

    def test_preserves_order(self):
        specs = compile_filters(
            [(FilterField.LINK, "b"), (FilterField.TITLE, "a"), (FilterField.LINK, "c")]
        )

        assert [(s.field, s.pattern.pattern) for s in specs] == [
            (FilterField.LINK, "b"),
            (FilterField.TITLE, "a"),
            (FilterField.LINK, "c"),
        ]

    def test_accepts_field_values(self):
        specs = compile_filters([("guid", "x")])

        assert specs[0].field is FilterField.GUID

    def test_invalid_pattern_names_parameter_and_pattern(self):
        with pytest.raises(InvalidPatternError) as exc_info:
            compile_filters([(FilterField.TITLE, "ok"), (FilterField.LINK, "[")])

        error = exc_info.value
        assert error.parameter == "link_filter_regex"
        assert error.pattern == "["
        assert error.error_code == ErrorCode.FILTER_INVALID_PATTERN
        assert "link_filter_regex" in error.user_message
        assert "'['" in error.user_message
        assert isinstance(error, RequestError)

    def test_no_filters(self):
        with pytest.raises(NoFiltersError) as exc_info:
            compile_filters([])

        assert exc_info.value.error_code == ErrorCode.FILTER_NONE_PROVIDED
        assert "title_filter_regex" in exc_info.value.user_message


class TestFeedRequest:
    """Test request building."""

    def test_build(self):
        request = FeedRequest.build(
            "https://example.com/feed.xml",
            [(FilterField.TITLE, "a"), (FilterField.GUID, "b")],
        )

        assert request.url == "https://example.com/feed.xml"
        assert len(request.specs) == 2
        assert [s.pattern.pattern for s in request.specs_for(FilterField.GUID)] == ["b"]
        assert request.specs_for(FilterField.LINK) == []

    def test_url_is_not_normalized(self):
        url = "HTTPS://Example.COM:443/a/../feed.xml?x=1&y=%20"

        request = FeedRequest.build(url, [(FilterField.TITLE, "a")])

        assert request.url == url

    def test_missing_url(self):
        with pytest.raises(InvalidURLError) as exc_info:
            FeedRequest.build(None, [(FilterField.TITLE, "a")])

        assert exc_info.value.parameter == "url"
        assert exc_info.value.error_code == ErrorCode.REQUEST_MISSING_URL
        assert "url" in exc_info.value.user_message

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "example.com/feed.xml",
            "ftp://example.com/feed.xml",
            "file:///etc/passwd",
            "https:///feed.xml",
            "https://example.com/has space",
            "http://example.com:notaport/",
        ],
    )
    def test_invalid_urls(self, url):
        with pytest.raises(InvalidURLError) as exc_info:
            FeedRequest.build(url, [(FilterField.TITLE, "a")])

        assert exc_info.value.parameter == "url"

    def test_url_checked_before_patterns(self):
        with pytest.raises(InvalidURLError):
            FeedRequest.build(None, [(FilterField.LINK, "[")])

    def test_private_hosts_blocked_when_enabled(self):
        specs = [(FilterField.TITLE, "a")]

        assert FeedRequest.build("http://127.0.0.1/feed", specs).url == "http://127.0.0.1/feed"
        with pytest.raises(InvalidURLError):
            FeedRequest.build("http://127.0.0.1/feed", specs, block_private_hosts=True)
        with pytest.raises(InvalidURLError):
            FeedRequest.build("http://localhost:8080/feed", specs, block_private_hosts=True)

    def test_describe_filters(self):
        request = FeedRequest.build(
            "https://example.com/feed.xml",
            [(FilterField.TITLE, "a"), (FilterField.TITLE, "b"), (FilterField.LINK, "c")],
        )

        assert request.describe_filters() == "title: [a, b], link: [c], guid: []"
