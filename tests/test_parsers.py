#!/usr/bin/env python3
"""
Parser tests
Tests HTTP-date parsing in all three formats and Cache-Control / Pragma directive parsing
"""

import pytest

from parsers import format_http_date, parse_cache_control, parse_http_date, pragma_no_cache

# Sun, 06 Nov 1994 08:49:37 GMT
REFERENCE_TIMESTAMP = 784111777.0


class TestHttpDateParsing:
    """Test HTTP-date parsing"""

    def test_rfc1123_date(self):
        assert parse_http_date("Sun, 06 Nov 1994 08:49:37 GMT") == REFERENCE_TIMESTAMP

    def test_asctime_date(self):
        assert parse_http_date("Sun Nov  6 08:49:37 1994") == REFERENCE_TIMESTAMP

    def test_asctime_date_single_space(self):
        assert parse_http_date("Sun Nov 6 08:49:37 1994") == REFERENCE_TIMESTAMP

    def test_rfc850_date(self):
        assert parse_http_date("Sunday, 06-Nov-94 08:49:37 GMT") == REFERENCE_TIMESTAMP

    def test_rfc850_two_digit_year_after_2000(self):
        assert parse_http_date("Thursday, 01-Jan-15 00:00:00 GMT") == 1420070400.0

    def test_month_names_are_case_insensitive(self):
        assert parse_http_date("sun, 06 NOV 1994 08:49:37 gmt") == REFERENCE_TIMESTAMP

    def test_surrounding_whitespace_is_ignored(self):
        assert parse_http_date("  Sun, 06 Nov 1994 08:49:37 GMT ") == REFERENCE_TIMESTAMP

    @pytest.mark.parametrize(
        "value",
        [
            None,
            "",
            "0",
            "-1",
            "tomorrow",
            "2024-01-01T00:00:00Z",
            "Sun, 06 Novembre 1994 08:49:37 GMT",
            "Sun, 31 Feb 1994 08:49:37 GMT",
            "Sun, 06 Nov 1994 25:49:37 GMT",
        ],
    )
    def test_unparseable_values_are_absent(self, value):
        assert parse_http_date(value) is None

    def test_format_http_date(self):
        assert format_http_date(REFERENCE_TIMESTAMP) == "Sun, 06 Nov 1994 08:49:37 GMT"

    def test_formatted_date_parses_back(self):
        timestamp = 1_700_000_000.0
        assert parse_http_date(format_http_date(timestamp)) == timestamp


class TestCacheControlParsing:
    """Test Cache-Control directive parsing"""

    def test_max_age(self):
        cache_control = parse_cache_control("public, max-age=3600")
        assert cache_control.max_age == 3600
        assert not cache_control.no_store

    def test_no_store(self):
        cache_control = parse_cache_control("no-store")
        assert cache_control.no_store
        assert cache_control.max_age is None

    def test_directive_names_are_case_insensitive(self):
        cache_control = parse_cache_control("No-Store, Max-Age=5")
        assert cache_control.no_store
        assert cache_control.max_age == 5

    def test_quoted_and_spaced_values(self):
        assert parse_cache_control('max-age="60"').max_age == 60
        assert parse_cache_control("max-age = 60").max_age == 60

    def test_negative_max_age(self):
        assert parse_cache_control("max-age=-10").max_age == -10

    def test_invalid_max_age_is_ignored(self):
        assert parse_cache_control("max-age=soon").max_age is None
        assert parse_cache_control("max-age").max_age is None

    def test_s_maxage_is_not_max_age(self):
        assert parse_cache_control("s-maxage=10").max_age is None

    def test_first_occurrence_wins(self):
        assert parse_cache_control("max-age=10, max-age=20").max_age == 10

    def test_empty_header(self):
        assert parse_cache_control(None).directives == {}
        assert parse_cache_control("").directives == {}

    def test_no_cache(self):
        assert parse_cache_control("no-cache, private").no_cache


class TestPragma:
    """Test Pragma header handling"""

    def test_no_cache(self):
        assert pragma_no_cache("no-cache")
        assert pragma_no_cache("No-Cache")

    def test_other_values(self):
        assert not pragma_no_cache(None)
        assert not pragma_no_cache("")
        assert not pragma_no_cache("public")
