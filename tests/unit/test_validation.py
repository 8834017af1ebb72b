"""
Unit Tests - Report Parameter Validation
"""
from datetime import datetime

import pytest

from pos_analytics.reports.exceptions import ReportValidationError
from pos_analytics.reports.periods import Granularity
from pos_analytics.reports.validation import (
    check_limit,
    parse_bound,
    parse_granularity,
    parse_range,
    require,
)


class TestParseBound:
    """Tests for date bound parsing"""

    def test_missing_values_pass_through(self):
        assert parse_bound(None, "start_date") is None
        assert parse_bound("  ", "start_date") is None

    def test_date_start_is_midnight(self):
        assert parse_bound("2024-03-10", "start_date") == datetime(2024, 3, 10)

    def test_date_end_covers_whole_day(self):
        bound = parse_bound("2024-03-10", "end_date", end=True)

        assert bound.date() == datetime(2024, 3, 10).date()
        assert bound > datetime(2024, 3, 10, 23, 59, 59)

    def test_datetime_is_kept(self):
        assert parse_bound("2024-03-10T08:15:00", "start_date") == datetime(2024, 3, 10, 8, 15)

    def test_aware_datetime_becomes_naive_utc(self):
        bound = parse_bound("2024-03-10T10:00:00+02:00", "start_date")

        assert bound == datetime(2024, 3, 10, 8, 0)
        assert bound.tzinfo is None

    def test_invalid_value_names_field(self):
        with pytest.raises(ReportValidationError) as exc_info:
            parse_bound("10/03/2024", "start_date")

        assert exc_info.value.fields == ["start_date"]
        assert "start_date" in exc_info.value.message


class TestParseRange:
    """Tests for date ranges"""

    def test_open_range(self):
        assert parse_range(None, None) == (None, None)

    def test_single_day_range(self):
        start, end = parse_range("2024-03-10", "2024-03-10")

        assert start < end

    def test_inverted_range_rejected(self):
        with pytest.raises(ReportValidationError) as exc_info:
            parse_range("2024-03-11", "2024-03-10", "period1_start", "period1_end")

        assert exc_info.value.fields == ["period1_start", "period1_end"]


class TestRequire:
    """Tests for required parameters"""

    def test_all_present(self):
        require({"period1_start": "2024-01-01", "period1_end": "2024-01-31"})

    def test_names_every_missing_parameter(self):
        with pytest.raises(ReportValidationError) as exc_info:
            require({
                "period1_start": "2024-01-01",
                "period1_end": None,
                "period2_start": "",
                "period2_end": None,
            })

        error = exc_info.value
        assert error.fields == ["period1_end", "period2_start", "period2_end"]
        assert error.message == "Missing required parameter(s): period1_end, period2_start, period2_end"


class TestGranularityAndLimit:
    """Tests for group_by and limit"""

    def test_default_granularity(self):
        assert parse_granularity(None) == Granularity.DAY

    def test_granularity_is_case_insensitive(self):
        assert parse_granularity("WEEK") == Granularity.WEEK

    def test_invalid_granularity(self):
        with pytest.raises(ReportValidationError) as exc_info:
            parse_granularity("quarter")

        assert "day, week, month, year" in exc_info.value.message

    def test_default_limit(self):
        assert check_limit(None, default=10, maximum=100) == 10

    @pytest.mark.parametrize("limit", [1, 25, 100])
    def test_limit_within_bounds(self, limit):
        assert check_limit(limit, default=10, maximum=100) == limit

    @pytest.mark.parametrize("limit", [0, -3, 101])
    def test_limit_out_of_bounds(self, limit):
        with pytest.raises(ReportValidationError):
            check_limit(limit, default=10, maximum=100)
