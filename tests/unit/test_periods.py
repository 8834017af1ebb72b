"""
Unit Tests - Timeline Buckets
"""
from datetime import date, datetime

import pytest

from pos_analytics.reports.periods import Granularity, bucket_key


class TestBucketKey:
    """Tests for bucket_key"""

    @pytest.mark.parametrize("granularity, expected", [
        (Granularity.DAY, "2024-03-05"),
        (Granularity.WEEK, "2024-W10"),
        (Granularity.MONTH, "2024-03"),
        (Granularity.YEAR, "2024"),
    ])
    def test_labels(self, granularity, expected):
        assert bucket_key(datetime(2024, 3, 5, 14, 30), granularity) == expected

    def test_accepts_plain_value(self):
        assert bucket_key(date(2024, 3, 5), "month") == "2024-03"

    def test_iso_week_belongs_to_next_year(self):
        """Test the Monday of the first ISO week of 2025 is labelled 2025"""
        assert bucket_key(datetime(2024, 12, 30), Granularity.WEEK) == "2025-W01"
        assert bucket_key(datetime(2024, 12, 29), Granularity.WEEK) == "2024-W52"

    def test_iso_week_belongs_to_previous_year(self):
        """Test early January can fall in the last week of the previous ISO year"""
        assert bucket_key(datetime(2021, 1, 3), Granularity.WEEK) == "2020-W53"

    def test_week_starts_on_monday(self):
        sunday = bucket_key(datetime(2024, 3, 10), Granularity.WEEK)
        monday = bucket_key(datetime(2024, 3, 11), Granularity.WEEK)

        assert sunday == "2024-W10"
        assert monday == "2024-W11"

    def test_labels_sort_chronologically(self):
        moments = [datetime(2023, 12, 31), datetime(2024, 1, 8), datetime(2024, 11, 4)]

        for granularity in Granularity:
            labels = [bucket_key(m, granularity) for m in moments]
            assert labels == sorted(labels)
