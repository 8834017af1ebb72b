"""
Time bucketing for sales timelines.

Bucket keys sort lexicographically in chronological order. Weeks follow
ISO-8601 (weeks start on Monday, week 1 contains the year's first Thursday),
so the key uses the ISO year: 2024-12-30 falls in ``2025-W01``.
"""

from datetime import date, datetime
from enum import Enum
from typing import Union


class Granularity(str, Enum):
    """Timeline bucket size"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def bucket_key(moment: Union[date, datetime], granularity: Granularity) -> str:
    """Return the period label ``moment`` falls into."""
    granularity = Granularity(granularity)

    if granularity == Granularity.DAY:
        return moment.strftime("%Y-%m-%d")
    if granularity == Granularity.WEEK:
        iso_year, iso_week, _ = moment.isocalendar()
        return f"{iso_year:04d}-W{iso_week:02d}"
    if granularity == Granularity.MONTH:
        return moment.strftime("%Y-%m")
    return moment.strftime("%Y")
