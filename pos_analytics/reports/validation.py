"""
Report parameter parsing and validation.

Dates arrive as ISO-8601 strings and are inclusive bounds on order creation
time. A date without a time covers the whole day when used as an end bound.
Timezone-aware values are converted to naive UTC, matching how order
timestamps are stored.
"""

from datetime import date, datetime, time, timezone
from typing import Dict, Optional, Tuple

from pos_analytics.reports.exceptions import ReportValidationError
from pos_analytics.reports.periods import Granularity


def parse_bound(value: Optional[str], field: str, end: bool = False) -> Optional[datetime]:
    """Parse an ISO-8601 date or date-time, ``None`` passes through."""
    if value is None:
        return None
    raw = value.strip()
    if not raw:
        return None

    try:
        if len(raw) == 10:
            day = date.fromisoformat(raw)
            return datetime.combine(day, time.max if end else time.min)
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise ReportValidationError(
            f"Invalid {field}: expected an ISO-8601 date or date-time, got {value!r}",
            fields=[field],
        )

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_range(
    start_value: Optional[str],
    end_value: Optional[str],
    start_field: str = "start_date",
    end_field: str = "end_date",
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Parse an optional date range and check it is not inverted."""
    start = parse_bound(start_value, start_field)
    end = parse_bound(end_value, end_field, end=True)
    if start is not None and end is not None and start > end:
        raise ReportValidationError(
            f"{start_field} must not be after {end_field}",
            fields=[start_field, end_field],
        )
    return start, end


def require(params: Dict[str, Optional[str]]) -> None:
    """Fail with every missing parameter named at once."""
    missing = [name for name, value in params.items() if value is None or not str(value).strip()]
    if missing:
        raise ReportValidationError(
            f"Missing required parameter(s): {', '.join(missing)}",
            fields=missing,
        )


def parse_granularity(value: Optional[str]) -> Granularity:
    if value is None:
        return Granularity.DAY
    try:
        return Granularity(value.lower())
    except ValueError:
        allowed = ", ".join(g.value for g in Granularity)
        raise ReportValidationError(
            f"Invalid group_by {value!r}: must be one of {allowed}",
            fields=["group_by"],
        )


def check_limit(limit: Optional[int], default: int, maximum: int) -> int:
    if limit is None:
        return default
    if limit < 1 or limit > maximum:
        raise ReportValidationError(
            f"limit must be between 1 and {maximum}",
            fields=["limit"],
        )
    return limit
