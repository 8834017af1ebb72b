"""
Metric Calculators

Pure functions shared by every report so that profit, margin, growth and
averages round and handle zero denominators the same way everywhere.

Inputs are integer minor units (cents). Percentages are rounded to two
decimals half away from zero using exact decimal arithmetic.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Optional

_HUNDRED = Decimal(100)
_CENT = Decimal("0.01")


def to_int(value: Any) -> int:
    """Coerce a driver value (None, int, Decimal, float) to an int."""
    if value is None:
        return 0
    return int(value)


def percentage(numerator: int, denominator: int) -> float:
    """
    ``numerator / denominator * 100`` rounded to 2 decimals.

    Returns 0 when the denominator is not positive.
    """
    if denominator <= 0:
        return 0.0
    ratio = Decimal(numerator) * _HUNDRED / Decimal(denominator)
    return float(ratio.quantize(_CENT, rounding=ROUND_HALF_UP))


def margin_percent(profit: int, revenue: int) -> float:
    """Profit as a percentage of revenue; 0 when revenue is 0."""
    return percentage(profit, revenue)


def growth_percent(previous: int, current: int) -> float:
    """
    Period-over-period growth ``(current - previous) / previous * 100``.

    A base of zero (or a negative base, which has no meaningful growth
    direction) yields 0 rather than infinity.
    """
    return percentage(current - previous, previous)


def rounded_average(total: int, count: int) -> int:
    """Integer average rounded half away from zero; 0 for an empty set."""
    if count <= 0:
        return 0
    average = Decimal(total) / Decimal(count)
    return int(average.quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class ProfitFigures:
    """Revenue and cost of one aggregated row, with derived profit metrics"""
    revenue_cents: int
    cost_cents: int

    @property
    def profit_cents(self) -> int:
        return self.revenue_cents - self.cost_cents

    @property
    def margin_percent(self) -> float:
        return margin_percent(self.profit_cents, self.revenue_cents)

    @classmethod
    def from_row(
        cls,
        row: Mapping[str, Any],
        revenue_key: str = "revenue_cents",
        cost_key: Optional[str] = "cost_cents",
    ) -> "ProfitFigures":
        cost = to_int(row.get(cost_key)) if cost_key else 0
        return cls(revenue_cents=to_int(row.get(revenue_key)), cost_cents=cost)
