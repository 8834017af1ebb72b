"""
Unit Tests - Metric Calculators
"""
from decimal import Decimal

import pytest

from pos_analytics.reports.metrics import (
    ProfitFigures,
    growth_percent,
    margin_percent,
    percentage,
    rounded_average,
    to_int,
)


class TestPercentage:
    """Tests for percentage rounding"""

    def test_two_decimal_rounding(self):
        """Test ratio is rounded to two decimals"""
        assert percentage(1, 3) == 33.33
        assert percentage(2, 3) == 66.67

    def test_half_rounds_away_from_zero(self):
        """Test x.xx5 rounds up like SQL ROUND"""
        # 1/8 = 12.5%, 1/800 = 0.125%
        assert percentage(1, 800) == 0.13
        assert percentage(-1, 800) == -0.13

    @pytest.mark.parametrize("denominator", [0, -100])
    def test_non_positive_denominator_is_zero(self, denominator):
        """Test zero or negative base gives 0 instead of dividing"""
        assert percentage(500, denominator) == 0.0


class TestMargin:
    """Tests for margin and growth"""

    def test_margin(self):
        assert margin_percent(60000, 150000) == 40.0

    def test_margin_of_zero_revenue(self):
        assert margin_percent(0, 0) == 0.0

    def test_margin_can_be_negative(self):
        """Test selling below cost yields a negative margin"""
        assert margin_percent(-2500, 10000) == -25.0

    def test_growth(self):
        assert growth_percent(100000, 120000) == 20.0
        assert growth_percent(120000, 90000) == -25.0

    def test_growth_from_zero_base(self):
        assert growth_percent(0, 5000) == 0.0


class TestAverages:
    """Tests for integer averages"""

    def test_rounds_half_up(self):
        assert rounded_average(17000, 3) == 5667
        assert rounded_average(15, 2) == 8

    def test_empty_set(self):
        assert rounded_average(1000, 0) == 0


class TestProfitFigures:
    """Tests for ProfitFigures"""

    def test_derived_profit_and_margin(self):
        figures = ProfitFigures(revenue_cents=150000, cost_cents=90000)

        assert figures.profit_cents == 60000
        assert figures.margin_percent == 40.0

    def test_from_row_coerces_driver_values(self):
        """Test None and Decimal values from the driver become ints"""
        row = {"revenue_cents": Decimal("2500"), "cost_cents": None}

        figures = ProfitFigures.from_row(row)

        assert figures.revenue_cents == 2500
        assert figures.cost_cents == 0
        assert figures.profit_cents == 2500

    def test_from_empty_row(self):
        figures = ProfitFigures.from_row({})

        assert figures == ProfitFigures(0, 0)
        assert figures.margin_percent == 0.0

    def test_to_int(self):
        assert to_int(None) == 0
        assert to_int(Decimal("42")) == 42
        assert to_int(7) == 7
