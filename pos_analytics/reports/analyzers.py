"""
Composite Analyzers

- ProfitMarginAnalyzer: overall totals with category and product breakdowns
- TopPerformersRanker: ranked products, categories and customers
- ComparativeAnalyzer: the same totals over two periods, with growth

All three are stateless: every call re-reads the store through the data
source and composes the dimensional aggregators.
"""

from datetime import datetime
from typing import List, Tuple

import structlog

from pos_analytics.reports.aggregators import SalesAggregator
from pos_analytics.reports.metrics import growth_percent, rounded_average, to_int
from pos_analytics.reports.queries import (
    AggregateSpec,
    Dimension,
    Measure,
    ReportFilters,
    compile_aggregate,
    compile_customer_spend,
)
from pos_analytics.reports.schemas import (
    UNCATEGORIZED,
    CategoryProfit,
    ComparativeReport,
    GrowthRates,
    OverallProfit,
    PeriodTotals,
    ProductProfit,
    ProfitMarginReport,
    RankedCategory,
    RankedCustomer,
    RankedProduct,
    TopPerformersReport,
)
from pos_analytics.reports.source import ReportDataSource

logger = structlog.get_logger(__name__)


class ProfitMarginAnalyzer:
    """
    Profitability report for a date range.

    Categories are ordered by profit rather than revenue. Products below
    ``low_margin_threshold`` (strictly) are listed worst first.
    """

    def __init__(
        self,
        aggregator: SalesAggregator,
        low_margin_threshold: float = 20.0,
        list_size: int = 10,
    ):
        self.aggregator = aggregator
        self.low_margin_threshold = low_margin_threshold
        self.list_size = list_size

    async def analyze(self, filters: ReportFilters) -> ProfitMarginReport:
        totals = await self.aggregator.overall(filters)
        categories = await self.aggregator.by_category(filters)
        products = await self.aggregator.by_product(filters)

        overall = OverallProfit(
            total_revenue_cents=totals.figures.revenue_cents,
            total_cost_cents=totals.figures.cost_cents,
            gross_profit_cents=totals.figures.profit_cents,
            profit_margin_percent=totals.figures.margin_percent,
        )

        by_category = [
            CategoryProfit(
                category_name=category.category_name,
                revenue_cents=category.total_revenue_cents,
                cost_cents=category.total_cost_cents,
                profit_cents=category.profit_cents,
                margin_percent=category.profit_margin_percent,
            )
            for category in sorted(categories, key=lambda c: c.profit_cents, reverse=True)
        ]

        product_profits = [
            ProductProfit(
                product_name=product.product_name,
                sku=product.sku,
                profit_cents=product.profit_cents,
                margin_percent=product.profit_margin_percent,
            )
            for product in products
        ]
        top_profitable = sorted(product_profits, key=lambda p: p.profit_cents, reverse=True)
        low_margin = sorted(
            (p for p in product_profits if p.margin_percent < self.low_margin_threshold),
            key=lambda p: p.margin_percent,
        )

        logger.info(
            "Profit margin analyzed",
            tenant_id=filters.tenant_id,
            revenue_cents=overall.total_revenue_cents,
            categories=len(by_category),
            low_margin_products=len(low_margin),
        )

        return ProfitMarginReport(
            overall=overall,
            by_category=by_category,
            top_profitable_products=top_profitable[:self.list_size],
            low_margin_products=low_margin[:self.list_size],
        )


class TopPerformersRanker:
    """Top-N products and categories by revenue, customers by spend."""

    def __init__(self, source: ReportDataSource):
        self.source = source

    async def rank(self, filters: ReportFilters, limit: int = 10) -> TopPerformersReport:
        return TopPerformersReport(
            products=await self._products(filters, limit),
            categories=await self._categories(filters, limit),
            customers=await self._customers(filters, limit),
        )

    async def _products(self, filters: ReportFilters, limit: int) -> List[RankedProduct]:
        spec = AggregateSpec(
            name="top_products",
            dimension=Dimension.PRODUCT,
            measures=(Measure.REVENUE, Measure.QUANTITY, Measure.ORDER_COUNT),
            order_by=Measure.REVENUE,
            limit=limit,
        )
        rows = await self.source.fetch_all(compile_aggregate(spec, filters), name=spec.name)
        return [
            RankedProduct(
                rank=rank,
                product_id=str(row["product_id"]),
                product_name=row["product_name"],
                sku=row["sku"],
                revenue_cents=to_int(row["revenue_cents"]),
                quantity_sold=to_int(row["quantity_sold"]),
                order_count=to_int(row["order_count"]),
            )
            for rank, row in enumerate(rows, start=1)
        ]

    async def _categories(self, filters: ReportFilters, limit: int) -> List[RankedCategory]:
        spec = AggregateSpec(
            name="top_categories",
            dimension=Dimension.CATEGORY,
            measures=(Measure.REVENUE, Measure.PRODUCT_COUNT, Measure.ORDER_COUNT),
            order_by=Measure.REVENUE,
            limit=limit,
        )
        rows = await self.source.fetch_all(compile_aggregate(spec, filters), name=spec.name)
        return [
            RankedCategory(
                rank=rank,
                category_name=row["category_name"] or UNCATEGORIZED,
                revenue_cents=to_int(row["revenue_cents"]),
                product_count=to_int(row["product_count"]),
                order_count=to_int(row["order_count"]),
            )
            for rank, row in enumerate(rows, start=1)
        ]

    async def _customers(self, filters: ReportFilters, limit: int) -> List[RankedCustomer]:
        rows = await self.source.fetch_all(compile_customer_spend(filters, limit), name="top_customers")
        ranked = []
        for rank, row in enumerate(rows, start=1):
            spent = to_int(row["total_spent_cents"])
            orders = to_int(row["order_count"])
            ranked.append(RankedCustomer(
                rank=rank,
                customer_id=str(row["customer_id"]),
                customer_name=row["customer_name"],
                total_spent_cents=spent,
                order_count=orders,
                avg_order_value_cents=rounded_average(spent, orders),
            ))
        return ranked


class ComparativeAnalyzer:
    """Period-over-period comparison of revenue, order count and profit."""

    def __init__(self, aggregator: SalesAggregator):
        self.aggregator = aggregator

    async def _period_totals(self, filters: ReportFilters, period: Tuple[datetime, datetime]) -> PeriodTotals:
        totals = await self.aggregator.overall(filters.for_period(*period))
        return PeriodTotals(
            revenue_cents=totals.figures.revenue_cents,
            orders=totals.order_count,
            profit_cents=totals.figures.profit_cents,
        )

    async def compare(
        self,
        filters: ReportFilters,
        period1: Tuple[datetime, datetime],
        period2: Tuple[datetime, datetime],
    ) -> ComparativeReport:
        first = await self._period_totals(filters, period1)
        second = await self._period_totals(filters, period2)

        growth = GrowthRates(
            revenue_percent=growth_percent(first.revenue_cents, second.revenue_cents),
            orders_percent=growth_percent(first.orders, second.orders),
            profit_percent=growth_percent(first.profit_cents, second.profit_cents),
        )
        logger.info(
            "Periods compared",
            tenant_id=filters.tenant_id,
            revenue_growth=growth.revenue_percent,
            orders_growth=growth.orders_percent,
        )
        return ComparativeReport(period1=first, period2=second, growth=growth)
