"""
Dimensional Aggregators

Sales grouped by product, by category and by time bucket, plus the
ungrouped overall aggregate the profit and comparative reports build on.
Each aggregator fetches grouped rows through the data source and derives
profit and margin with the shared metric calculators.
"""

from dataclasses import dataclass
from typing import List

import polars as pl
import structlog

from pos_analytics.reports.metrics import ProfitFigures, rounded_average, to_int
from pos_analytics.reports.periods import Granularity, bucket_key
from pos_analytics.reports.queries import (
    AggregateSpec,
    Dimension,
    Measure,
    ReportFilters,
    compile_aggregate,
)
from pos_analytics.reports.schemas import (
    UNCATEGORIZED,
    CategorySales,
    ProductSales,
    TimeSales,
)
from pos_analytics.reports.source import ReportDataSource

logger = structlog.get_logger(__name__)

SALES_MEASURES = (
    Measure.QUANTITY,
    Measure.REVENUE,
    Measure.COST,
    Measure.ORDER_COUNT,
)

_TIMELINE_SCHEMA = {
    "period": pl.Utf8,
    "order_id": pl.Utf8,
    "customer_id": pl.Utf8,
    "revenue_cents": pl.Int64,
    "cost_cents": pl.Int64,
}


@dataclass(frozen=True)
class OverallTotals:
    """Ungrouped totals over every counted order line"""
    figures: ProfitFigures
    order_count: int


class SalesAggregator:
    """
    Groups counted order lines by a dimension.

    Example:
        aggregator = SalesAggregator(ReportDataSource(session))
        rows = await aggregator.by_product(ReportFilters(tenant_id="default"))
    """

    def __init__(self, source: ReportDataSource):
        self.source = source

    async def by_product(self, filters: ReportFilters) -> List[ProductSales]:
        """Per-product sales, highest revenue first."""
        spec = AggregateSpec(
            name="sales_by_product",
            dimension=Dimension.PRODUCT,
            measures=SALES_MEASURES,
            order_by=Measure.REVENUE,
        )
        rows = await self.source.fetch_all(compile_aggregate(spec, filters), name=spec.name)

        results = []
        for row in rows:
            figures = ProfitFigures.from_row(row)
            results.append(ProductSales(
                product_id=str(row["product_id"]),
                product_name=row["product_name"],
                sku=row["sku"],
                category_name=row["category_name"],
                brand_name=row["brand_name"],
                quantity_sold=to_int(row["quantity_sold"]),
                total_revenue_cents=figures.revenue_cents,
                total_cost_cents=figures.cost_cents,
                profit_cents=figures.profit_cents,
                profit_margin_percent=figures.margin_percent,
                order_count=to_int(row["order_count"]),
            ))
        return results

    async def by_category(self, filters: ReportFilters) -> List[CategorySales]:
        """Per-category sales, highest revenue first."""
        spec = AggregateSpec(
            name="sales_by_category",
            dimension=Dimension.CATEGORY,
            measures=SALES_MEASURES + (Measure.PRODUCT_COUNT,),
            order_by=Measure.REVENUE,
        )
        rows = await self.source.fetch_all(compile_aggregate(spec, filters), name=spec.name)

        results = []
        for row in rows:
            figures = ProfitFigures.from_row(row)
            category_id = row["category_id"]
            results.append(CategorySales(
                category_id=str(category_id) if category_id is not None else None,
                category_name=row["category_name"] or UNCATEGORIZED,
                product_count=to_int(row["product_count"]),
                quantity_sold=to_int(row["quantity_sold"]),
                total_revenue_cents=figures.revenue_cents,
                total_cost_cents=figures.cost_cents,
                profit_cents=figures.profit_cents,
                profit_margin_percent=figures.margin_percent,
                order_count=to_int(row["order_count"]),
            ))
        return results

    async def by_time(self, filters: ReportFilters, granularity: Granularity) -> List[TimeSales]:
        """
        Sales per observed time bucket, oldest first.

        Orders are fetched with their line totals and bucketed here rather
        than in SQL, so the week numbering is ISO-8601 on every backend.
        Buckets without orders are not emitted.
        """
        spec = AggregateSpec(
            name="sales_by_time",
            dimension=Dimension.ORDER,
            measures=(Measure.REVENUE, Measure.COST),
        )
        rows = await self.source.fetch_all(compile_aggregate(spec, filters), name=spec.name)
        if not rows:
            return []

        frame = pl.DataFrame(
            {
                "period": [bucket_key(row["created_at"], granularity) for row in rows],
                "order_id": [str(row["order_id"]) for row in rows],
                "customer_id": [
                    str(row["customer_id"]) if row["customer_id"] is not None else None
                    for row in rows
                ],
                "revenue_cents": [to_int(row["revenue_cents"]) for row in rows],
                "cost_cents": [to_int(row["cost_cents"]) for row in rows],
            },
            schema=_TIMELINE_SCHEMA,
        )

        buckets = (
            frame.group_by("period")
            .agg(
                pl.col("order_id").n_unique().alias("order_count"),
                pl.col("revenue_cents").sum(),
                pl.col("cost_cents").sum(),
                pl.col("customer_id").drop_nulls().n_unique().alias("customer_count"),
            )
            .sort("period")
        )

        results = []
        for bucket in buckets.iter_rows(named=True):
            figures = ProfitFigures(
                revenue_cents=int(bucket["revenue_cents"]),
                cost_cents=int(bucket["cost_cents"]),
            )
            order_count = int(bucket["order_count"])
            results.append(TimeSales(
                period=bucket["period"],
                order_count=order_count,
                total_revenue_cents=figures.revenue_cents,
                total_cost_cents=figures.cost_cents,
                profit_cents=figures.profit_cents,
                profit_margin_percent=figures.margin_percent,
                average_order_value_cents=rounded_average(figures.revenue_cents, order_count),
                customer_count=int(bucket["customer_count"]),
            ))

        logger.debug("Timeline bucketed", granularity=Granularity(granularity).value, buckets=len(results))
        return results

    async def overall(self, filters: ReportFilters) -> OverallTotals:
        """Totals across every counted line; zeros when nothing matches."""
        spec = AggregateSpec(
            name="overall_totals",
            dimension=Dimension.OVERALL,
            measures=(Measure.REVENUE, Measure.COST, Measure.ORDER_COUNT),
        )
        row = await self.source.fetch_one(compile_aggregate(spec, filters), name=spec.name)
        return OverallTotals(
            figures=ProfitFigures.from_row(row),
            order_count=to_int(row.get("order_count")),
        )
