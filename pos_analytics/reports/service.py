"""
Report Service

Public entry points of the analytics engine. Each method validates its
parameters before touching the store, builds the row filters and delegates
to the aggregators and analyzers. Data-access errors propagate unchanged.
"""

from typing import List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from pos_analytics.config import ReportSettings, get_settings
from pos_analytics.reports.aggregators import SalesAggregator
from pos_analytics.reports.analyzers import (
    ComparativeAnalyzer,
    ProfitMarginAnalyzer,
    TopPerformersRanker,
)
from pos_analytics.reports.queries import ReportFilters
from pos_analytics.reports.schemas import (
    CategorySales,
    ComparativeReport,
    ProductSales,
    ProfitMarginReport,
    TimeSales,
    TopPerformersReport,
)
from pos_analytics.reports.source import ReportDataSource
from pos_analytics.reports.validation import (
    check_limit,
    parse_granularity,
    parse_range,
    require,
)

logger = structlog.get_logger(__name__)


class ReportService:
    """
    Sales and profitability reports for one tenant at a time.

    Example:
        service = ReportService.from_session(session)
        rows = await service.sales_by_product("store-1", start_date="2024-01-01")
    """

    def __init__(self, source: ReportDataSource, settings: Optional[ReportSettings] = None):
        self.settings = settings or get_settings().reports
        self.source = source
        self.aggregator = SalesAggregator(source)
        self.profit_analyzer = ProfitMarginAnalyzer(
            self.aggregator,
            low_margin_threshold=self.settings.low_margin_threshold_percent,
            list_size=self.settings.profit_list_size,
        )
        self.ranker = TopPerformersRanker(source)
        self.comparative = ComparativeAnalyzer(self.aggregator)

    @classmethod
    def from_session(cls, session: AsyncSession, settings: Optional[ReportSettings] = None) -> "ReportService":
        settings = settings or get_settings().reports
        return cls(ReportDataSource(session, timeout_seconds=settings.query_timeout_seconds), settings)

    def _filters(
        self,
        tenant_id: Optional[str],
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> ReportFilters:
        start, end = parse_range(start_date, end_date)
        return ReportFilters(
            tenant_id=tenant_id or self.settings.default_tenant,
            start=start,
            end=end,
            category_id=category_id or None,
        )

    async def sales_by_product(
        self,
        tenant_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> List[ProductSales]:
        filters = self._filters(tenant_id, start_date, end_date, category_id)
        logger.info("Sales by product requested", tenant_id=filters.tenant_id, category_id=category_id)
        return await self.aggregator.by_product(filters)

    async def sales_by_category(
        self,
        tenant_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[CategorySales]:
        filters = self._filters(tenant_id, start_date, end_date)
        logger.info("Sales by category requested", tenant_id=filters.tenant_id)
        return await self.aggregator.by_category(filters)

    async def sales_by_time(
        self,
        tenant_id: Optional[str] = None,
        group_by: Optional[str] = "day",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[TimeSales]:
        granularity = parse_granularity(group_by)
        filters = self._filters(tenant_id, start_date, end_date)
        logger.info("Sales timeline requested", tenant_id=filters.tenant_id, group_by=granularity.value)
        return await self.aggregator.by_time(filters, granularity)

    async def profit_margin(
        self,
        tenant_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> ProfitMarginReport:
        filters = self._filters(tenant_id, start_date, end_date)
        logger.info("Profit margin analysis requested", tenant_id=filters.tenant_id)
        return await self.profit_analyzer.analyze(filters)

    async def top_performers(
        self,
        tenant_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> TopPerformersReport:
        limit = check_limit(limit, self.settings.default_top_limit, self.settings.max_top_limit)
        filters = self._filters(tenant_id, start_date, end_date)
        logger.info("Top performers requested", tenant_id=filters.tenant_id, limit=limit)
        return await self.ranker.rank(filters, limit)

    async def comparative_analysis(
        self,
        tenant_id: Optional[str] = None,
        period1_start: Optional[str] = None,
        period1_end: Optional[str] = None,
        period2_start: Optional[str] = None,
        period2_end: Optional[str] = None,
    ) -> ComparativeReport:
        require({
            "period1_start": period1_start,
            "period1_end": period1_end,
            "period2_start": period2_start,
            "period2_end": period2_end,
        })
        period1 = parse_range(period1_start, period1_end, "period1_start", "period1_end")
        period2 = parse_range(period2_start, period2_end, "period2_start", "period2_end")

        filters = ReportFilters(tenant_id=tenant_id or self.settings.default_tenant)
        logger.info("Comparative analysis requested", tenant_id=filters.tenant_id)
        return await self.comparative.compare(filters, period1, period2)
