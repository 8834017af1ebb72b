"""
Report API Endpoints

Read-only sales and profitability reports. Every response uses the
``{"success": ..., "data": ..., "error": ...}`` envelope: parameter problems
answer 400 with the reason, any other failure answers 500 with a generic
message while the cause goes to the log.
"""

from typing import Awaitable, List, Optional, TypeVar

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pos_analytics.config import get_settings
from pos_analytics.reports.exceptions import ReportValidationError
from pos_analytics.reports.schemas import (
    ApiResponse,
    CategorySales,
    ComparativeReport,
    ErrorResponse,
    ProductSales,
    ProfitMarginReport,
    TimeSales,
    TopPerformersReport,
)
from pos_analytics.reports.service import ReportService
from pos_analytics.serving.api.dependencies import get_report_service, get_tenant_id

router = APIRouter()
logger = structlog.get_logger(__name__)

T = TypeVar("T")

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def error_response(status_code: int, error: str, detail: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def respond(report: str, pending: Awaitable[T]):
    """Await a report and wrap the outcome in the response envelope."""
    try:
        data = await pending
    except ReportValidationError as e:
        logger.info("Report request rejected", report=report, error=e.message, fields=e.fields)
        return error_response(400, e.message)
    except Exception as e:
        logger.error(
            "Report generation failed",
            report=report,
            error=str(e),
            error_type=type(e).__name__,
        )
        detail = str(e) if get_settings().debug else None
        return error_response(500, f"Failed to generate {report} report", detail)

    return {"success": True, "data": data}


@router.get("/sales/products", response_model=ApiResponse[List[ProductSales]], responses=ERROR_RESPONSES)
async def get_sales_by_product(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    category_id: Optional[str] = None,
    tenant_id: str = Depends(get_tenant_id),
    service: ReportService = Depends(get_report_service),
):
    """Sales, cost and profit per product, highest revenue first."""
    return await respond(
        "sales by product",
        service.sales_by_product(tenant_id, start_date, end_date, category_id),
    )


@router.get("/sales/categories", response_model=ApiResponse[List[CategorySales]], responses=ERROR_RESPONSES)
async def get_sales_by_category(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    tenant_id: str = Depends(get_tenant_id),
    service: ReportService = Depends(get_report_service),
):
    """Sales, cost and profit per category; uncategorized products pooled."""
    return await respond(
        "sales by category",
        service.sales_by_category(tenant_id, start_date, end_date),
    )


@router.get("/sales/timeline", response_model=ApiResponse[List[TimeSales]], responses=ERROR_RESPONSES)
async def get_sales_timeline(
    group_by: str = "day",
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    tenant_id: str = Depends(get_tenant_id),
    service: ReportService = Depends(get_report_service),
):
    """Sales per day, ISO week, month or year, oldest first."""
    return await respond(
        "sales timeline",
        service.sales_by_time(tenant_id, group_by, start_date, end_date),
    )


@router.get("/profit-margin", response_model=ApiResponse[ProfitMarginReport], responses=ERROR_RESPONSES)
async def get_profit_margin(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    tenant_id: str = Depends(get_tenant_id),
    service: ReportService = Depends(get_report_service),
):
    """Overall margin with category, top-profit and low-margin breakdowns."""
    return await respond(
        "profit margin",
        service.profit_margin(tenant_id, start_date, end_date),
    )


@router.get("/top-performers", response_model=ApiResponse[TopPerformersReport], responses=ERROR_RESPONSES)
async def get_top_performers(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: Optional[int] = None,
    tenant_id: str = Depends(get_tenant_id),
    service: ReportService = Depends(get_report_service),
):
    """Ranked products, categories and customers."""
    return await respond(
        "top performers",
        service.top_performers(tenant_id, start_date, end_date, limit),
    )


@router.get("/comparative", response_model=ApiResponse[ComparativeReport], responses=ERROR_RESPONSES)
async def get_comparative_analysis(
    period1_start: Optional[str] = None,
    period1_end: Optional[str] = None,
    period2_start: Optional[str] = None,
    period2_end: Optional[str] = None,
    tenant_id: str = Depends(get_tenant_id),
    service: ReportService = Depends(get_report_service),
):
    """Revenue, orders and profit of two periods with growth percentages."""
    return await respond(
        "comparative analysis",
        service.comparative_analysis(tenant_id, period1_start, period1_end, period2_start, period2_end),
    )
