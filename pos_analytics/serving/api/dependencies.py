"""
Request-scoped dependencies for the report routes.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from pos_analytics.config import get_settings
from pos_analytics.database.connection import get_db_dependency
from pos_analytics.reports.service import ReportService


async def get_tenant_id(x_tenant_id: Optional[str] = Header(default=None)) -> str:
    """
    Tenant of the current request.

    Authentication resolves tenants upstream and forwards them in
    ``X-Tenant-ID``; single-store deployments omit the header.
    """
    return x_tenant_id or get_settings().reports.default_tenant


async def get_report_service(db: AsyncSession = Depends(get_db_dependency)) -> ReportService:
    return ReportService.from_session(db)
