"""
Report Data Source

Thin read-only adapter over an ``AsyncSession``. It runs compiled report
queries under a timeout and hands back plain row mappings. Errors from the
store are logged and re-raised untouched; nothing here turns a failure into
an empty result.
"""

import asyncio
import time
from typing import Any, Dict, List, Mapping

import structlog
from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger(__name__)


class ReportDataSource:
    """
    Executes report queries against the relational store.

    Example:
        source = ReportDataSource(session, timeout_seconds=10)
        rows = await source.fetch_all(query, name="sales_by_product")
    """

    def __init__(self, session: AsyncSession, timeout_seconds: float = 30.0):
        self.session = session
        self.timeout_seconds = timeout_seconds

    async def fetch_all(self, query: Select, name: str = "report") -> List[Dict[str, Any]]:
        """Run ``query`` and return every row as a dict."""
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(
                self.session.execute(query),
                timeout=self.timeout_seconds,
            )
            rows = [dict(row) for row in result.mappings().all()]
        except asyncio.TimeoutError:
            logger.error("Report query timed out", query=name, timeout_seconds=self.timeout_seconds)
            raise
        except Exception as e:
            logger.error("Report query failed", query=name, error=str(e), error_type=type(e).__name__)
            raise

        logger.debug(
            "Report query completed",
            query=name,
            rows=len(rows),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return rows

    async def fetch_one(self, query: Select, name: str = "report") -> Mapping[str, Any]:
        """Run a single-row aggregate; an empty result reads as an empty mapping."""
        rows = await self.fetch_all(query, name=name)
        return rows[0] if rows else {}
