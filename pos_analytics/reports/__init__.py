"""
Sales & Profitability Analytics Engine
"""
from .exceptions import ReportError, ReportValidationError
from .periods import Granularity
from .queries import ReportFilters
from .service import ReportService
from .source import ReportDataSource

__all__ = [
    "ReportError",
    "ReportValidationError",
    "Granularity",
    "ReportFilters",
    "ReportService",
    "ReportDataSource",
]
