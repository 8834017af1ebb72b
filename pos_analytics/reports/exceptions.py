"""
Report errors.

Only caller mistakes get their own type. Data-access failures keep their
original type (``SQLAlchemyError``, ``asyncio.TimeoutError``, driver errors)
all the way up to the HTTP layer.
"""

from typing import Sequence


class ReportError(Exception):
    """Base class for analytics engine errors"""


class ReportValidationError(ReportError):
    """Invalid report parameters, detected before any data access"""

    def __init__(self, message: str, fields: Sequence[str] = ()):
        super().__init__(message)
        self.message = message
        self.fields = list(fields)
