from __future__ import annotations

from typing import Optional


class SalesDashboardError(Exception):
    """Base class for errors raised by the dashboard core."""


class StoreNotReadyError(SalesDashboardError):
    """Raised when the record store is queried before loading completed."""

    def __init__(self, message: str = "Sales data is not loaded yet") -> None:
        super().__init__(message)
        self.message = message


class StoreAlreadyLoadedError(SalesDashboardError):
    pass


class SourceUnavailableError(SalesDashboardError):
    """Raised when the sales file cannot be found or opened."""


class QueryValidationError(SalesDashboardError):
    """Raised when a query request is rejected before any stage runs."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field
        self.message = message
