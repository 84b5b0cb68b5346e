"""
Analytics Module

Filtered aggregate queries over the restaurant sales schema.
"""
from .errors import AnalyticsError, StorageQueryError
from .filters import ReportFilters, resolve_period

__all__ = [
    "AnalyticsError",
    "StorageQueryError",
    "ReportFilters",
    "resolve_period",
]
