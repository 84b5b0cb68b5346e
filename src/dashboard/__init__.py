"""
Dashboard Module

Filter state, API client and view models of the analytics dashboard.
"""
from .client import AnalyticsClient, DashboardFetchError
from .controller import DashboardController
from .state import DashboardState, FilterSet, Tab

__all__ = [
    "AnalyticsClient",
    "DashboardFetchError",
    "DashboardController",
    "DashboardState",
    "FilterSet",
    "Tab",
]
