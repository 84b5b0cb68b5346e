"""
Dashboard Controller

Connects the dashboard state to the API client. Only the reports of the
active tab are fetched, concurrently, and stored together: if any of them
fails the previous payloads stay in place.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict

import structlog

from src.dashboard.client import AnalyticsClient, DashboardFetchError
from src.dashboard.state import DashboardState, Tab
from src.dashboard.views import TabView, render_tab

logger = structlog.get_logger(__name__)

TOP_CUSTOMERS_LIMIT = 20
INACTIVE_DAYS = 30


def _tab_requests(
    client: AnalyticsClient,
    state: DashboardState,
) -> Dict[str, Callable[[], Awaitable[Any]]]:
    """Report name to request factory, for the active tab."""
    filters = state.applied
    tab = state.active_tab

    if tab == Tab.OVERVIEW:
        return {
            "overview": lambda: client.fetch_overview(filters),
            "sales_by_date": lambda: client.fetch_sales_by_date(filters),
        }
    if tab == Tab.PRODUCTS:
        return {
            "top_products": lambda: client.fetch_top_products(filters, state.applied_product_limit),
        }
    if tab == Tab.CHANNELS:
        return {
            "sales_by_channel": lambda: client.fetch_sales_by_channel(filters),
        }
    if tab == Tab.TEMPORAL:
        return {
            "sales_by_hour": lambda: client.fetch_sales_by_hour(filters),
            "sales_by_weekday": lambda: client.fetch_sales_by_weekday(filters),
        }
    return {
        "top_customers": lambda: client.fetch_top_customers(filters, TOP_CUSTOMERS_LIMIT),
        "inactive_customers": lambda: client.fetch_inactive_customers(INACTIVE_DAYS),
    }


class DashboardController:
    """
    Drives report loading for a ``DashboardState``.

    State transitions that change what is displayed (apply, reset, tab switch,
    limit apply) refetch; draft edits go straight to ``state``.
    """

    def __init__(self, client: AnalyticsClient, state: DashboardState):
        self.client = client
        self.state = state

    async def load_reference_data(self) -> None:
        """Load stores and channels for the filter selectors."""
        try:
            stores, channels = await asyncio.gather(
                self.client.fetch_stores(),
                self.client.fetch_channels(),
            )
        except DashboardFetchError as e:
            logger.error("Error loading filters", path=e.path, error=str(e.cause))
            return

        self.state.stores = stores
        self.state.channels = channels

    async def refresh(self) -> bool:
        """
        Fetch every report of the active tab.

        Returns:
            True when all reports were fetched and stored
        """
        requests = _tab_requests(self.client, self.state)
        self.state.loading = True
        try:
            results = await asyncio.gather(*(request() for request in requests.values()))
        except DashboardFetchError as e:
            logger.error(
                "Error loading data",
                tab=self.state.active_tab.value,
                path=e.path,
                error=str(e.cause),
            )
            return False
        finally:
            self.state.loading = False

        self.state.data.update(zip(requests.keys(), results))
        logger.debug("Tab data loaded", tab=self.state.active_tab.value, reports=list(requests))
        return True

    async def start(self) -> None:
        await self.load_reference_data()
        await self.refresh()

    async def apply_filters(self) -> None:
        if self.state.apply_filters():
            await self.refresh()

    async def reset_filters(self) -> None:
        if self.state.reset_filters():
            await self.refresh()

    async def apply_product_limit(self) -> None:
        if self.state.apply_product_limit():
            await self.refresh()

    async def switch_tab(self, tab: Tab) -> None:
        if self.state.switch_tab(tab):
            await self.refresh()

    def render(self) -> TabView:
        return render_tab(self.state)
