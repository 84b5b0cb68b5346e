"""
Analytics API Client

Async HTTP client for the report endpoints. Responses are validated into the
same schemas the API serves.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from src.analytics.schemas import (
    ChannelInfo,
    ChannelPerformance,
    CustomerValue,
    DailySales,
    HourlySales,
    InactiveCustomer,
    Overview,
    ProductPerformance,
    StoreInfo,
    WeekdaySales,
)
from src.config import get_settings
from src.dashboard.state import FilterSet

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


class DashboardFetchError(Exception):
    """A report could not be fetched or decoded."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"GET {path} failed: {type(cause).__name__}: {cause}")
        self.path = path
        self.cause = cause


class AnalyticsClient:
    """
    Client for the analytics API.

    Use as an async context manager, or call ``close()`` when done.

    Example:
        async with AnalyticsClient() as client:
            overview = await client.fetch_overview(filters)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.dashboard.api_base_url,
            timeout=timeout or settings.dashboard.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "AnalyticsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        logger.debug("Fetching report", path=path, params=params)
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise DashboardFetchError(path, e) from e

    async def _get_one(self, model: Type[M], path: str, params: Optional[Dict[str, Any]] = None) -> M:
        payload = await self._get(path, params)
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise DashboardFetchError(path, e) from e

    async def _get_many(self, model: Type[M], path: str, params: Optional[Dict[str, Any]] = None) -> List[M]:
        payload = await self._get(path, params)
        try:
            return TypeAdapter(List[model]).validate_python(payload)
        except ValidationError as e:
            raise DashboardFetchError(path, e) from e

    async def fetch_overview(self, filters: FilterSet) -> Overview:
        return await self._get_one(Overview, "/api/overview", filters.to_query())

    async def fetch_sales_by_date(self, filters: FilterSet) -> List[DailySales]:
        return await self._get_many(DailySales, "/api/sales-by-date", filters.to_query())

    async def fetch_top_products(self, filters: FilterSet, limit: int = 10) -> List[ProductPerformance]:
        params = {**filters.to_query(), "limit": limit}
        return await self._get_many(ProductPerformance, "/api/top-products", params)

    async def fetch_sales_by_channel(self, filters: FilterSet) -> List[ChannelPerformance]:
        return await self._get_many(ChannelPerformance, "/api/sales-by-channel", filters.to_query())

    async def fetch_sales_by_hour(self, filters: FilterSet) -> List[HourlySales]:
        return await self._get_many(HourlySales, "/api/sales-by-hour", filters.to_query())

    async def fetch_sales_by_weekday(self, filters: FilterSet) -> List[WeekdaySales]:
        return await self._get_many(WeekdaySales, "/api/sales-by-weekday", filters.to_query())

    async def fetch_top_customers(self, filters: FilterSet, limit: int = 20) -> List[CustomerValue]:
        params = {**filters.to_query(), "limit": limit}
        return await self._get_many(CustomerValue, "/api/top-customers", params)

    async def fetch_inactive_customers(self, days: int = 30) -> List[InactiveCustomer]:
        return await self._get_many(InactiveCustomer, "/api/inactive-customers", {"days": days})

    async def fetch_stores(self) -> List[StoreInfo]:
        return await self._get_many(StoreInfo, "/api/stores")

    async def fetch_channels(self) -> List[ChannelInfo]:
        return await self._get_many(ChannelInfo, "/api/channels")
