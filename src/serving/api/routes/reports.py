"""
Report API Endpoints

One GET endpoint per dashboard report. Handlers only resolve request
parameters; aggregation lives in ``src.analytics.queries``.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from src.analytics import queries
from src.analytics.filters import ReportFilters
from src.analytics.schemas import (
    ChannelPerformance,
    CustomerValue,
    DailySales,
    HourlySales,
    InactiveCustomer,
    Overview,
    ProductPerformance,
    WeekdaySales,
)
from src.config import get_settings
from src.database.connection import get_db_dependency
from src.serving.api.dependencies import get_report_filters, get_request_time

settings = get_settings()
router = APIRouter()
logger = structlog.get_logger(__name__)


def _log_request(report: str, filters: ReportFilters, **extra) -> None:
    logger.info(
        "Report requested",
        report=report,
        start=filters.start.isoformat(),
        end=filters.end.isoformat(),
        store_ids=list(filters.store_ids),
        channel_ids=list(filters.channel_ids),
        **extra,
    )


@router.get("/overview", response_model=Overview)
async def overview(
    filters: ReportFilters = Depends(get_report_filters),
    db: AsyncSession = Depends(get_db_dependency),
) -> Overview:
    """Sales counts, ticket, revenue and discounts for the period."""
    _log_request("overview", filters)
    return await queries.get_overview(db, filters)


@router.get("/sales-by-date", response_model=List[DailySales])
async def sales_by_date(
    filters: ReportFilters = Depends(get_report_filters),
    db: AsyncSession = Depends(get_db_dependency),
) -> List[DailySales]:
    """Daily completed sales and revenue."""
    _log_request("sales_by_date", filters)
    return await queries.get_sales_by_date(db, filters)


@router.get("/top-products", response_model=List[ProductPerformance])
async def top_products(
    limit: Optional[int] = Query(None, ge=1, le=settings.reports.max_limit),
    filters: ReportFilters = Depends(get_report_filters),
    db: AsyncSession = Depends(get_db_dependency),
) -> List[ProductPerformance]:
    """Products ranked by revenue."""
    limit = limit or settings.reports.product_limit
    _log_request("top_products", filters, limit=limit)
    return await queries.get_top_products(db, filters, limit=limit)


@router.get("/sales-by-channel", response_model=List[ChannelPerformance])
async def sales_by_channel(
    filters: ReportFilters = Depends(get_report_filters),
    db: AsyncSession = Depends(get_db_dependency),
) -> List[ChannelPerformance]:
    """Channel comparison; ``channelIds`` is accepted but not applied."""
    _log_request("sales_by_channel", filters)
    return await queries.get_sales_by_channel(db, filters)


@router.get("/sales-by-hour", response_model=List[HourlySales])
async def sales_by_hour(
    filters: ReportFilters = Depends(get_report_filters),
    db: AsyncSession = Depends(get_db_dependency),
) -> List[HourlySales]:
    _log_request("sales_by_hour", filters)
    return await queries.get_sales_by_hour(db, filters)


@router.get("/sales-by-weekday", response_model=List[WeekdaySales])
async def sales_by_weekday(
    filters: ReportFilters = Depends(get_report_filters),
    db: AsyncSession = Depends(get_db_dependency),
) -> List[WeekdaySales]:
    _log_request("sales_by_weekday", filters)
    return await queries.get_sales_by_weekday(db, filters)


@router.get("/top-customers", response_model=List[CustomerValue])
async def top_customers(
    limit: Optional[int] = Query(None, ge=1, le=settings.reports.max_limit),
    filters: ReportFilters = Depends(get_report_filters),
    db: AsyncSession = Depends(get_db_dependency),
) -> List[CustomerValue]:
    """Customers ranked by lifetime value within the period."""
    limit = limit or settings.reports.customer_limit
    _log_request("top_customers", filters, limit=limit)
    return await queries.get_top_customers(db, filters, limit=limit)


@router.get("/inactive-customers", response_model=List[InactiveCustomer])
async def inactive_customers(
    days: Optional[int] = Query(None, ge=1, le=settings.reports.max_inactive_days),
    now: datetime = Depends(get_request_time),
    db: AsyncSession = Depends(get_db_dependency),
) -> List[InactiveCustomer]:
    """Recurring customers without a completed purchase in the last ``days`` days."""
    days = days or settings.reports.inactive_days
    logger.info("Report requested", report="inactive_customers", days=days, as_of=now.isoformat())
    return await queries.get_inactive_customers(
        db,
        as_of=now,
        days=days,
        min_purchases=settings.reports.inactive_min_purchases,
        max_results=settings.reports.inactive_max_results,
    )
