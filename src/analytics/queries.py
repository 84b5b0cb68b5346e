"""
Report Queries

Aggregate queries behind every dashboard report. Each function takes an open
``AsyncSession`` and plain parameters, builds one SQLAlchemy Core statement and
returns typed rows.

Revenue, ticket and discount figures only ever include COMPLETED sales. The
overview counts every status; all grouped reports are restricted to COMPLETED.
"""

import functools
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, List, TypeVar

import structlog
from sqlalchemy import Date, case, extract, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.analytics.errors import StorageQueryError
from src.analytics.filters import ReportFilters
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
from src.database.models import (
    Channel,
    Customer,
    Product,
    ProductSale,
    Sale,
    SaleStatus,
    Store,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

WEEKDAY_NAMES = ("Domingo", "Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado")

is_completed = Sale.sale_status_desc == SaleStatus.COMPLETED.value
is_cancelled = Sale.sale_status_desc == SaleStatus.CANCELLED.value


def _money(value: Any) -> float:
    """Round a monetary aggregate to cents; SQL NULL becomes 0."""
    if value is None:
        return 0.0
    return round(float(value), 2)


def report(name: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Mark a coroutine as a report query.

    Storage failures are logged and re-raised as ``StorageQueryError`` so
    callers see one failure kind regardless of the driver error.
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            try:
                result = await func(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(
                    "Report query failed",
                    report=name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise StorageQueryError(name, e) from e

            logger.debug(
                "Report query completed",
                report=name,
                rows=len(result) if isinstance(result, list) else 1,
            )
            return result
        return wrapper
    return decorator


@report("overview")
async def get_overview(db: AsyncSession, filters: ReportFilters) -> Overview:
    """Headline counts and COMPLETED-only money totals for the period."""
    stmt = select(
        func.count(Sale.id).label("total_sales"),
        func.sum(case((is_completed, 1), else_=0)).label("completed_sales"),
        func.sum(case((is_cancelled, 1), else_=0)).label("cancelled_sales"),
        func.avg(case((is_completed, Sale.total_amount))).label("avg_ticket"),
        func.sum(case((is_completed, Sale.total_amount))).label("total_revenue"),
        func.sum(case((is_completed, Sale.total_discount))).label("total_discounts"),
    ).where(*filters.sale_predicates())

    row = (await db.execute(stmt)).one()

    total = int(row.total_sales or 0)
    cancelled = int(row.cancelled_sales or 0)

    return Overview(
        total_sales=total,
        completed_sales=int(row.completed_sales or 0),
        cancelled_sales=cancelled,
        avg_ticket=_money(row.avg_ticket),
        total_revenue=_money(row.total_revenue),
        total_discounts=_money(row.total_discounts),
        cancellation_rate=round(cancelled / total, 4) if total else 0.0,
    )


@report("sales_by_date")
async def get_sales_by_date(db: AsyncSession, filters: ReportFilters) -> List[DailySales]:
    """Completed sales and revenue per calendar day, oldest first."""
    day = func.date(Sale.created_at, type_=Date)

    stmt = (
        select(
            day.label("date"),
            func.count(Sale.id).label("total_sales"),
            func.sum(Sale.total_amount).label("revenue"),
        )
        .where(is_completed, *filters.sale_predicates())
        .group_by(day)
        .order_by(day)
    )

    result = await db.execute(stmt)
    return [
        DailySales(date=row.date, total_sales=row.total_sales, revenue=_money(row.revenue))
        for row in result.all()
    ]


@report("top_products")
async def get_top_products(
    db: AsyncSession,
    filters: ReportFilters,
    limit: int = 10,
) -> List[ProductPerformance]:
    """Best selling products by revenue, at most ``limit`` rows."""
    revenue = func.sum(ProductSale.total_price)

    stmt = (
        select(
            Product.name.label("product_name"),
            func.count(ProductSale.id).label("times_sold"),
            func.sum(ProductSale.quantity).label("total_quantity"),
            revenue.label("total_revenue"),
            func.avg(ProductSale.total_price).label("avg_price"),
        )
        .select_from(ProductSale)
        .join(Product, Product.id == ProductSale.product_id)
        .join(Sale, Sale.id == ProductSale.sale_id)
        .where(is_completed, *filters.sale_predicates())
        .group_by(Product.id, Product.name)
        .order_by(revenue.desc(), Product.name)
        .limit(limit)
    )

    result = await db.execute(stmt)
    return [
        ProductPerformance(
            product_name=row.product_name,
            times_sold=row.times_sold,
            total_quantity=round(float(row.total_quantity or 0), 2),
            total_revenue=_money(row.total_revenue),
            avg_price=_money(row.avg_price),
        )
        for row in result.all()
    ]


@report("sales_by_channel")
async def get_sales_by_channel(db: AsyncSession, filters: ReportFilters) -> List[ChannelPerformance]:
    """
    Completed sales per channel, highest revenue first.

    The channel restriction is not applied, this report compares channels.
    """
    revenue = func.sum(Sale.total_amount)

    stmt = (
        select(
            Channel.name.label("channel_name"),
            Channel.type.label("channel_type"),
            func.count(Sale.id).label("total_sales"),
            revenue.label("revenue"),
            func.avg(Sale.total_amount).label("avg_ticket"),
            func.avg(Sale.delivery_seconds).label("avg_delivery_seconds"),
        )
        .select_from(Sale)
        .join(Channel, Channel.id == Sale.channel_id)
        .where(is_completed, *filters.sale_predicates(by_channel=False))
        .group_by(Channel.id, Channel.name, Channel.type)
        .order_by(revenue.desc(), Channel.name)
    )

    result = await db.execute(stmt)
    return [
        ChannelPerformance(
            channel_name=row.channel_name,
            channel_type=row.channel_type,
            total_sales=row.total_sales,
            revenue=_money(row.revenue),
            avg_ticket=_money(row.avg_ticket),
            avg_delivery_minutes=(
                round(float(row.avg_delivery_seconds) / 60, 1)
                if row.avg_delivery_seconds is not None
                else None
            ),
        )
        for row in result.all()
    ]


@report("sales_by_hour")
async def get_sales_by_hour(db: AsyncSession, filters: ReportFilters) -> List[HourlySales]:
    """Completed sales per hour of day (0-23); hours without sales are omitted."""
    hour = extract("hour", Sale.created_at)

    stmt = (
        select(
            hour.label("hour"),
            func.count(Sale.id).label("total_sales"),
            func.sum(Sale.total_amount).label("revenue"),
        )
        .where(is_completed, *filters.sale_predicates())
        .group_by(hour)
        .order_by(hour)
    )

    result = await db.execute(stmt)
    return [
        HourlySales(hour=int(row.hour), total_sales=row.total_sales, revenue=_money(row.revenue))
        for row in result.all()
    ]


@report("sales_by_weekday")
async def get_sales_by_weekday(db: AsyncSession, filters: ReportFilters) -> List[WeekdaySales]:
    """Completed sales per day of week, Sunday (0) first."""
    weekday = extract("dow", Sale.created_at)

    stmt = (
        select(
            weekday.label("weekday"),
            func.count(Sale.id).label("total_sales"),
            func.sum(Sale.total_amount).label("revenue"),
        )
        .where(is_completed, *filters.sale_predicates())
        .group_by(weekday)
        .order_by(weekday)
    )

    result = await db.execute(stmt)
    rows = []
    for row in result.all():
        index = int(row.weekday)
        rows.append(
            WeekdaySales(
                weekday=index,
                weekday_name=WEEKDAY_NAMES[index],
                total_sales=row.total_sales,
                revenue=_money(row.revenue),
            )
        )
    return rows


@report("top_customers")
async def get_top_customers(
    db: AsyncSession,
    filters: ReportFilters,
    limit: int = 20,
) -> List[CustomerValue]:
    """
    Customers ranked by lifetime value within the period.

    Only the period applies; store and channel restrictions are ignored.
    """
    lifetime_value = func.sum(Sale.total_amount)

    stmt = (
        select(
            Customer.customer_name,
            Customer.email,
            func.count(Sale.id).label("total_purchases"),
            lifetime_value.label("lifetime_value"),
            func.avg(Sale.total_amount).label("avg_ticket"),
            func.max(Sale.created_at).label("last_purchase"),
        )
        .select_from(Customer)
        .join(Sale, Sale.customer_id == Customer.id)
        .where(is_completed, *filters.period_predicates())
        .group_by(Customer.id, Customer.customer_name, Customer.email)
        .order_by(lifetime_value.desc(), Customer.id)
        .limit(limit)
    )

    result = await db.execute(stmt)
    return [
        CustomerValue(
            customer_name=row.customer_name,
            email=row.email,
            total_purchases=row.total_purchases,
            lifetime_value=_money(row.lifetime_value),
            avg_ticket=_money(row.avg_ticket),
            last_purchase=row.last_purchase,
        )
        for row in result.all()
    ]


@report("inactive_customers")
async def get_inactive_customers(
    db: AsyncSession,
    as_of: datetime,
    days: int = 30,
    min_purchases: int = 3,
    max_results: int = 50,
) -> List[InactiveCustomer]:
    """
    Recurring customers whose last completed purchase is older than ``days``.

    Args:
        db: Database session
        as_of: Reference instant the inactivity is measured from
        days: Inactivity threshold in days
        min_purchases: Minimum number of completed purchases over all time
        max_results: Cap on returned rows

    Returns:
        Customers ordered by lifetime value, highest first
    """
    cutoff = as_of - timedelta(days=days)
    last_purchase = func.max(Sale.created_at)
    purchases = func.count(Sale.id)
    lifetime_value = func.sum(Sale.total_amount)

    stmt = (
        select(
            Customer.customer_name,
            Customer.email,
            Customer.phone_number,
            purchases.label("total_purchases"),
            lifetime_value.label("lifetime_value"),
            last_purchase.label("last_purchase"),
        )
        .select_from(Customer)
        .join(Sale, Sale.customer_id == Customer.id)
        .where(is_completed)
        .group_by(Customer.id, Customer.customer_name, Customer.email, Customer.phone_number)
        .having(last_purchase < cutoff, purchases >= min_purchases)
        .order_by(lifetime_value.desc(), Customer.id)
        .limit(max_results)
    )

    result = await db.execute(stmt)
    return [
        InactiveCustomer(
            customer_name=row.customer_name,
            email=row.email,
            phone_number=row.phone_number,
            total_purchases=row.total_purchases,
            lifetime_value=_money(row.lifetime_value),
            last_purchase=row.last_purchase,
            days_since_purchase=(as_of - row.last_purchase).days,
        )
        for row in result.all()
    ]


@report("stores")
async def get_stores(db: AsyncSession) -> List[StoreInfo]:
    """Active stores by name."""
    result = await db.execute(
        select(Store).where(Store.is_active == True).order_by(Store.name)  # noqa: E712
    )
    return [StoreInfo.model_validate(store) for store in result.scalars().all()]


@report("channels")
async def get_channels(db: AsyncSession) -> List[ChannelInfo]:
    """All channels by name."""
    result = await db.execute(select(Channel).order_by(Channel.name))
    return [ChannelInfo.model_validate(channel) for channel in result.scalars().all()]
