"""
Unit Tests - Report Queries
"""
from datetime import date, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.analytics.errors import StorageQueryError
from src.analytics.filters import ReportFilters, end_of_day
from src.analytics.queries import (
    WEEKDAY_NAMES,
    get_channels,
    get_inactive_customers,
    get_overview,
    get_sales_by_channel,
    get_sales_by_date,
    get_sales_by_hour,
    get_sales_by_weekday,
    get_stores,
    get_top_customers,
    get_top_products,
)

# Matches the request time the API fixtures pin
NOW = datetime(2024, 3, 1, 12, 0, 0)


def period(start: date, end: date, **kwargs) -> ReportFilters:
    return ReportFilters(start=datetime.combine(start, datetime.min.time()), end=end_of_day(end), **kwargs)


JANUARY = period(date(2024, 1, 1), date(2024, 1, 31))


class TestOverview:
    """Tests for the overview report"""

    async def test_counts_and_totals(self, test_db, scenario):
        """Test money totals only include completed sales"""
        overview = await get_overview(test_db, JANUARY)

        assert overview.total_sales == 3
        assert overview.completed_sales == 2
        assert overview.cancelled_sales == 1
        assert overview.avg_ticket == 40.0
        assert overview.total_revenue == 80.0
        assert overview.total_discounts == 5.0
        assert overview.cancellation_rate == pytest.approx(0.3333)

    async def test_other_statuses_are_counted_in_total_only(self, test_db, factory):
        await factory.sale(datetime(2024, 1, 3, 10), 10.0)
        await factory.sale(datetime(2024, 1, 3, 11), 15.0, status="PENDING")
        await factory.commit()

        overview = await get_overview(test_db, JANUARY)

        assert overview.total_sales == 2
        assert overview.completed_sales + overview.cancelled_sales <= overview.total_sales
        assert overview.total_revenue == 10.0

    async def test_empty_period(self, test_db, scenario):
        """Test aggregates over no rows are zero, never null"""
        overview = await get_overview(test_db, period(date(2023, 1, 1), date(2023, 1, 31)))

        assert overview.total_sales == 0
        assert overview.avg_ticket == 0.0
        assert overview.total_revenue == 0.0
        assert overview.cancellation_rate == 0.0

    async def test_period_bounds_are_inclusive(self, test_db, scenario):
        overview = await get_overview(test_db, period(date(2024, 1, 2), date(2024, 1, 2)))

        assert overview.total_sales == 1
        assert overview.cancelled_sales == 1

    async def test_store_and_channel_filters(self, test_db, scenario):
        by_store = period(date(2024, 1, 1), date(2024, 1, 31), store_ids=[scenario["centro"].id])
        by_channel = period(date(2024, 1, 1), date(2024, 1, 31), channel_ids=[scenario["ifood"].id])

        by_store = await get_overview(test_db, by_store)
        by_channel = await get_overview(test_db, by_channel)

        assert (by_store.total_sales, by_store.total_revenue) == (2, 50.0)
        assert (by_channel.total_sales, by_channel.total_revenue) == (2, 30.0)


class TestSalesByDate:
    """Tests for the sales-by-date report"""

    async def test_completed_sales_per_day(self, test_db, scenario):
        rows = await get_sales_by_date(test_db, JANUARY)

        assert len(rows) == 1
        assert rows[0].date == date(2024, 1, 1)
        assert rows[0].total_sales == 2
        assert rows[0].revenue == 80.0

    async def test_revenue_matches_overview(self, test_db, factory):
        """Test daily revenue adds up to the overview revenue"""
        await factory.sales([datetime(2024, 1, 5, 12), datetime(2024, 1, 5, 20)], 12.35)
        await factory.sales([datetime(2024, 1, 9, 13)], 47.10)
        await factory.sale(datetime(2024, 1, 9, 14), 99.0, status="CANCELLED")
        await factory.commit()

        rows = await get_sales_by_date(test_db, JANUARY)
        overview = await get_overview(test_db, JANUARY)

        assert [r.date for r in rows] == [date(2024, 1, 5), date(2024, 1, 9)]
        assert round(sum(r.revenue for r in rows), 2) == overview.total_revenue


class TestTopProducts:
    """Tests for the top-products report"""

    @pytest.fixture
    async def products(self, factory):
        pizza = await factory.product("Pizza Calabresa")
        burger = await factory.product("X-Burger")
        suco = await factory.product("Suco Natural")

        await factory.sale(datetime(2024, 1, 1, 12), 230.0, items=[(pizza, 2, 200.0), (burger, 1, 30.0)])
        await factory.sale(datetime(2024, 1, 2, 19), 110.0, items=[(pizza, 1, 100.0), (suco, 1, 10.0)])
        await factory.sale(datetime(2024, 1, 3, 20), 500.0, status="CANCELLED", items=[(suco, 50, 500.0)])
        await factory.commit()

    async def test_ranked_by_revenue(self, test_db, products):
        rows = await get_top_products(test_db, JANUARY)

        assert [r.product_name for r in rows] == ["Pizza Calabresa", "X-Burger", "Suco Natural"]
        pizza = rows[0]
        assert pizza.times_sold == 2
        assert pizza.total_quantity == 3
        assert pizza.total_revenue == 300.0
        assert pizza.avg_price == 150.0

    async def test_limit(self, test_db, products):
        rows = await get_top_products(test_db, JANUARY, limit=1)

        assert len(rows) == 1
        assert rows[0].product_name == "Pizza Calabresa"

    async def test_cancelled_sales_are_excluded(self, test_db, products):
        rows = await get_top_products(test_db, JANUARY)

        suco = next(r for r in rows if r.product_name == "Suco Natural")
        assert suco.total_revenue == 10.0


class TestSalesByChannel:
    """Tests for the sales-by-channel report"""

    async def test_channels_ranked_by_revenue(self, test_db, scenario):
        rows = await get_sales_by_channel(test_db, JANUARY)

        assert [r.channel_name for r in rows] == ["Presencial", "iFood"]
        assert rows[0].channel_type == "P"
        assert rows[0].avg_delivery_minutes is None
        assert rows[1].avg_delivery_minutes == 30.0

    async def test_channel_restriction_is_ignored(self, test_db, scenario):
        filters = ReportFilters(start=JANUARY.start, end=JANUARY.end, channel_ids=[scenario["ifood"].id])

        rows = await get_sales_by_channel(test_db, filters)

        assert len(rows) == 2

    async def test_average_delivery_minutes(self, test_db, factory):
        delivery = await factory.channel("Rappi", "D")
        await factory.sale(datetime(2024, 1, 1, 12), 40.0, channel=delivery, delivery_seconds=1800)
        await factory.sale(datetime(2024, 1, 1, 13), 60.0, channel=delivery, delivery_seconds=2100)
        await factory.commit()

        rows = await get_sales_by_channel(test_db, JANUARY)

        assert rows[0].avg_delivery_minutes == 32.5
        assert rows[0].avg_ticket == 50.0


class TestTemporalReports:
    """Tests for the hour and weekday distributions"""

    async def test_sales_by_hour(self, test_db, scenario):
        rows = await get_sales_by_hour(test_db, JANUARY)

        assert [(r.hour, r.total_sales, r.revenue) for r in rows] == [(12, 1, 50.0), (19, 1, 30.0)]

    async def test_sales_by_weekday(self, test_db, factory):
        await factory.sale(datetime(2024, 1, 1, 12), 10.0)  # Monday
        await factory.sale(datetime(2024, 1, 6, 12), 20.0)  # Saturday
        await factory.sale(datetime(2024, 1, 7, 12), 30.0)  # Sunday
        await factory.sale(datetime(2024, 1, 14, 12), 5.0)  # Sunday
        await factory.commit()

        rows = await get_sales_by_weekday(test_db, JANUARY)

        assert [(r.weekday, r.weekday_name, r.total_sales) for r in rows] == [
            (0, "Domingo", 2),
            (1, "Segunda", 1),
            (6, "Sábado", 1),
        ]
        assert rows[0].revenue == 35.0

    def test_weekday_names_start_on_sunday(self):
        assert len(WEEKDAY_NAMES) == 7
        assert WEEKDAY_NAMES[0] == "Domingo"
        assert WEEKDAY_NAMES[6] == "Sábado"


class TestUnmatchedFilters:
    """Tests for filters that match no sale"""

    async def test_grouped_reports_are_empty(self, test_db, scenario):
        """Test an unknown store yields empty lists and a zero overview"""
        filters = ReportFilters(start=JANUARY.start, end=JANUARY.end, store_ids=[9999])

        assert await get_sales_by_date(test_db, filters) == []
        assert await get_top_products(test_db, filters) == []
        assert await get_sales_by_channel(test_db, filters) == []
        assert await get_sales_by_hour(test_db, filters) == []
        assert await get_sales_by_weekday(test_db, filters) == []

        overview = await get_overview(test_db, filters)
        assert overview.total_sales == 0
        assert overview.total_revenue == 0.0


class TestCustomerReports:
    """Tests for the customer reports"""

    async def test_top_customers(self, test_db, factory):
        ana = await factory.customer("Ana Souza")
        bruno = await factory.customer("Bruno Lima")
        carla = await factory.customer("Carla Dias")

        await factory.sale(datetime(2024, 1, 3, 12), 100.0, customer=ana)
        await factory.sale(datetime(2024, 1, 10, 12), 50.0, customer=ana)
        await factory.sale(datetime(2024, 1, 11, 12), 200.0, customer=bruno)
        await factory.sale(datetime(2024, 1, 12, 12), 300.0, customer=bruno, status="CANCELLED")
        await factory.sale(datetime(2024, 2, 10, 12), 999.0, customer=carla)
        await factory.sale(datetime(2024, 1, 15, 12), 70.0)
        await factory.commit()

        rows = await get_top_customers(test_db, JANUARY)

        assert [r.customer_name for r in rows] == ["Bruno Lima", "Ana Souza"]
        ana_row = rows[1]
        assert ana_row.total_purchases == 2
        assert ana_row.lifetime_value == 150.0
        assert ana_row.avg_ticket == 75.0
        assert ana_row.last_purchase == datetime(2024, 1, 10, 12)

    async def test_top_customers_ignore_store_and_channel(self, test_db, factory):
        ana = await factory.customer("Ana Souza")
        await factory.sale(datetime(2024, 1, 3, 12), 100.0, customer=ana)
        await factory.commit()

        filters = ReportFilters(start=JANUARY.start, end=JANUARY.end, store_ids=[9999], channel_ids=[9999])
        rows = await get_top_customers(test_db, filters, limit=5)

        assert len(rows) == 1

    async def test_top_customers_limit(self, test_db, factory):
        for i in range(5):
            customer = await factory.customer(f"Cliente {i}")
            await factory.sale(datetime(2024, 1, 3, 12), 10.0 * (i + 1), customer=customer)
        await factory.commit()

        rows = await get_top_customers(test_db, JANUARY, limit=3)

        assert [r.customer_name for r in rows] == ["Cliente 4", "Cliente 3", "Cliente 2"]

    async def test_inactive_customers(self, test_db, factory):
        ana = await factory.customer("Ana Souza", phone="(11) 99999-0000")
        bruno = await factory.customer("Bruno Lima")
        carla = await factory.customer("Carla Dias")
        diego = await factory.customer("Diego Alves")
        elisa = await factory.customer("Elisa Rocha")

        # Recurring and gone for more than 30 days
        await factory.sales([datetime(2024, 1, 5), datetime(2024, 1, 12), datetime(2024, 1, 20)], 40.0, customer=ana)
        # Too few purchases
        await factory.sales([datetime(2024, 1, 1), datetime(2024, 1, 5)], 500.0, customer=bruno)
        # Bought recently
        await factory.sales([datetime(2024, 1, 1), datetime(2024, 1, 10), datetime(2024, 2, 20)], 30.0, customer=carla)
        # Cancelled purchases do not count towards the minimum
        await factory.sales([datetime(2024, 1, 1), datetime(2024, 1, 2)], 30.0, customer=diego)
        await factory.sales([datetime(2024, 1, 3), datetime(2024, 1, 4)], 30.0, customer=diego, status="CANCELLED")
        # Cancelled purchases do not count as activity
        await factory.sales([datetime(2024, 1, 1), datetime(2024, 1, 5), datetime(2024, 1, 10)], 60.0, customer=elisa)
        await factory.sale(datetime(2024, 2, 25), 60.0, customer=elisa, status="CANCELLED")
        await factory.commit()

        rows = await get_inactive_customers(test_db, as_of=NOW, days=30)

        assert [r.customer_name for r in rows] == ["Elisa Rocha", "Ana Souza"]
        assert rows[0].lifetime_value == 180.0
        assert rows[0].days_since_purchase == 51
        assert rows[1].phone_number == "(11) 99999-0000"
        assert rows[1].total_purchases == 3
        assert rows[1].last_purchase == datetime(2024, 1, 20)
        assert rows[1].days_since_purchase == 41
        assert all(r.days_since_purchase >= 30 for r in rows)

    async def test_inactive_threshold_and_cap(self, test_db, factory):
        ana = await factory.customer("Ana Souza")
        await factory.sales([datetime(2024, 2, 1), datetime(2024, 2, 5), datetime(2024, 2, 10)], 40.0, customer=ana)
        await factory.commit()

        assert await get_inactive_customers(test_db, as_of=NOW, days=30) == []
        assert len(await get_inactive_customers(test_db, as_of=NOW, days=10)) == 1
        assert await get_inactive_customers(test_db, as_of=NOW, days=10, max_results=0) == []


class TestReferenceData:
    """Tests for stores and channels"""

    async def test_active_stores_by_name(self, test_db, factory):
        await factory.store("Loja Zeta")
        await factory.store("Loja Alfa")
        await factory.store("Loja Beta", is_active=False)
        await factory.commit()

        stores = await get_stores(test_db)

        assert [s.name for s in stores] == ["Loja Alfa", "Loja Zeta"]
        assert stores[0].city == "São Paulo"

    async def test_channels_by_name(self, test_db, scenario):
        channels = await get_channels(test_db)

        assert [(c.name, c.type) for c in channels] == [("Presencial", "P"), ("iFood", "D")]


class TestStorageFailure:
    """Tests for storage errors"""

    async def test_query_error_is_wrapped(self, broken_engine):
        session_factory = async_sessionmaker(bind=broken_engine, class_=AsyncSession)

        async with session_factory() as session:
            with pytest.raises(StorageQueryError) as exc_info:
                await get_overview(session, JANUARY)

        assert exc_info.value.report == "overview"
        assert exc_info.value.cause is not None
