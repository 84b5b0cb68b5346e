"""
Test Suite Configuration
"""
from datetime import datetime
from typing import AsyncGenerator, Iterable, Optional, Sequence, Tuple

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.database.connection import get_db_dependency
from src.database.models import Base, Channel, Customer, Product, ProductSale, Sale, Store
from src.serving.api.dependencies import get_request_time
from src.serving.api.main import create_api_app

# Reference "now" for every test that depends on the current time
NOW = datetime(2024, 3, 1, 12, 0, 0)


def _memory_engine() -> AsyncEngine:
    return create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory database with the restaurant schema"""
    engine = _memory_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def broken_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory database without any tables, every report query fails"""
    engine = _memory_engine()
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


class SalesFactory:
    """Builds rows of the restaurant schema for a test session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._default_store: Optional[Store] = None
        self._default_channel: Optional[Channel] = None

    async def _persist(self, obj):
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def store(self, name: str = "Loja Centro", city: str = "São Paulo",
                    state: str = "SP", is_active: bool = True) -> Store:
        return await self._persist(Store(name=name, city=city, state=state, is_active=is_active))

    async def channel(self, name: str = "Presencial", type: str = "P") -> Channel:
        return await self._persist(Channel(name=name, type=type))

    async def customer(self, name: str = "Maria Silva", email: Optional[str] = None,
                       phone: Optional[str] = None) -> Customer:
        email = email or f"{name.lower().replace(' ', '.')}@example.com"
        return await self._persist(Customer(customer_name=name, email=email, phone_number=phone))

    async def product(self, name: str) -> Product:
        return await self._persist(Product(name=name))

    async def sale(
        self,
        created_at: datetime,
        total_amount: float,
        status: str = "COMPLETED",
        store: Optional[Store] = None,
        channel: Optional[Channel] = None,
        customer: Optional[Customer] = None,
        total_discount: float = 0.0,
        delivery_seconds: Optional[int] = None,
        items: Iterable[Tuple[Product, float, float]] = (),
    ) -> Sale:
        if store is None:
            if self._default_store is None:
                self._default_store = await self.store()
            store = self._default_store
        if channel is None:
            if self._default_channel is None:
                self._default_channel = await self.channel()
            channel = self._default_channel

        sale = await self._persist(
            Sale(
                store_id=store.id,
                channel_id=channel.id,
                customer_id=customer.id if customer else None,
                created_at=created_at,
                sale_status_desc=status,
                total_amount=total_amount,
                total_discount=total_discount,
                delivery_seconds=delivery_seconds,
            )
        )
        for product, quantity, total_price in items:
            await self._persist(
                ProductSale(sale_id=sale.id, product_id=product.id, quantity=quantity, total_price=total_price)
            )
        return sale

    async def sales(self, created_at: Sequence[datetime], total_amount: float, **kwargs) -> None:
        for ts in created_at:
            await self.sale(ts, total_amount, **kwargs)

    async def commit(self) -> None:
        await self.session.commit()


@pytest.fixture
def factory(test_db) -> SalesFactory:
    return SalesFactory(test_db)


@pytest.fixture
async def scenario(factory):
    """
    Two completed sales on 2024-01-01 (50 and 30) and one cancelled sale on
    2024-01-02 (20), split over two stores and two channels.
    """
    centro = await factory.store("Loja Centro")
    norte = await factory.store("Loja Norte", city="Curitiba", state="PR")
    balcao = await factory.channel("Presencial", "P")
    ifood = await factory.channel("iFood", "D")

    await factory.sale(datetime(2024, 1, 1, 12, 15), 50.0, store=centro, channel=balcao, total_discount=5.0)
    await factory.sale(datetime(2024, 1, 1, 19, 40), 30.0, store=norte, channel=ifood, delivery_seconds=1800)
    await factory.sale(datetime(2024, 1, 2, 20, 5), 20.0, status="CANCELLED", store=centro, channel=ifood)
    await factory.commit()

    return {"centro": centro, "norte": norte, "balcao": balcao, "ifood": ifood}


def _client_for(engine: AsyncEngine) -> httpx.AsyncClient:
    app = create_api_app()
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async def override_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_dependency] = override_db
    app.dependency_overrides[get_request_time] = lambda: NOW

    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.fixture
async def api_client(test_engine) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client for the API backed by the test database"""
    async with _client_for(test_engine) as client:
        yield client


@pytest.fixture
async def broken_api_client(broken_engine) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client for the API backed by a database without tables"""
    async with _client_for(broken_engine) as client:
        yield client
