"""
Test Suite Configuration
"""
from datetime import datetime
from typing import AsyncGenerator, Iterable, Optional, Tuple

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pos_analytics.config import ReportSettings
from pos_analytics.database import Base, build_engine
from pos_analytics.database.models import (
    Brand,
    Category,
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    Product,
)
from pos_analytics.reports import ReportService


@pytest.fixture
def report_settings() -> ReportSettings:
    return ReportSettings()


@pytest.fixture
async def test_engine():
    """In-memory SQLite engine with the schema created"""
    engine = build_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

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
        await session.rollback()


class SalesData:
    """
    Builds catalog rows and orders for one tenant.

    Lines are ``(product, quantity)`` or ``(product, quantity, unit_price_cents)``;
    the unit price defaults to the product's list price.
    """

    def __init__(self, session: AsyncSession, tenant_id: str = "default"):
        self.session = session
        self.tenant_id = tenant_id
        self._skus = 0

    def for_tenant(self, tenant_id: str) -> "SalesData":
        return SalesData(self.session, tenant_id)

    async def _save(self, row):
        self.session.add(row)
        await self.session.flush()
        return row

    async def category(self, name: str) -> Category:
        return await self._save(Category(tenant_id=self.tenant_id, name=name))

    async def brand(self, name: str) -> Brand:
        return await self._save(Brand(tenant_id=self.tenant_id, name=name))

    async def product(
        self,
        name: str,
        price_cents: int,
        cost_price_cents: Optional[int],
        category: Optional[Category] = None,
        brand: Optional[Brand] = None,
        sku: Optional[str] = None,
    ) -> Product:
        self._skus += 1
        return await self._save(Product(
            tenant_id=self.tenant_id,
            name=name,
            sku=sku or f"{self.tenant_id.upper()}-{self._skus:04d}",
            category_id=category.id if category else None,
            brand_id=brand.id if brand else None,
            price_cents=price_cents,
            cost_price_cents=cost_price_cents,
        ))

    async def customer(self, name: str) -> Customer:
        return await self._save(Customer(tenant_id=self.tenant_id, name=name))

    async def order(
        self,
        lines: Iterable[Tuple],
        created_at: datetime,
        status: OrderStatus = OrderStatus.COMPLETED,
        customer: Optional[Customer] = None,
        total_cents: Optional[int] = None,
    ) -> Order:
        order = await self._save(Order(
            tenant_id=self.tenant_id,
            customer_id=customer.id if customer else None,
            status=status,
            total_cents=0,
            created_at=created_at,
        ))

        subtotal = 0
        for line in lines:
            product, quantity = line[0], line[1]
            unit_price = line[2] if len(line) > 2 else product.price_cents
            self.session.add(OrderItem(
                tenant_id=self.tenant_id,
                order_id=order.id,
                product_id=product.id,
                quantity=quantity,
                unit_price_cents=unit_price,
                subtotal_cents=quantity * unit_price,
            ))
            subtotal += quantity * unit_price

        order.total_cents = subtotal if total_cents is None else total_cents
        await self.session.flush()
        return order


@pytest.fixture
def sales(test_db) -> SalesData:
    return SalesData(test_db)


@pytest.fixture
def service(test_db, report_settings) -> ReportService:
    return ReportService.from_session(test_db, report_settings)
