"""
Demo Data Generator

Generates a realistic point-of-sale tenant for local development and demos:
- Categories and brands
- Products with prices and (mostly) known cost prices
- Customers
- Orders with line items across every order status

Frames are produced with polars and written to the database with bulk
Core inserts.
"""

import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import polars as pl
import structlog
from faker import Faker
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from pos_analytics.database.models import (
    Brand,
    Category,
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    Product,
)

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = [
    ("Electronics", (5_000, 200_000)),
    ("Clothing", (2_000, 50_000)),
    ("Home & Garden", (3_000, 100_000)),
    ("Sports", (2_500, 80_000)),
    ("Beauty", (1_000, 20_000)),
    ("Books", (1_000, 5_000)),
]

BRANDS = [
    "TechPro", "StyleMax", "HomeEase", "SportFit", "BeautyGlow",
    "BookWorld", "GenericCo", "PremiumPlus", "ValueChoice", "EcoFriendly",
]

ORDER_STATUSES = [
    (OrderStatus.PENDING, 0.05),
    (OrderStatus.PROCESSING, 0.05),
    (OrderStatus.COMPLETED, 0.40),
    (OrderStatus.SHIPPED, 0.10),
    (OrderStatus.DELIVERED, 0.32),
    (OrderStatus.CANCELLED, 0.05),
    (OrderStatus.REFUNDED, 0.03),
]

# Share of products sold without a category or without a known cost
UNCATEGORIZED_SHARE = 0.05
UNKNOWN_COST_SHARE = 0.05

ID_NAMESPACE = uuid.UUID("5d3c1f0e-8a7b-4c2d-9e6f-0a1b2c3d4e5f")


def _frame(rows: List[dict], **dtypes) -> pl.DataFrame:
    """Frame from row dicts; nullable columns get an explicit dtype."""
    if not rows:
        return pl.DataFrame()
    return pl.DataFrame(rows, schema_overrides=dtypes or None)


class DemoDataGenerator:
    """
    Generate one tenant's catalog and sales history.

    The generator owns its random state, so two instances built with the same
    seed produce identical frames (ids included). Ids also depend on the
    tenant, so every tenant seeded into one database gets its own keys.
    """

    def __init__(self, tenant_id: str = "default", seed: int = 42):
        self.tenant_id = tenant_id
        self.rng = random.Random(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)

    def _id(self) -> str:
        return str(uuid.uuid5(ID_NAMESPACE, f"{self.tenant_id}:{self.rng.getrandbits(128)}"))

    def categories(self) -> pl.DataFrame:
        return pl.DataFrame([
            {"id": self._id(), "tenant_id": self.tenant_id, "name": name}
            for name, _ in CATEGORIES
        ])

    def brands(self) -> pl.DataFrame:
        return pl.DataFrame([
            {"id": self._id(), "tenant_id": self.tenant_id, "name": name}
            for name in BRANDS
        ])

    def products(self, n: int, categories_df: pl.DataFrame, brands_df: pl.DataFrame) -> pl.DataFrame:
        """Generate n products priced by category."""
        price_ranges = dict(CATEGORIES)
        category_rows = categories_df.to_dicts()
        brand_ids = brands_df["id"].to_list()
        products = []

        for i in range(n):
            category = self.rng.choice(category_rows)
            low, high = price_ranges[category["name"]]
            price_cents = self.rng.randint(low, high)
            cost_price_cents: Optional[int] = round(price_cents * self.rng.uniform(0.3, 0.9))

            if self.rng.random() < UNKNOWN_COST_SHARE:
                cost_price_cents = None

            products.append({
                "id": self._id(),
                "tenant_id": self.tenant_id,
                "name": f"{self.fake.word().title()} {category['name']} {i + 1}",
                "sku": f"SKU-{i + 1:06d}",
                "category_id": None if self.rng.random() < UNCATEGORIZED_SHARE else category["id"],
                "brand_id": self.rng.choice(brand_ids),
                "price_cents": price_cents,
                "cost_price_cents": cost_price_cents,
            })

        return _frame(products, category_id=pl.Utf8, cost_price_cents=pl.Int64)

    def customers(self, n: int) -> pl.DataFrame:
        return _frame([
            {"id": self._id(), "tenant_id": self.tenant_id, "name": self.fake.name()}
            for _ in range(n)
        ])

    def orders(
        self,
        n: int,
        customers_df: pl.DataFrame,
        products_df: pl.DataFrame,
        start_date: datetime,
        end_date: datetime,
    ) -> Tuple[pl.DataFrame, pl.DataFrame]:
        """Generate n orders with items between start_date and end_date."""
        customer_ids = customers_df["id"].to_list()
        product_rows = products_df.select(["id", "price_cents"]).to_dicts()
        span_seconds = max(int((end_date - start_date).total_seconds()), 1)

        orders = []
        order_items = []

        for _ in range(n):
            order_id = self._id()
            created_at = start_date + timedelta(seconds=self.rng.randrange(span_seconds))
            status = self.rng.choices(
                [s[0] for s in ORDER_STATUSES],
                weights=[s[1] for s in ORDER_STATUSES],
            )[0]

            # Most orders have 1-3 lines
            num_items = self.rng.choices([1, 2, 3, 4, 5], weights=[0.40, 0.30, 0.15, 0.10, 0.05])[0]
            total_cents = 0

            for product in self.rng.sample(product_rows, k=min(num_items, len(product_rows))):
                quantity = self.rng.choices([1, 2, 3, 4, 5], weights=[0.60, 0.25, 0.10, 0.03, 0.02])[0]
                subtotal_cents = quantity * product["price_cents"]

                order_items.append({
                    "id": self._id(),
                    "tenant_id": self.tenant_id,
                    "order_id": order_id,
                    "product_id": product["id"],
                    "quantity": quantity,
                    "unit_price_cents": product["price_cents"],
                    "subtotal_cents": subtotal_cents,
                })
                total_cents += subtotal_cents

            orders.append({
                "id": order_id,
                "tenant_id": self.tenant_id,
                # Walk-in sales have no customer
                "customer_id": self.rng.choice(customer_ids) if customer_ids and self.rng.random() > 0.1 else None,
                "status": status.value,
                "total_cents": total_cents,
                "created_at": created_at,
            })

        return _frame(orders, customer_id=pl.Utf8), _frame(order_items)

    def generate_all(
        self,
        n_customers: int = 200,
        n_products: int = 100,
        n_orders: int = 2000,
        days: int = 365,
        end_date: Optional[datetime] = None,
    ) -> Dict[str, pl.DataFrame]:
        """Generate a complete tenant dataset keyed by table name."""
        end_date = end_date or datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)
        start_date = end_date - timedelta(days=days)

        categories_df = self.categories()
        brands_df = self.brands()
        products_df = self.products(n_products, categories_df, brands_df)
        customers_df = self.customers(n_customers)
        orders_df, order_items_df = self.orders(n_orders, customers_df, products_df, start_date, end_date)

        logger.info(
            "Demo data generated",
            tenant_id=self.tenant_id,
            products=len(products_df),
            customers=len(customers_df),
            orders=len(orders_df),
            order_items=len(order_items_df),
        )

        return {
            "categories": categories_df,
            "brands": brands_df,
            "products": products_df,
            "customers": customers_df,
            "orders": orders_df,
            "order_items": order_items_df,
        }


# Insert order respects foreign keys
_TABLES = [
    ("categories", Category),
    ("brands", Brand),
    ("products", Product),
    ("customers", Customer),
    ("orders", Order),
    ("order_items", OrderItem),
]


def _rows(name: str, df: pl.DataFrame) -> List[dict]:
    rows = df.to_dicts()
    if name == "orders":
        for row in rows:
            row["status"] = OrderStatus(row["status"])
    return rows


async def load_demo_data(session: AsyncSession, data: Dict[str, pl.DataFrame]) -> Dict[str, int]:
    """
    Insert generated frames and commit.

    Returns:
        Row counts per table
    """
    counts = {}
    for name, model in _TABLES:
        df = data.get(name)
        if df is None or df.is_empty():
            counts[name] = 0
            continue
        await session.execute(insert(model), _rows(name, df))
        counts[name] = len(df)

    await session.commit()
    logger.info("Demo data loaded", **counts)
    return counts
