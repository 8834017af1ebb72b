"""
Unit Tests - Demo Data Generator
"""
from datetime import datetime

import polars as pl
import pytest
from sqlalchemy import func, select

from pos_analytics.data import DemoDataGenerator, load_demo_data
from pos_analytics.database.models import Order, OrderItem, OrderStatus
from pos_analytics.reports import ReportService

END = datetime(2024, 6, 30)


@pytest.fixture
def demo_data():
    return DemoDataGenerator(tenant_id="demo", seed=7).generate_all(
        n_customers=20, n_products=15, n_orders=120, days=90, end_date=END,
    )


class TestDemoDataGenerator:
    """Tests for DemoDataGenerator"""

    def test_same_seed_same_data(self):
        first = DemoDataGenerator(seed=3).generate_all(n_customers=5, n_products=5, n_orders=10, end_date=END)
        second = DemoDataGenerator(seed=3).generate_all(n_customers=5, n_products=5, n_orders=10, end_date=END)

        for name in first:
            assert first[name].equals(second[name])

    def test_every_row_belongs_to_tenant(self, demo_data):
        for df in demo_data.values():
            assert df["tenant_id"].unique().to_list() == ["demo"]

    def test_line_subtotals(self, demo_data):
        items = demo_data["order_items"]

        assert (items["subtotal_cents"] == items["quantity"] * items["unit_price_cents"]).all()

    def test_order_totals_match_lines(self, demo_data):
        line_totals = demo_data["order_items"].group_by("order_id").agg(pl.col("subtotal_cents").sum())
        joined = demo_data["orders"].join(line_totals, left_on="id", right_on="order_id")

        assert len(joined) == len(demo_data["orders"])
        assert (joined["total_cents"] == joined["subtotal_cents"]).all()

    def test_orders_within_window(self, demo_data):
        created = demo_data["orders"]["created_at"]

        assert created.max() <= END
        assert created.min() >= datetime(2024, 4, 1)

    def test_statuses_are_known(self, demo_data):
        known = {status.value for status in OrderStatus}

        assert set(demo_data["orders"]["status"].to_list()) <= known

    def test_empty_history(self):
        data = DemoDataGenerator().generate_all(n_customers=3, n_products=3, n_orders=0, end_date=END)

        assert data["orders"].is_empty()
        assert data["order_items"].is_empty()


class TestLoadDemoData:
    """Tests for loading generated data"""

    async def test_load_and_report(self, test_db, demo_data, report_settings):
        counts = await load_demo_data(test_db, demo_data)

        assert counts["orders"] == 120
        stored = await test_db.scalar(select(func.count()).select_from(OrderItem))
        assert stored == len(demo_data["order_items"])

        counted_orders = await test_db.scalar(
            select(func.count()).select_from(Order).where(
                Order.tenant_id == "demo",
                Order.status.not_in([OrderStatus.CANCELLED, OrderStatus.REFUNDED]),
            )
        )
        report = await ReportService.from_session(test_db, report_settings).profit_margin("demo")
        categories = await ReportService.from_session(test_db, report_settings).sales_by_category("demo")

        assert report.overall.total_revenue_cents == sum(c.total_revenue_cents for c in categories)
        timeline = await ReportService.from_session(test_db, report_settings).sales_by_time("demo", "year")
        assert sum(bucket.order_count for bucket in timeline) == counted_orders

    async def test_two_tenants_share_one_database(self, test_db, report_settings):
        """Test tenants seeded with the same seed get distinct keys"""
        store_1 = DemoDataGenerator(tenant_id="store-1").generate_all(
            n_customers=5, n_products=5, n_orders=20, end_date=END,
        )
        store_2 = DemoDataGenerator(tenant_id="store-2").generate_all(
            n_customers=5, n_products=5, n_orders=20, end_date=END,
        )

        await load_demo_data(test_db, store_1)
        counts = await load_demo_data(test_db, store_2)

        assert counts["orders"] == 20
        assert set(store_1["orders"]["id"].to_list()).isdisjoint(store_2["orders"]["id"].to_list())
        stored = await test_db.scalar(select(func.count()).select_from(Order))
        assert stored == 40

        service = ReportService.from_session(test_db, report_settings)
        first = await service.profit_margin("store-1")
        second = await service.profit_margin("store-2")
        expected_first = store_1["order_items"].join(
            store_1["orders"].filter(~pl.col("status").is_in(["cancelled", "refunded"])).select("id"),
            left_on="order_id",
            right_on="id",
        )["subtotal_cents"].sum()
        assert first.overall.total_revenue_cents == expected_first
        assert second.overall.total_revenue_cents > 0
