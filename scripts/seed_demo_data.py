"""
Seed a demo tenant.

Creates the schema if needed and loads a generated catalog and sales history.

Usage:
    python scripts/seed_demo_data.py --tenant demo --orders 5000
    DATABASE_URL=sqlite+aiosqlite:///./pos_demo.db python scripts/seed_demo_data.py
"""

import argparse
import asyncio

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pos_analytics.config import get_settings
from pos_analytics.config.logging import configure_logging, get_logger
from pos_analytics.data import DemoDataGenerator, load_demo_data
from pos_analytics.database import Base, build_engine

logger = get_logger("seed_demo_data")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed a demo POS tenant")
    parser.add_argument("--tenant", default=None, help="Tenant id (defaults to REPORTS_DEFAULT_TENANT)")
    parser.add_argument("--customers", type=int, default=200)
    parser.add_argument("--products", type=int, default=100)
    parser.add_argument("--orders", type=int, default=2000)
    parser.add_argument("--days", type=int, default=365, help="History length in days")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--database-url", default=None, help="Overrides DATABASE_URL")
    return parser.parse_args()


async def seed(args: argparse.Namespace) -> None:
    settings = get_settings()
    url = args.database_url or settings.database.async_url
    tenant_id = args.tenant or settings.reports.default_tenant

    engine = build_engine(url, echo=settings.database.echo)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        generator = DemoDataGenerator(tenant_id=tenant_id, seed=args.seed)
        data = generator.generate_all(
            n_customers=args.customers,
            n_products=args.products,
            n_orders=args.orders,
            days=args.days,
        )

        session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
        async with session_factory() as session:
            counts = await load_demo_data(session, data)

        logger.info("Seeding complete", tenant_id=tenant_id, **counts)
    finally:
        await engine.dispose()


def main() -> None:
    configure_logging()
    asyncio.run(seed(parse_args()))


if __name__ == "__main__":
    main()
