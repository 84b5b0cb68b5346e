"""
Development Database Seeding

Creates the restaurant schema and loads a generated dataset into it. The
analytics API never writes; this tool exists for local databases and demos.

Usage:
    python -m src.ingestion.seed_db --sales 20000 --days 120
    python -m src.ingestion.seed_db --url sqlite+aiosqlite:///./restaurant.db
"""

import argparse
import asyncio
from typing import Any, Dict, List, Optional, Type

import polars as pl
import structlog
from sqlalchemy import insert

from src.config.logging import configure_logging
from src.data.generators import generate_dataset
from src.database.connection import close_database, get_db, init_database
from src.database.models import Base, Channel, Customer, Product, ProductSale, Sale, Store

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1000

# Load order respects foreign keys
TABLE_MODELS: Dict[str, Type[Base]] = {
    "stores": Store,
    "channels": Channel,
    "customers": Customer,
    "products": Product,
    "sales": Sale,
    "product_sales": ProductSale,
}


async def execute_batch_insert(model: Type[Base], records: List[Dict[str, Any]]) -> None:
    """Insert records in chunks using Core insert"""
    if not records:
        return

    async with get_db() as db:
        for i in range(0, len(records), CHUNK_SIZE):
            chunk = records[i:i + CHUNK_SIZE]
            await db.execute(insert(model), chunk)
        await db.commit()
    logger.info("Inserted records", table=model.__tablename__, count=len(records))


async def seed_database(
    frames: Dict[str, pl.DataFrame],
    url: Optional[str] = None,
    drop_existing: bool = False,
) -> Dict[str, int]:
    """
    Create the schema and load ``frames`` into it.

    Args:
        frames: Table name to DataFrame, as produced by ``generate_dataset``
        url: Database URL, defaults to the configured database
        drop_existing: Drop the restaurant tables first

    Returns:
        Number of rows loaded per table
    """
    engine = await init_database(url)

    async with engine.begin() as conn:
        if drop_existing:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    counts = {}
    for table, model in TABLE_MODELS.items():
        frame = frames.get(table)
        if frame is None:
            continue
        await execute_batch_insert(model, frame.to_dicts())
        counts[table] = frame.height

    return counts


async def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Seed the restaurant analytics database")
    parser.add_argument("--url", help="SQLAlchemy async URL (defaults to POSTGRES_* settings)")
    parser.add_argument("--sales", type=int, default=10000, help="Number of sales to generate")
    parser.add_argument("--stores", type=int, default=10, help="Number of stores")
    parser.add_argument("--customers", type=int, default=2000, help="Number of customers")
    parser.add_argument("--days", type=int, default=180, help="Days of history")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first")
    args = parser.parse_args(argv)

    configure_logging(log_format="text")
    logger.info("Starting database seeding...", sales=args.sales, days=args.days)

    frames = generate_dataset(
        n_sales=args.sales,
        n_stores=args.stores,
        n_customers=args.customers,
        days=args.days,
        seed=args.seed,
    )

    try:
        counts = await seed_database(frames, url=args.url, drop_existing=args.drop)
        logger.info("Database seeding completed successfully", **counts)
    except Exception as e:
        logger.error("Seeding failed", error=str(e))
        raise
    finally:
        await close_database()


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
