"""
Backend subtool: replace the database contents with generated sample data.

Deletes every stored order, stock item and category, then inserts a fresh
sample set (10 categories, 50 stock items, orders across the past year and
the next few days). Field preferences, templates and settings are kept.

Run from backend directory:
  python scripts/load_demo_data.py [--seed 42] [--create-tables]
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from app.core.config import settings
from app.core.database import async_session_maker, close_db, init_db
from app.services.sample_data import DemoDataService


async def run(seed: Optional[int], create_tables: bool) -> None:
    if create_tables:
        await init_db()
    demo = DemoDataService(seed=seed)
    try:
        async with async_session_maker() as db:
            data = await demo.load_into_session(db)
        print(
            f"Loaded {len(data.categories)} categories, {len(data.stock_items)} stock items "
            f"and {len(data.orders)} orders into {settings.DATABASE_URL}"
        )
    finally:
        demo.close()
        await close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--seed", type=int, default=settings.SAMPLE_DATA_SEED,
                        help="Random seed for reproducible data")
    parser.add_argument("--create-tables", action="store_true",
                        help="Create missing tables first (development databases)")
    args = parser.parse_args()
    asyncio.run(run(args.seed, args.create_tables))


if __name__ == "__main__":
    main()
