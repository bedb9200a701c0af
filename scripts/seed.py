#!/usr/bin/env python3
"""CLI script to reset the dashboard database to demo data.

Usage:
    python scripts/seed.py
    python scripts/seed.py --seed 42

Connects using DATABASE_URL from environment or .env file. Creates the tables
if needed, deletes every existing deal, account and organization, then inserts
three organizations with their sponsor accounts and randomly generated deals.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import random
import sys

# Ensure project root is on sys.path so we can import src.dealboard
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def seed(rng_seed: int | None) -> None:
    """Create tables and load demo rows by calling the seeding service directly."""
    from src.dealboard.core.database import close_db, get_engine, init_db
    from src.dealboard.services.seeding import seed_database

    await init_db()
    try:
        counts = await seed_database(get_engine(), rng=random.Random(rng_seed))
    finally:
        await close_db()

    print("Database seeded successfully:")
    print(f"  Organizations: {counts.organizations}")
    print(f"  Accounts:      {counts.accounts}")
    print(f"  Deals:         {counts.deals}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the deals dashboard database")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible deal data",
    )
    args = parser.parse_args()

    asyncio.run(seed(args.seed))


if __name__ == "__main__":
    main()
