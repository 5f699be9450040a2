#!/usr/bin/env python3
"""
Create the PostgreSQL schema for the link service.

Usage:
    python scripts/database/init_database.py --db-url postgresql://postgres@localhost:5432/snip
"""

import argparse
import asyncio
import os
import sys

import asyncpg

from snip.common.logging_config import setup_logging
from snip.database.postgres import PostgresLinkStore


async def main():
    parser = argparse.ArgumentParser(description="Initialize the links table")
    parser.add_argument(
        "--db-url",
        default=os.getenv("DATABASE_URL", "postgresql://postgres@localhost:5432/snip"),
        help="PostgreSQL connection URL"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    args = parser.parse_args()

    logger = setup_logging(level="DEBUG" if args.verbose else "INFO")
    store = PostgresLinkStore(db_config=args.db_url, logger=logger)

    try:
        logger.info("Initializing database tables...")
        await store.ensure_tables()

        if not await store.health_check():
            logger.error("Database health check failed")
            return 1

        logger.info("Done")
        return 0

    except (asyncpg.PostgresError, OSError) as e:
        logger.error(f"Error initializing tables: {e}")
        return 1

    finally:
        await store.close()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
