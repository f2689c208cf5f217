"""
Seeds the configured relational database with the starter catalogue.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.config import get_settings
from backend.db import PostgresDbClient
from backend.seed import seed_database

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the storefront database")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Override DATABASE_URL",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Insert seed rows even when products already exist",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    database_url = args.database_url or get_settings().database_url
    if not database_url:
        logger.error("DATABASE_URL is not set and --database-url was not given")
        return 2

    result = seed_database(PostgresDbClient(database_url), force=args.force)
    if not result.ok:
        logger.error("Seed failed: %s", result.error)
        return 1
    if result.skipped:
        logger.info("Nothing to do; pass --force to seed anyway")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
