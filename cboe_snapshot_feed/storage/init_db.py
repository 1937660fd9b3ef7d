"""
Script to initialize the destination database by creating the snapshot
table, its unique key and indexes.

Includes an option to drop the existing table before creation.
"""

import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from cboe_snapshot_feed.config import load_settings
from cboe_snapshot_feed.database import create_db_engine
from cboe_snapshot_feed.errors import DatabaseError, FeedError
from cboe_snapshot_feed.models import TABLE_NAME, init_schema
from cboe_snapshot_feed.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def initialize_database(engine, drop_existing: bool = False):
    """
    Initializes the database by creating the snapshot table.

    Args:
        engine: SQLAlchemy engine for the destination database.
        drop_existing: If True, drops the table if it exists before creating it.
    """
    logger.info("Starting database initialization...")
    if drop_existing:
        logger.warning(f"Drop existing table requested. Dropping '{TABLE_NAME}'...")
    try:
        init_schema(engine, drop_existing=drop_existing)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to create table '{TABLE_NAME}': {e}") from e
    logger.info(f"Table '{TABLE_NAME}' created or already exists.")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Initialize the destination database by creating the snapshot table."
    )
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop the existing table before creating it."
    )
    args = parser.parse_args(argv)

    setup_logging(level=logging.INFO)
    try:
        engine = create_db_engine(load_settings())
        try:
            initialize_database(engine, drop_existing=args.drop)
        finally:
            engine.dispose()
    except FeedError as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        return 1

    logger.info("Database initialization finished successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
