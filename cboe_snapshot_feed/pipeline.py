"""Main pipeline: freshness gate, per-feed fetch/parse/load, duplicate cleanup."""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

import requests
from sqlalchemy.engine import Engine

from cboe_snapshot_feed.collectors.feed_parser import parse_feed
from cboe_snapshot_feed.collectors.freshness import get_source_timestamp, get_stored_max_timestamp, is_fresh
from cboe_snapshot_feed.collectors.http import create_session, fetch
from cboe_snapshot_feed.config import Settings, load_settings
from cboe_snapshot_feed.database import create_db_engine
from cboe_snapshot_feed.errors import FeedError
from cboe_snapshot_feed.storage.dedup import deduplicate
from cboe_snapshot_feed.storage.loader import load_records
from cboe_snapshot_feed.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of one invocation."""
    last_updated_time: datetime
    skipped: bool = False
    records_per_feed: Dict[str, int] = field(default_factory=dict)
    duplicates_removed: int = 0

    @property
    def total_records(self) -> int:
        return sum(self.records_per_feed.values())


def run(settings: Settings, engine: Engine, session: requests.Session, force: bool = False) -> RunResult:
    """
    Runs the whole job once.

    Feeds are processed strictly in the configured order; each feed is
    committed before the next one is fetched. The first error aborts the
    run and leaves earlier feeds committed.

    Args:
        settings: Run settings.
        engine: Engine for the destination database.
        session: HTTP session shared by every request.
        force: Load even if the stored data already matches the source.

    Returns:
        A RunResult describing what was done.
    """
    last_updated_time = get_source_timestamp(session, settings)
    stored_max = get_stored_max_timestamp(engine)

    if is_fresh(last_updated_time, stored_max):
        if not force:
            logger.info("Already updated, no need to update.")
            return RunResult(last_updated_time=last_updated_time, skipped=True)
        logger.warning("Stored data already matches the source; reloading because force is set.")
    else:
        logger.info(f"Source last update {last_updated_time} differs from stored max {stored_max}, loading feeds.")

    result = RunResult(last_updated_time=last_updated_time)
    for url in settings.feed_urls:
        logger.info(f"Fetching CSV from {url}")
        raw = fetch(session, url, settings.http_timeout)
        records = parse_feed(raw)
        result.records_per_feed[url] = load_records(engine, records, last_updated_time, settings)

    result.duplicates_removed = deduplicate(engine)
    logger.info(
        f"Run finished: {result.total_records} records from {len(result.records_per_feed)} feeds, "
        f"{result.duplicates_removed} duplicates removed."
    )
    return result


def main(argv: Optional[list] = None) -> int:
    """Command line entry point; returns the process exit code."""
    parser = argparse.ArgumentParser(
        description="Download CBOE options symbol-data snapshots and upsert them into the database."
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Load the feeds even if the stored data already matches the source timestamp."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Minimum log level (default: INFO)."
    )
    args = parser.parse_args(argv)

    setup_logging(level=getattr(logging, args.log_level))

    engine = None
    session = None
    try:
        settings = load_settings()
        engine = create_db_engine(settings)
        session = create_session(settings)
        run(settings, engine, session, force=args.force)
    except FeedError as e:
        logger.error(f"Run failed: {e}", exc_info=True)
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1
    finally:
        if session:
            session.close()
        if engine:
            engine.dispose()

    return 0


if __name__ == "__main__":
    sys.exit(main())
