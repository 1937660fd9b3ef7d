"""Gate that skips a run when the exchange has published nothing new."""

import logging
import re
from datetime import datetime
from typing import Optional

import requests
from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from cboe_snapshot_feed.collectors.http import fetch
from cboe_snapshot_feed.config import Settings
from cboe_snapshot_feed.database import get_db
from cboe_snapshot_feed.errors import DatabaseError, ParseError
from cboe_snapshot_feed.models import OptionSnapshot

logger = logging.getLogger(__name__)


def extract_last_updated(text: str, settings: Settings) -> datetime:
    """
    Extracts the "last updated YYYY-MM-DD HH:MM:SS" timestamp from the
    metadata page.

    Raises:
        ParseError: If the marker is absent or the timestamp is not a valid date/time.
    """
    match = re.search(settings.last_updated_pattern, text)
    if match is None:
        raise ParseError("Last update marker not found on the metadata page.")

    try:
        return datetime.strptime(match.group(1), settings.timestamp_format)
    except ValueError as e:
        raise ParseError(f"Malformed last update timestamp {match.group(1)!r}: {e}") from e


def get_source_timestamp(session: requests.Session, settings: Settings) -> datetime:
    """Fetches the metadata page and returns the source's publish timestamp."""
    raw = fetch(session, settings.page_url, settings.http_timeout)
    last_updated = extract_last_updated(raw.decode("utf-8", errors="replace"), settings)
    logger.info(f"Source last update time: {last_updated}")
    return last_updated


def get_stored_max_timestamp(engine: Engine) -> Optional[datetime]:
    """Returns the newest last_updated_time already stored, or None for an empty table."""
    db = None
    try:
        db = next(get_db(engine))
        return db.execute(select(func.max(OptionSnapshot.last_updated_time))).scalar()
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to query stored max last_updated_time: {e}") from e
    finally:
        if db:
            db.close()


def is_fresh(source_timestamp: datetime, stored_max: Optional[datetime]) -> bool:
    """
    True when the stored data already matches the source exactly.

    Deliberately an equality check: a source timestamp older than the
    stored one still triggers a load.
    """
    return stored_max is not None and source_timestamp == stored_max
