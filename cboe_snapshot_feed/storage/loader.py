"""Transactional upsert of parsed feed records into the snapshot table."""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cboe_snapshot_feed.config import Settings
from cboe_snapshot_feed.database import get_db
from cboe_snapshot_feed.errors import DatabaseError
from cboe_snapshot_feed.models import MEASUREMENT_FIELDS, NATURAL_KEY, OptionSnapshot, OptionSnapshotRecord

logger = logging.getLogger(__name__)


def eastern_now(settings: Settings) -> datetime:
    """Current wall-clock time in the reference zone, as a naive timestamp."""
    return datetime.now(ZoneInfo(settings.reference_timezone)).replace(tzinfo=None)


def _dialect_insert(engine: Engine):
    """Returns the dialect's insert() construct, which supports ON CONFLICT."""
    dialect = engine.dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise DatabaseError(f"Upsert is not supported for the '{dialect}' dialect.")
    return insert


def build_upsert_statement(engine: Engine):
    """INSERT ... ON CONFLICT (natural key) DO UPDATE SET <measurement fields>."""
    insert = _dialect_insert(engine)
    stmt = insert(OptionSnapshot.__table__)
    return stmt.on_conflict_do_update(
        index_elements=list(NATURAL_KEY),
        set_={field: stmt.excluded[field] for field in MEASUREMENT_FIELDS},
    )


def _to_rows(
    records: Sequence[OptionSnapshotRecord],
    last_updated_time: datetime,
    etl_in_dt: datetime,
) -> List[Dict]:
    """
    Maps records to parameter rows, keeping only the last row per natural key.

    A multi-row statement may not touch the same key twice, so in-feed
    collisions are resolved here with the same last-write-wins outcome
    row-by-row upserts would give.
    """
    rows: Dict[Tuple, Dict] = {}
    for rec in records:
        row = {
            "symbol": rec.symbol,
            "call_put": rec.call_put,
            "expiration": rec.expiration,
            "strike_price": rec.strike_price,
            "volume": rec.volume,
            "matched": rec.matched,
            "routed": rec.routed,
            "bid_size": rec.bid_size,
            "bid_price": rec.bid_price,
            "ask_size": rec.ask_size,
            "ask_price": rec.ask_price,
            "last_price": rec.last_price,
            "last_updated_time": last_updated_time,
            "etl_in_dt": etl_in_dt,
        }
        key = tuple(row[col] for col in NATURAL_KEY)
        rows.pop(key, None)
        rows[key] = row
    return list(rows.values())


def load_records(
    engine: Engine,
    records: Sequence[OptionSnapshotRecord],
    last_updated_time: datetime,
    settings: Settings,
    now: Optional[datetime] = None,
) -> int:
    """
    Upserts one feed's records in a single transaction.

    On a key conflict only the measurement fields and etl_in_dt are
    overwritten. Any failure rolls back the whole feed.

    Args:
        engine: SQLAlchemy engine for the destination database.
        records: Parsed records of one feed.
        last_updated_time: The source publish timestamp of this run.
        settings: Run settings (reference time zone).
        now: Override for the load timestamp; defaults to eastern_now().

    Returns:
        The number of records processed.

    Raises:
        DatabaseError: If the transaction fails.
    """
    if not records:
        logger.info("No records to load for this feed.")
        return 0

    etl_in_dt = now or eastern_now(settings)
    stmt = build_upsert_statement(engine)
    rows = _to_rows(records, last_updated_time, etl_in_dt)

    db: Optional[Session] = None
    try:
        db = next(get_db(engine))
        db.execute(stmt, rows)
        db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Upsert failed, rolling back {len(records)} records: {e}")
        if db:
            db.rollback()
        raise DatabaseError(f"Failed to upsert feed records: {e}") from e
    finally:
        if db:
            db.close()

    logger.info(f"Inserted {len(records)} records.")
    return len(records)
