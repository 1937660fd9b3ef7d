"""Removes rows that share a natural key, keeping the most recently loaded one."""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from cboe_snapshot_feed.errors import DatabaseError
from cboe_snapshot_feed.models import OptionSnapshot

logger = logging.getLogger(__name__)


def build_dedup_statement():
    """
    DELETE every row ranked below first within its key group, ordered by
    etl_in_dt descending. Rows are addressed by the surrogate id.
    """
    t = OptionSnapshot.__table__
    ranked = select(
        t.c.id,
        func.row_number().over(
            partition_by=[t.c.symbol, t.c.expiration, t.c.call_put, t.c.strike_price, t.c.last_updated_time],
            order_by=t.c.etl_in_dt.desc(),
        ).label("rn"),
    ).subquery("ranked")
    stale_ids = select(ranked.c.id).where(ranked.c.rn > 1)
    return delete(t).where(t.c.id.in_(stale_ids))


def deduplicate(engine: Engine) -> int:
    """
    Runs the duplicate cleanup in its own transaction.

    Returns:
        The number of rows deleted.

    Raises:
        DatabaseError: If the statement fails.
    """
    try:
        with engine.begin() as conn:
            result = conn.execute(build_dedup_statement())
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to clean duplicate data: {e}") from e

    deleted = max(result.rowcount, 0)
    logger.info(f"Duplicate data cleaned, {deleted} rows removed.")
    return deleted
