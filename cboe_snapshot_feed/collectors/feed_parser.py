"""Parses a CBOE symbol-data CSV feed into snapshot records."""

import csv
import io
import logging
from typing import List

import pandas as pd

from cboe_snapshot_feed.models import OptionSnapshotRecord

logger = logging.getLogger(__name__)

# Feed column order; anything past the twelfth column is ignored
COLUMNS = [
    "symbol",
    "call_put",
    "expiration",
    "strike_price",
    "volume",
    "matched",
    "routed",
    "bid_size",
    "bid_price",
    "ask_size",
    "ask_price",
    "last_price",
]
MIN_FIELDS = len(COLUMNS)

FLOAT_COLUMNS = ["strike_price", "bid_price", "ask_price", "last_price"]
INT_COLUMNS = ["volume", "matched", "routed", "bid_size", "ask_size"]

# Optionally signed decimal integer literal; range is checked separately
_INT_PATTERN = r"[+-]?\d+"
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def _split_rows(raw: bytes) -> List[List[str]]:
    """Splits the feed into data rows, dropping the header and rows that are too short."""
    text = raw.decode("utf-8-sig", errors="replace")
    rows = [row for row in csv.reader(io.StringIO(text)) if row]
    if not rows:
        return []

    data_rows = rows[1:]
    kept = [row[:MIN_FIELDS] for row in data_rows if len(row) >= MIN_FIELDS]
    skipped = len(data_rows) - len(kept)
    if skipped:
        logger.warning(f"Skipped {skipped} feed rows with fewer than {MIN_FIELDS} fields.")
    return kept


def _unpadded(series: pd.Series) -> pd.Series:
    """True for cells without leading or trailing whitespace."""
    return (series == series.str.strip()).astype(bool)


def _to_float(series: pd.Series) -> pd.Series:
    """Unparseable, whitespace-padded or non-finite cells become 0.0."""
    values = pd.to_numeric(series.where(_unpadded(series), ""), errors="coerce").astype("float64")
    values = values.mask(values.abs() == float("inf"))
    return values.fillna(0.0)


def _to_int(series: pd.Series) -> pd.Series:
    """Anything that is not an integer literal within BIGINT range becomes 0."""
    valid = series.str.fullmatch(_INT_PATTERN).astype(bool)
    # Python ints first so values near the int64 limits keep full precision
    values = series.where(valid, "0").map(int)
    in_range = values.map(lambda v: INT64_MIN <= v <= INT64_MAX).astype(bool)
    return values.where(in_range, 0).astype("int64")


def parse_feed(raw: bytes) -> List[OptionSnapshotRecord]:
    """
    Parses raw feed bytes into records, in feed order.

    Malformed numeric cells never abort the parse; they are replaced with
    zero. Rows with fewer than twelve fields are skipped.

    Args:
        raw: The CSV body as downloaded, header row included.

    Returns:
        A list of OptionSnapshotRecord, one per usable data row.
    """
    rows = _split_rows(raw)
    if not rows:
        return []

    df = pd.DataFrame(rows, columns=COLUMNS, dtype="object")
    for column in FLOAT_COLUMNS:
        df[column] = _to_float(df[column])
    for column in INT_COLUMNS:
        df[column] = _to_int(df[column])

    # Convert numpy scalars to Python types so every DB driver can bind them
    records = [
        OptionSnapshotRecord(
            symbol=str(row.symbol),
            call_put=str(row.call_put),
            expiration=str(row.expiration),
            strike_price=float(row.strike_price),
            volume=int(row.volume),
            matched=int(row.matched),
            routed=int(row.routed),
            bid_size=int(row.bid_size),
            bid_price=float(row.bid_price),
            ask_size=int(row.ask_size),
            ask_price=float(row.ask_price),
            last_price=float(row.last_price),
        )
        for row in df.itertuples(index=False)
    ]
    return records
