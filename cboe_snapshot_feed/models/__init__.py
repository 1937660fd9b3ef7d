# cboe_snapshot_feed/models/__init__.py
"""Data models for the cboe_snapshot_feed package."""

from .option_snapshot import (
    MEASUREMENT_FIELDS,
    NATURAL_KEY,
    TABLE_NAME,
    Base,
    OptionSnapshot,
    init_schema,
)
from .record import OptionSnapshotRecord

__all__ = [
    "Base",
    "OptionSnapshot",
    "OptionSnapshotRecord",
    "init_schema",
    "TABLE_NAME",
    "NATURAL_KEY",
    "MEASUREMENT_FIELDS",
]
