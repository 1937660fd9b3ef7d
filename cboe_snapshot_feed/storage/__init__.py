"""Persistence steps: upsert and duplicate cleanup."""

from .dedup import deduplicate
from .loader import eastern_now, load_records

__all__ = [
    "deduplicate",
    "eastern_now",
    "load_records",
]
