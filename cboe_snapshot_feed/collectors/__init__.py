"""Collectors for the CBOE symbol-data pages and feeds."""

from .feed_parser import parse_feed
from .freshness import extract_last_updated, get_source_timestamp, get_stored_max_timestamp, is_fresh
from .http import create_session, fetch

__all__ = [
    "create_session",
    "fetch",
    "parse_feed",
    "extract_last_updated",
    "get_source_timestamp",
    "get_stored_max_timestamp",
    "is_fresh",
]
