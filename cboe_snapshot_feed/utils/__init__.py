# cboe_snapshot_feed/utils/__init__.py
"""Utility functions for the cboe_snapshot_feed package."""

from .logging_config import setup_logging

__all__ = [
    "setup_logging",
]
