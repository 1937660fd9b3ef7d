"""CBOE options symbol-data snapshot feed.

Downloads the exchange's per-segment CSV snapshots, upserts them into
``t_options_cboe_snapshot`` and removes stray duplicates afterwards.
"""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .pipeline import RunResult, run

__all__ = [
    "Settings",
    "load_settings",
    "RunResult",
    "run",
    "__version__",
]
