"""Run configuration.

Everything except the database connection string is a compiled-in
constant; the constants live on :class:`Settings` so tests can point the
job at mock endpoints.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

from cboe_snapshot_feed.errors import ConfigurationError

PAGE_URL = "https://www.cboe.com/us/options/market_statistics/symbol_data/?mkt=cone"

# Processed in this order, one segment at a time
FEED_URLS = (
    "https://www.cboe.com/us/options/market_statistics/symbol_data/csv/?mkt=cone",
    "https://www.cboe.com/us/options/market_statistics/symbol_data/csv/?mkt=opt",
    "https://www.cboe.com/us/options/market_statistics/symbol_data/csv/?mkt=ctwo",
    "https://www.cboe.com/us/options/market_statistics/symbol_data/csv/?mkt=exo",
)

LAST_UPDATED_PATTERN = r"last updated (\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
REFERENCE_TIMEZONE = "America/New_York"

DATABASE_URL_ENV = "DATABASE_URL"


@dataclass(frozen=True)
class Settings:
    """Immutable settings shared by every step of one run."""
    database_url: str
    page_url: str = PAGE_URL
    feed_urls: Tuple[str, ...] = FEED_URLS
    last_updated_pattern: str = LAST_UPDATED_PATTERN
    timestamp_format: str = TIMESTAMP_FORMAT
    reference_timezone: str = REFERENCE_TIMEZONE
    http_timeout: float = 30.0
    db_connect_timeout: int = 10
    db_statement_timeout: int = 300
    user_agent: str = "cboe-snapshot-feed/0.1"


def load_settings(database_url: Optional[str] = None) -> Settings:
    """
    Builds the run settings.

    The database URL is taken from the argument if given, otherwise from
    the DATABASE_URL environment variable (a .env file in the working
    directory is loaded first).

    Raises:
        ConfigurationError: If no database URL is available.
    """
    if not database_url:
        load_dotenv()
        database_url = os.getenv(DATABASE_URL_ENV, "").strip()

    if not database_url:
        raise ConfigurationError(f"{DATABASE_URL_ENV} environment variable not set.")

    return Settings(database_url=database_url)
