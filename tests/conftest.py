"""Shared fixtures: SQLite-backed engines with the snapshot schema."""

import pytest

from cboe_snapshot_feed.config import Settings
from cboe_snapshot_feed.database import create_db_engine
from cboe_snapshot_feed.models import init_schema

from tests.helpers import FEED_URLS, PAGE_URL


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'feed.db'}",
        page_url=PAGE_URL,
        feed_urls=FEED_URLS,
        http_timeout=5.0,
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    init_schema(engine)
    yield engine
    engine.dispose()
