"""Tests for the end-to-end pipeline and its command line entry point."""

import logging

import pytest
import requests
from sqlalchemy import select

from cboe_snapshot_feed import config, pipeline
from cboe_snapshot_feed.errors import NetworkError, ParseError
from cboe_snapshot_feed.models import OptionSnapshot
from cboe_snapshot_feed.pipeline import main, run
from cboe_snapshot_feed.storage.loader import load_records

from tests.helpers import AAPL_ROW, FEED_URLS, HEADER, PAGE_URL, SOURCE_TS, FakeSession, make_record, metadata_page

MSFT_ROW = "MSFT,P,2024-07-19,400,7,3,4,5,2.50,6,2.60,2.55\n"


def _pages(**overrides):
    pages = {
        PAGE_URL: metadata_page(),
        FEED_URLS[0]: (HEADER + AAPL_ROW).encode(),
        FEED_URLS[1]: (HEADER + MSFT_ROW).encode(),
    }
    pages.update(overrides)
    return pages


def _rows(engine):
    with engine.connect() as conn:
        return conn.execute(select(OptionSnapshot.__table__).order_by(OptionSnapshot.id)).mappings().all()


def test_full_load_on_empty_table(engine, settings):
    session = FakeSession(_pages())

    result = run(settings, engine, session)

    assert not result.skipped
    assert result.last_updated_time == SOURCE_TS
    assert result.records_per_feed == {FEED_URLS[0]: 1, FEED_URLS[1]: 1}
    assert result.total_records == 2
    assert result.duplicates_removed == 0
    assert session.requested == [PAGE_URL, FEED_URLS[0], FEED_URLS[1]]

    rows = _rows(engine)
    assert [r["symbol"] for r in rows] == ["AAPL", "MSFT"]
    assert {r["last_updated_time"] for r in rows} == {SOURCE_TS}


def test_skips_when_stored_matches_source(engine, settings, monkeypatch):
    load_records(engine, [make_record()], SOURCE_TS, settings)
    session = FakeSession({PAGE_URL: metadata_page()})

    def fail(*_args, **_kwargs):
        raise AssertionError("must not be called when the data is current")

    monkeypatch.setattr(pipeline, "load_records", fail)
    monkeypatch.setattr(pipeline, "deduplicate", fail)

    result = run(settings, engine, session)

    assert result.skipped
    assert session.requested == [PAGE_URL]


def test_older_source_timestamp_still_loads(engine, settings):
    load_records(engine, [make_record()], SOURCE_TS, settings)
    session = FakeSession(_pages(**{PAGE_URL: metadata_page("2024-02-29 16:00:00")}))

    result = run(settings, engine, session)

    assert not result.skipped
    assert len(_rows(engine)) == 3


def test_force_reloads_current_data(engine, settings):
    load_records(engine, [make_record(volume=1)], SOURCE_TS, settings)
    session = FakeSession(_pages())

    result = run(settings, engine, session, force=True)

    assert not result.skipped
    rows = _rows(engine)
    assert len(rows) == 2
    assert rows[0]["volume"] == 100


def test_feed_failure_keeps_earlier_feeds(engine, settings, monkeypatch):
    """Feeds before the failing one stay committed; dedup never runs."""
    session = FakeSession(_pages(**{FEED_URLS[1]: (500, b"server error")}))
    called = []
    monkeypatch.setattr(pipeline, "deduplicate", lambda _engine: called.append(True))

    with pytest.raises(NetworkError):
        run(settings, engine, session)

    assert [r["symbol"] for r in _rows(engine)] == ["AAPL"]
    assert called == []


def test_missing_timestamp_aborts_before_fetching(engine, settings):
    session = FakeSession({PAGE_URL: b"<html>maintenance</html>"})

    with pytest.raises(ParseError):
        run(settings, engine, session)
    assert session.requested == [PAGE_URL]


def test_main_runs_and_returns_zero(tmp_path, monkeypatch, engine, settings):
    monkeypatch.setenv("DATABASE_URL", settings.database_url)
    monkeypatch.setattr(config, "Settings", lambda database_url: settings)
    monkeypatch.setattr(pipeline, "create_session", lambda _settings: FakeSession(_pages()))

    assert main([]) == 0
    assert len(_rows(engine)) == 2


def test_main_without_database_url_fails(tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda: False)

    with caplog.at_level(logging.ERROR):
        assert main([]) == 1
    assert "DATABASE_URL" in caplog.text


def test_main_network_failure_returns_one(monkeypatch, engine, settings, caplog):
    monkeypatch.setenv("DATABASE_URL", settings.database_url)
    monkeypatch.setattr(config, "Settings", lambda database_url: settings)
    failing = FakeSession({PAGE_URL: requests.ConnectionError("refused")})
    monkeypatch.setattr(pipeline, "create_session", lambda _settings: failing)

    with caplog.at_level(logging.ERROR):
        assert main(["--log-level", "DEBUG"]) == 1
    assert "Run failed" in caplog.text
