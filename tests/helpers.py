"""Test helpers: canned CBOE payloads, a fake HTTP session and record builders."""

from datetime import datetime

import requests

from cboe_snapshot_feed.models import OptionSnapshotRecord

PAGE_URL = "https://mock.cboe.test/symbol_data/?mkt=cone"
FEED_URLS = (
    "https://mock.cboe.test/symbol_data/csv/?mkt=cone",
    "https://mock.cboe.test/symbol_data/csv/?mkt=opt",
)

HEADER = "Symbol,Type,Exp,Strike,Vol,Matched,Routed,BidSz,Bid,AskSz,Ask,Last\n"
AAPL_ROW = "AAPL,C,2024-06-21,150,100,50,50,10,1.20,12,1.25,1.22\n"
SOURCE_TS = datetime(2024, 3, 1, 9, 30, 0)


def make_response(url, body: bytes, status: int = 200) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body
    response.url = url
    return response


class FakeSession:
    """Stands in for requests.Session; serves canned bodies per URL and records calls."""

    def __init__(self, pages):
        self.pages = pages
        self.requested = []
        self.timeouts = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        self.timeouts.append(timeout)
        page = self.pages[url]
        if isinstance(page, Exception):
            raise page
        if isinstance(page, tuple):
            status, body = page
            return make_response(url, body, status)
        return make_response(url, page)

    def close(self):
        pass


def metadata_page(ts: str = "2024-03-01 09:30:00") -> bytes:
    return f"<html><body><p>Data last updated {ts} ET</p></body></html>".encode()


def make_record(**overrides) -> OptionSnapshotRecord:
    values = dict(
        symbol="AAPL",
        call_put="C",
        expiration="2024-06-21",
        strike_price=150.0,
        volume=100,
        matched=50,
        routed=50,
        bid_size=10,
        bid_price=1.20,
        ask_size=12,
        ask_price=1.25,
        last_price=1.22,
    )
    values.update(overrides)
    return OptionSnapshotRecord(**values)


