"""Dataclass for one parsed row of a CBOE symbol-data feed."""

from dataclasses import dataclass


@dataclass(frozen=True)
class OptionSnapshotRecord:
    """One option contract's market data as published in a segment feed."""
    # Identifying fields, kept exactly as the feed spells them
    symbol: str
    call_put: str
    expiration: str
    strike_price: float

    # Measurement fields, overwritten on conflict
    volume: int
    matched: int
    routed: int
    bid_size: int
    bid_price: float
    ask_size: int
    ask_price: float
    last_price: float
