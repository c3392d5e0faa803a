"""Market period clock, discovery and snapshot building."""

from updown_bot.market.discovery import create_dummy_market, discover_market
from updown_bot.market.period import PERIOD_SECONDS, current_period
from updown_bot.market.snapshot import SnapshotBuilder, fetch_market_data, fetch_snapshot

__all__ = [
    "PERIOD_SECONDS",
    "SnapshotBuilder",
    "create_dummy_market",
    "current_period",
    "discover_market",
    "fetch_market_data",
    "fetch_snapshot",
]
