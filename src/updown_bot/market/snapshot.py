"""Snapshot builder: fetches every tracked asset's Up/Down quotes per cycle.

Pricing is best-effort: each of the four quotes per asset (up bid/ask,
down bid/ask) is fetched independently and a failure leaves only that
field empty. A snapshot is always returned; only an unexpected internal
error escapes.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from decimal import Decimal
from typing import TypeVar

from updown_bot.config.schema import AssetConfig
from updown_bot.errors import MarketNotFound, UpDownError
from updown_bot.logging import get_logger
from updown_bot.market.discovery import create_dummy_market, discover_market, slug_period
from updown_bot.market.period import current_period, time_remaining
from updown_bot.market.ports import MarketPricing, MarketSource
from updown_bot.models import (
    MarketData,
    MarketHandle,
    MarketSnapshot,
    OutcomeToken,
    TokenPrice,
)

log = get_logger(__name__)

T = TypeVar("T")

# CLOB side whose /price answers each half of the spread.
BID_SIDE = "BUY"
ASK_SIDE = "SELL"

# Minimum gap between discovery probes for an asset whose market is stale.
REDISCOVER_INTERVAL_S = 10


async def best_effort(fetch: Awaitable[T], what: str, **context) -> T | None:
    """Await *fetch*, degrading any UpDownError to None.

    This is the documented contract for per-field market data: a missing
    quote or a network hiccup empties one field, it never fails the cycle.
    """
    try:
        return await fetch
    except UpDownError as exc:
        log.debug("fetch_degraded", what=what, error=str(exc), **context)
        return None


def _find_outcome(tokens: Sequence[OutcomeToken], label: str, alias: str) -> OutcomeToken | None:
    for token in tokens:
        if token.outcome.lower() == label or token.outcome == alias:
            return token
    return None


def identity_only(handle: MarketHandle, asset: str) -> MarketData:
    return MarketData(condition_id=handle.condition_id, market_name=asset)


async def fetch_market_data(
    pricing: MarketPricing,
    handle: MarketHandle,
    asset: str,
) -> MarketData:
    """Build one asset's MarketData from its outcome tokens and CLOB quotes.

    Token ids come from the handle when discovery resolved them, else
    from the CLOB market details.

    Closed, inactive and dummy markets are not priced; they come back
    with identifying fields only.
    """
    if not handle.is_tradeable:
        return identity_only(handle, asset)

    if handle.up_token_id and handle.down_token_id:
        # Gamma already named the outcome tokens; no CLOB details round trip.
        up: OutcomeToken | None = OutcomeToken(token_id=handle.up_token_id, outcome="Up")
        down: OutcomeToken | None = OutcomeToken(token_id=handle.down_token_id, outcome="Down")
    else:
        tokens = await best_effort(
            pricing.get_market_details(handle.condition_id),
            "market_details",
            asset=asset,
        )
        if tokens is None:
            return identity_only(handle, asset)
        up = _find_outcome(tokens, "up", "Yes")
        down = _find_outcome(tokens, "down", "No")

    async def quote(token: OutcomeToken | None, side: str) -> Decimal | None:
        if token is None or not token.token_id:
            return None
        return await best_effort(
            pricing.get_side_price(token.token_id, side),
            "quote",
            asset=asset,
            token_id=token.token_id,
            side=side,
        )

    up_bid, up_ask, down_bid, down_ask = await asyncio.gather(
        quote(up, BID_SIDE),
        quote(up, ASK_SIDE),
        quote(down, BID_SIDE),
        quote(down, ASK_SIDE),
    )

    return MarketData(
        condition_id=handle.condition_id,
        market_name=asset,
        up_token=TokenPrice(token_id=up.token_id, bid=up_bid, ask=up_ask) if up else None,
        down_token=TokenPrice(token_id=down.token_id, bid=down_bid, ask=down_ask) if down else None,
    )


async def fetch_snapshot(
    pricing: MarketPricing,
    markets: Mapping[str, MarketHandle],
    now: float | None = None,
) -> MarketSnapshot:
    """Fetch every asset concurrently and stamp the current period."""
    if now is None:
        now = time.time()
    names = list(markets)
    results = await asyncio.gather(
        *(fetch_market_data(pricing, markets[name], name) for name in names)
    )
    now_s = int(now)
    return MarketSnapshot(
        markets=dict(zip(names, results)),
        timestamp=now_s,
        period_timestamp=current_period(now_s),
        time_remaining_seconds=time_remaining(now_s),
    )


class SnapshotBuilder:
    """Owns the per-asset market handles and produces one snapshot per call.

    Live assets are discovered at startup (``discover``). A handle is
    stale once the clock is past the period its market belongs to,
    which includes an older-period market picked up while the venue
    lags behind. Stale assets are re-probed at most once every
    ``REDISCOVER_INTERVAL_S``; a failed probe keeps the previous handle.
    """

    def __init__(
        self,
        source: MarketSource,
        assets: Sequence[AssetConfig],
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._source = source
        self._assets = list(assets)
        self._clock = clock
        self.markets: dict[str, MarketHandle] = {
            asset.name: create_dummy_market(asset.name, asset.slug_prefixes[0])
            for asset in self._assets
            if not asset.enabled
        }
        # asset -> start of the period its current market belongs to
        self._market_period: dict[str, int] = {}
        self._probed_at: dict[str, float] = {}

    def _record(self, name: str, handle: MarketHandle, now: float) -> None:
        self.markets[name] = handle
        period = slug_period(handle.slug)
        self._market_period[name] = period if period is not None else current_period(now)

    async def discover(self) -> dict[str, MarketHandle]:
        """Resolve every live asset's market. Raises MarketNotFound on failure."""
        now = self._clock()
        for asset in self._assets:
            if not asset.enabled:
                continue
            self._probed_at[asset.name] = now
            handle = await discover_market(self._source, asset.name, asset.slug_prefixes, now)
            self._record(asset.name, handle, now)
        return dict(self.markets)

    async def _rediscover(self, asset: AssetConfig, now: float) -> None:
        self._probed_at[asset.name] = now
        try:
            handle = await discover_market(self._source, asset.name, asset.slug_prefixes, now)
        except MarketNotFound as exc:
            log.warning("market_rollover_pending", asset=asset.name, error=str(exc))
            return
        previous = self.markets.get(asset.name)
        self._record(asset.name, handle, now)
        if previous is None or previous.condition_id != handle.condition_id:
            log.info("market_rolled_over", asset=asset.name, slug=handle.slug)

    def _is_stale(self, name: str, now: float) -> bool:
        if self._market_period.get(name, -1) >= current_period(now):
            return False
        return now - self._probed_at.get(name, float("-inf")) >= REDISCOVER_INTERVAL_S

    async def refresh_markets(self, now: float) -> None:
        stale = [
            asset for asset in self._assets
            if asset.enabled and self._is_stale(asset.name, now)
        ]
        if stale:
            await asyncio.gather(*(self._rediscover(asset, now) for asset in stale))

    async def __call__(self) -> MarketSnapshot:
        now = self._clock()
        await self.refresh_markets(now)
        ordered = {a.name: self.markets[a.name] for a in self._assets if a.name in self.markets}
        return await fetch_snapshot(self._source, ordered, now=now)
