"""Trending-index strategy: BuyUp / BuyDown / NoAction per asset per cycle.

Each side of a market (the Up token and the Down token) gets its own
index reading. A side is "trending" when its index is above the
threshold; the Up side wins when both are.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from updown_bot.config.schema import IndexType, TradingConfig, TrendingIndexConfig
from updown_bot.models import BuyDown, BuyUp, NoAction, PricePoint, TradeAction
from updown_bot.strategy.indicators import (
    RollingMACD,
    RollingMomentum,
    RollingRSI,
    rsi,
)

MOMENTUM_THRESHOLD_PCT = Decimal(2)


@dataclass(frozen=True)
class StrategyContext:
    index_type: IndexType
    lookback: int
    trend_threshold: Decimal
    position_size: Decimal
    momentum_threshold_pct: Decimal = MOMENTUM_THRESHOLD_PCT
    macd_fast_period: int = 12
    macd_slow_period: int = 26
    macd_signal_period: int = 9

    @classmethod
    def from_config(cls, index: TrendingIndexConfig, trading: TradingConfig) -> StrategyContext:
        return cls(
            index_type=index.mode,
            lookback=index.lookback,
            trend_threshold=Decimal(str(index.threshold)),
            position_size=Decimal(str(trading.position_size)),
            macd_fast_period=index.macd_fast_period,
            macd_slow_period=index.macd_slow_period,
            macd_signal_period=index.macd_signal_period,
        )

    @property
    def threshold(self) -> Decimal:
        """Threshold a side's index must exceed to count as trending."""
        if self.index_type in (IndexType.RSI, IndexType.MACD, IndexType.MACD_SIGNAL):
            return self.trend_threshold
        if self.index_type is IndexType.MOMENTUM:
            return self.momentum_threshold_pct
        raise ValueError(f"unhandled index type: {self.index_type!r}")


@dataclass
class IndicatorSet:
    """The three rolling indicators for one side of one market."""

    rsi: RollingRSI
    macd: RollingMACD
    momentum: RollingMomentum

    @classmethod
    def for_context(cls, ctx: StrategyContext) -> IndicatorSet:
        signal = ctx.macd_signal_period if ctx.index_type is IndexType.MACD_SIGNAL else None
        return cls(
            rsi=RollingRSI(ctx.lookback),
            macd=RollingMACD(ctx.macd_fast_period, ctx.macd_slow_period, signal),
            momentum=RollingMomentum(ctx.lookback),
        )

    def add_price(self, price: Decimal) -> None:
        self.rsi.add_price(price)
        self.macd.add_price(price)
        self.momentum.add_price(price)

    def reset_to_neutral(self) -> None:
        """Give RSI and MACD a usable reading before they have warmed up."""
        self.rsi.reset_to_neutral()
        self.macd.reset_to_neutral()


def compute_index(
    prices: Sequence[Decimal],
    ctx: StrategyContext,
    indicators: IndicatorSet,
) -> Decimal | None:
    """The index reading for one side, or None when it is not available.

    In RSI mode a one-shot RSI over the last ``lookback + 1`` raw prices
    stands in until the rolling RSI is ready. Both MACD modes read the
    MACD line, not the signal line.
    """
    index_type = ctx.index_type
    if index_type is IndexType.RSI:
        if indicators.rsi.is_ready:
            return indicators.rsi.value
        if len(prices) >= ctx.lookback + 1:
            return rsi(prices[-(ctx.lookback + 1):], period=ctx.lookback)
        return None
    if index_type in (IndexType.MACD, IndexType.MACD_SIGNAL):
        return indicators.macd.value if indicators.macd.is_ready else None
    if index_type is IndexType.MOMENTUM:
        return indicators.momentum.value if indicators.momentum.is_ready else None
    raise ValueError(f"unhandled index type: {index_type!r}")


def is_trending(index: Decimal | None, ctx: StrategyContext) -> bool:
    return index is not None and index > ctx.threshold


def decide(
    history: Sequence[PricePoint],
    ctx: StrategyContext,
    up: IndicatorSet,
    down: IndicatorSet,
) -> TradeAction:
    """Pick the action for one asset given its price history and indicators."""
    if not history or len(history) < ctx.lookback:
        return NoAction()

    up_index = compute_index([p.up_price for p in history], ctx, up)
    down_index = compute_index([p.down_price for p in history], ctx, down)

    last = history[-1]
    if is_trending(up_index, ctx):
        return BuyUp(price=last.up_price, shares=ctx.position_size)
    if is_trending(down_index, ctx):
        return BuyDown(price=last.down_price, shares=ctx.position_size)
    return NoAction()
