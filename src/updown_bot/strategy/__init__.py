"""Indicators and the trending-index decision core."""

from updown_bot.strategy.indicators import RollingMACD, RollingMomentum, RollingRSI, rsi
from updown_bot.strategy.trending import (
    IndicatorSet,
    StrategyContext,
    compute_index,
    decide,
)

__all__ = [
    "IndicatorSet",
    "RollingMACD",
    "RollingMomentum",
    "RollingRSI",
    "StrategyContext",
    "compute_index",
    "decide",
    "rsi",
]
