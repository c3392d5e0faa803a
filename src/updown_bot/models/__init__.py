"""Pydantic domain models."""

from updown_bot.models.action import (
    BuyDown,
    BuyUp,
    NoAction,
    SellDown,
    SellUp,
    TradeAction,
)
from updown_bot.models.market import (
    DUMMY_CONDITION_PREFIX,
    MarketData,
    MarketHandle,
    MarketSnapshot,
    OutcomeToken,
    PricePoint,
    TokenPrice,
)

__all__ = [
    "BuyDown",
    "BuyUp",
    "DUMMY_CONDITION_PREFIX",
    "MarketData",
    "MarketHandle",
    "MarketSnapshot",
    "NoAction",
    "OutcomeToken",
    "PricePoint",
    "SellDown",
    "SellUp",
    "TokenPrice",
    "TradeAction",
]
