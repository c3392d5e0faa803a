"""Collaborator interfaces consumed by discovery and the snapshot builder.

``PolymarketClient`` implements both; tests substitute in-memory fakes.
Implementations signal failure by raising ``UpDownError`` subclasses.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Literal, Protocol

from updown_bot.models import MarketHandle, OutcomeToken

Side = Literal["BUY", "SELL"]


class MarketLookup(Protocol):
    async def get_market_by_slug(self, slug: str) -> MarketHandle:
        """Return the market for *slug*; raise NotFoundError if none exists."""
        ...


class MarketPricing(Protocol):
    async def get_market_details(self, condition_id: str) -> list[OutcomeToken]:
        ...

    async def get_side_price(self, token_id: str, side: Side) -> Decimal:
        """Return the best price on *side*; raise QuoteUnavailable if none."""
        ...


class MarketSource(MarketLookup, MarketPricing, Protocol):
    """Lookup and pricing from a single venue client."""
