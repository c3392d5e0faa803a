"""Shared test fixtures."""

from __future__ import annotations

from decimal import Decimal

import pytest

from updown_bot.errors import NotFoundError, QuoteUnavailable, TransientIOError
from updown_bot.models import MarketHandle, OutcomeToken

# 2026-01-01T00:00:00Z, a period boundary
PERIOD_START = 1767225600


class FakeMarketSource:
    """In-memory stand-in for PolymarketClient that records every call."""

    def __init__(self) -> None:
        self.markets: dict[str, MarketHandle] = {}
        self.tokens: dict[str, list[OutcomeToken]] = {}
        self.prices: dict[tuple[str, str], Decimal] = {}
        self.failing_slugs: set[str] = set()
        self.slug_calls: list[str] = []
        self.detail_calls: list[str] = []
        self.price_calls: list[tuple[str, str]] = []

    async def get_market_by_slug(self, slug: str) -> MarketHandle:
        self.slug_calls.append(slug)
        if slug in self.failing_slugs:
            raise TransientIOError(f"connection reset fetching {slug}")
        try:
            return self.markets[slug]
        except KeyError:
            raise NotFoundError(slug) from None

    async def get_market_details(self, condition_id: str) -> list[OutcomeToken]:
        self.detail_calls.append(condition_id)
        try:
            return self.tokens[condition_id]
        except KeyError:
            raise NotFoundError(condition_id) from None

    async def get_side_price(self, token_id: str, side: str) -> Decimal:
        self.price_calls.append((token_id, side))
        try:
            return self.prices[(token_id, side)]
        except KeyError:
            raise QuoteUnavailable(f"no {side} for {token_id}") from None

    # --- seeding helpers ---

    def add_market(
        self,
        slug: str,
        condition_id: str,
        *,
        active: bool = True,
        closed: bool = False,
        up_token_id: str | None = None,
        down_token_id: str | None = None,
    ) -> MarketHandle:
        handle = MarketHandle(
            condition_id=condition_id,
            slug=slug,
            active=active,
            closed=closed,
            up_token_id=up_token_id,
            down_token_id=down_token_id,
        )
        self.markets[slug] = handle
        return handle

    def add_tokens(
        self,
        condition_id: str,
        up: tuple[str, str] = ("Up", "up-tok"),
        down: tuple[str, str] = ("Down", "down-tok"),
    ) -> None:
        self.tokens[condition_id] = [
            OutcomeToken(outcome=up[0], token_id=up[1]),
            OutcomeToken(outcome=down[0], token_id=down[1]),
        ]

    def quote(self, token_id: str, bid: str | None, ask: str | None) -> None:
        if bid is not None:
            self.prices[(token_id, "BUY")] = Decimal(bid)
        if ask is not None:
            self.prices[(token_id, "SELL")] = Decimal(ask)


@pytest.fixture
def source() -> FakeMarketSource:
    return FakeMarketSource()
