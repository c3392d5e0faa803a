"""Market data models: handles, quotes, per-cycle snapshots."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

DUMMY_CONDITION_PREFIX = "dummy_"


class MarketHandle(BaseModel):
    """A discovered (or synthesized dummy) Up/Down market."""

    model_config = ConfigDict(frozen=True)

    condition_id: str
    slug: str
    question: str = ""
    active: bool
    closed: bool
    up_token_id: str | None = None
    down_token_id: str | None = None

    @property
    def is_dummy(self) -> bool:
        return self.condition_id.startswith(DUMMY_CONDITION_PREFIX)

    @property
    def is_tradeable(self) -> bool:
        """True when the market can be priced: live, open and not a dummy."""
        return self.active and not self.closed and not self.is_dummy


class OutcomeToken(BaseModel):
    """One outcome token of a CLOB market."""

    token_id: str
    outcome: str = ""


class TokenPrice(BaseModel):
    """Best bid/ask for one outcome token. Either side may be absent."""

    model_config = ConfigDict(frozen=True)

    token_id: str
    bid: Decimal | None = None
    ask: Decimal | None = None

    @property
    def price(self) -> Decimal | None:
        """Price used for indicators: the ask, falling back to the bid."""
        return self.ask if self.ask is not None else self.bid


class MarketData(BaseModel):
    """Point-in-time market state for one asset."""

    model_config = ConfigDict(frozen=True)

    condition_id: str
    market_name: str
    up_token: TokenPrice | None = None
    down_token: TokenPrice | None = None


class MarketSnapshot(BaseModel):
    """All tracked assets' market data for one poll cycle."""

    model_config = ConfigDict(frozen=True)

    markets: dict[str, MarketData] = Field(default_factory=dict)
    timestamp: int
    period_timestamp: int
    time_remaining_seconds: int


class PricePoint(BaseModel):
    """One observation of an asset's Up and Down prices."""

    model_config = ConfigDict(frozen=True)

    timestamp: int
    up_price: Decimal
    down_price: Decimal
    asset: str
