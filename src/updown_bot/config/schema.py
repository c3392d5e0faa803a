"""Configuration schema — Pydantic models for config.yaml."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class IndexType(str, Enum):
    """Which trending index drives the decision core."""

    RSI = "rsi"
    MACD = "macd"
    MACD_SIGNAL = "macd_signal"
    MOMENTUM = "momentum"

    @property
    def label(self) -> str:
        """Short name used in index log lines."""
        if self is IndexType.RSI:
            return "RSI"
        if self in (IndexType.MACD, IndexType.MACD_SIGNAL):
            return "MACD"
        if self is IndexType.MOMENTUM:
            return "Momentum"
        raise ValueError(f"unhandled index type: {self!r}")


class PolymarketConfig(BaseModel):
    gamma_api_url: str = "https://gamma-api.polymarket.com"
    clob_api_url: str = "https://clob.polymarket.com"
    api_key: str | None = None
    timeout_s: float = 10.0


class TrendingIndexConfig(BaseModel):
    mode: IndexType = IndexType.RSI
    threshold: float = 70
    lookback: int = Field(default=20, ge=1)
    macd_fast_period: int = Field(default=12, ge=1)
    macd_slow_period: int = Field(default=26, ge=1)
    macd_signal_period: int = Field(default=9, ge=1)

    @field_validator("mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            if value == "macdsignal":
                return IndexType.MACD_SIGNAL
        return value

    @model_validator(mode="after")
    def _check_macd_periods(self) -> TrendingIndexConfig:
        if self.macd_fast_period >= self.macd_slow_period:
            raise ValueError("macd_fast_period must be smaller than macd_slow_period")
        return self


class AssetConfig(BaseModel):
    name: str
    slug_prefixes: list[str] = Field(min_length=1)
    # Disabled assets get a dummy market: shown in snapshots, never priced.
    enabled: bool = True


def _default_assets() -> list[AssetConfig]:
    return [
        AssetConfig(name="ETH", slug_prefixes=["eth"]),
        AssetConfig(name="BTC", slug_prefixes=["btc"]),
        AssetConfig(name="Solana", slug_prefixes=["sol", "solana"], enabled=False),
        AssetConfig(name="XRP", slug_prefixes=["xrp"], enabled=False),
    ]


class TradingConfig(BaseModel):
    check_interval_ms: int = Field(default=500, ge=0)
    position_size: float = Field(default=6, gt=0)
    assets: list[AssetConfig] = Field(default_factory=_default_assets)

    @model_validator(mode="after")
    def _unique_asset_names(self) -> TradingConfig:
        names = [a.name for a in self.assets]
        if len(names) != len(set(names)):
            raise ValueError(f"duplicate asset names: {names}")
        return self

    @property
    def enabled_assets(self) -> list[str]:
        return [a.name for a in self.assets if a.enabled]


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"


class AppConfig(BaseModel):
    mode: Literal["simulation", "live"] = "simulation"
    polymarket: PolymarketConfig = Field(default_factory=PolymarketConfig)
    trending_index: TrendingIndexConfig = Field(default_factory=TrendingIndexConfig)
    trading: TradingConfig = Field(default_factory=TradingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
