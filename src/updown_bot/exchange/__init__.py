"""Exchange API clients."""

from updown_bot.exchange.polymarket import PolymarketClient

__all__ = ["PolymarketClient"]
