"""Configuration system."""

from updown_bot.config.loader import load_config
from updown_bot.config.schema import AppConfig, IndexType

__all__ = ["AppConfig", "IndexType", "load_config"]
