"""Trending-index bot for 15-minute Up/Down prediction markets."""

__version__ = "0.1.0"
