"""Error taxonomy shared by the exchange adapter, discovery and the loop."""

from __future__ import annotations


class UpDownError(Exception):
    """Base class for all errors raised by this package."""


class NotFoundError(UpDownError):
    """The upstream has no record for the requested identifier."""


class MarketNotFound(NotFoundError):
    """Discovery exhausted every candidate slug without an active market."""

    def __init__(self, asset: str, tried: list[str]):
        self.asset = asset
        self.tried = tried
        super().__init__(
            f"Could not find active {asset} 15-minute up/down market "
            f"(tried {len(tried)} slugs: {', '.join(tried)})"
        )


class PartialDataError(UpDownError):
    """A single field of market data could not be fetched.

    Never propagated past the snapshot builder: the field is left absent.
    """


class QuoteUnavailable(PartialDataError):
    """The order book has no quote for a token on the requested side."""


class ValidationError(UpDownError):
    """An upstream response did not have the expected shape."""


class TransientIOError(UpDownError):
    """Network failure or retryable HTTP status while talking to an upstream."""
