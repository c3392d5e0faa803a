"""Market discovery: find the live Up/Down market for the current period.

The venue publishes a new market per asset every period, but with some
lag: right after a period boundary the new slug may not resolve yet. So
for each slug prefix we probe the current period and then up to three
earlier ones before moving on to the next prefix.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from updown_bot.errors import MarketNotFound, UpDownError
from updown_bot.logging import get_logger
from updown_bot.market.period import PERIOD_SECONDS, current_period
from updown_bot.market.ports import MarketLookup
from updown_bot.models import DUMMY_CONDITION_PREFIX, MarketHandle

log = get_logger(__name__)

MAX_PERIODS_BACK = 3


def market_slug(prefix: str, period_start: int) -> str:
    return f"{prefix}-updown-15m-{period_start}"


def slug_period(slug: str) -> int | None:
    """Period start encoded at the end of a market slug, if there is one."""
    _, _, tail = slug.rpartition("-")
    return int(tail) if tail.isdigit() else None


def candidate_slugs(slug_prefixes: Sequence[str], reference_time: float) -> Iterator[str]:
    """Yield slugs in probe order: per prefix, current period then older ones."""
    period = current_period(reference_time)
    for prefix in slug_prefixes:
        for offset in range(MAX_PERIODS_BACK + 1):
            yield market_slug(prefix, period - offset * PERIOD_SECONDS)


async def discover_market(
    lookup: MarketLookup,
    asset: str,
    slug_prefixes: Sequence[str],
    reference_time: float,
) -> MarketHandle:
    """Return the first active, open market among the candidate slugs.

    Lookup is best-effort per candidate: a missing slug, a network error
    or a malformed response just moves on to the next candidate.

    Raises:
        MarketNotFound: no candidate resolved to an active market.
    """
    tried: list[str] = []
    for slug in candidate_slugs(slug_prefixes, reference_time):
        tried.append(slug)
        try:
            market = await lookup.get_market_by_slug(slug)
        except UpDownError as exc:
            log.debug("discovery_candidate_failed", asset=asset, slug=slug, error=str(exc))
            continue
        if market.active and not market.closed:
            log.info(
                "market_discovered",
                asset=asset,
                slug=market.slug,
                condition_id=market.condition_id,
            )
            return market
        log.debug("discovery_candidate_inactive", asset=asset, slug=slug)

    raise MarketNotFound(asset, tried)


def create_dummy_market(name: str, slug_prefix: str) -> MarketHandle:
    """A permanently closed stand-in for an asset without live integration."""
    return MarketHandle(
        condition_id=f"{DUMMY_CONDITION_PREFIX}{name.lower()}_fallback",
        slug=f"{slug_prefix}-updown-15m-dummy",
        question=f"{name} Up/Down 15m (Dummy)",
        active=False,
        closed=True,
    )
