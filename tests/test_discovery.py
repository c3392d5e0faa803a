"""Tests for market discovery: candidate order, fallback and failure."""

from __future__ import annotations

import pytest

from updown_bot.errors import MarketNotFound
from updown_bot.market.discovery import (
    candidate_slugs,
    create_dummy_market,
    discover_market,
    market_slug,
    slug_period,
)

from conftest import PERIOD_START

NOW = PERIOD_START + 42  # mid-period; current_period(NOW) == PERIOD_START
T = PERIOD_START


class TestCandidateSlugs:
    def test_single_prefix_order(self):
        assert list(candidate_slugs(["eth"], NOW)) == [
            f"eth-updown-15m-{T}",
            f"eth-updown-15m-{T - 900}",
            f"eth-updown-15m-{T - 1800}",
            f"eth-updown-15m-{T - 2700}",
        ]

    def test_prefixes_exhausted_in_turn(self):
        slugs = list(candidate_slugs(["sol", "solana"], NOW))
        assert len(slugs) == 8
        assert all(s.startswith("sol-") for s in slugs[:4])
        assert all(s.startswith("solana-") for s in slugs[4:])


@pytest.mark.asyncio
class TestDiscoverMarket:
    async def test_current_period_found_first(self, source):
        source.add_market(market_slug("eth", T), "0xcur")
        source.add_market(market_slug("eth", T - 900), "0xprev")
        market = await discover_market(source, "ETH", ["eth"], NOW)
        assert market.condition_id == "0xcur"
        assert source.slug_calls == [f"eth-updown-15m-{T}"]

    async def test_probes_all_offsets_before_failing(self, source):
        with pytest.raises(MarketNotFound) as exc_info:
            await discover_market(source, "ETH", ["eth"], NOW)
        expected = [
            f"eth-updown-15m-{T}",
            f"eth-updown-15m-{T - 900}",
            f"eth-updown-15m-{T - 1800}",
            f"eth-updown-15m-{T - 2700}",
        ]
        assert source.slug_calls == expected
        assert exc_info.value.tried == expected
        assert exc_info.value.asset == "ETH"

    async def test_falls_back_to_older_period(self, source):
        source.add_market(market_slug("btc", T - 1800), "0xold")
        market = await discover_market(source, "BTC", ["btc"], NOW)
        assert market.condition_id == "0xold"
        assert len(source.slug_calls) == 3

    async def test_skips_closed_and_inactive(self, source):
        source.add_market(market_slug("eth", T), "0xclosed", closed=True)
        source.add_market(market_slug("eth", T - 900), "0xinactive", active=False)
        source.add_market(market_slug("eth", T - 1800), "0xlive")
        market = await discover_market(source, "ETH", ["eth"], NOW)
        assert market.condition_id == "0xlive"

    async def test_network_error_is_not_fatal(self, source):
        source.failing_slugs.add(market_slug("eth", T))
        source.add_market(market_slug("eth", T - 900), "0xprev")
        market = await discover_market(source, "ETH", ["eth"], NOW)
        assert market.condition_id == "0xprev"

    async def test_second_prefix_tried_after_first_exhausted(self, source):
        source.add_market(market_slug("solana", T), "0xsol")
        market = await discover_market(source, "Solana", ["sol", "solana"], NOW)
        assert market.condition_id == "0xsol"
        assert len(source.slug_calls) == 5

    async def test_failure_lists_every_candidate(self, source):
        with pytest.raises(MarketNotFound) as exc_info:
            await discover_market(source, "Solana", ["sol", "solana"], NOW)
        assert len(exc_info.value.tried) == 8
        assert "Solana" in str(exc_info.value)


class TestDummyMarket:
    def test_dummy_is_closed_and_inactive(self):
        m = create_dummy_market("Solana", "sol")
        assert m.closed is True
        assert m.active is False
        assert m.is_dummy
        assert not m.is_tradeable

    def test_dummy_identifiers(self):
        m = create_dummy_market("XRP", "xrp")
        assert m.condition_id == "dummy_xrp_fallback"
        assert m.slug == "xrp-updown-15m-dummy"


class TestSlugPeriod:
    def test_reads_trailing_timestamp(self):
        assert slug_period(market_slug("solana", T - 900)) == T - 900

    def test_dummy_slug_has_no_period(self):
        assert slug_period(create_dummy_market("XRP", "xrp").slug) is None
