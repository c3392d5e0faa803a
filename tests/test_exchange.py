"""Tests for the Polymarket client against mocked HTTP."""

from __future__ import annotations

from decimal import Decimal

import httpx
import pytest
import respx
from httpx import Response

from updown_bot.errors import (
    NotFoundError,
    QuoteUnavailable,
    TransientIOError,
    ValidationError,
)
from updown_bot.exchange.polymarket import PolymarketClient

GAMMA = "https://gamma.test"
CLOB = "https://clob.test"
SLUG = "eth-updown-15m-1767225600"


def _client(**kwargs) -> PolymarketClient:
    return PolymarketClient(gamma_url=GAMMA, clob_url=CLOB, **kwargs)


def _event(**market) -> dict:
    base = {
        "conditionId": "0xabc",
        "slug": SLUG,
        "question": "Ethereum Up or Down?",
        "active": True,
        "closed": False,
        "outcomes": '["Up", "Down"]',
        "clobTokenIds": '["111", "222"]',
    }
    base.update(market)
    return {"slug": SLUG, "markets": [base]}


class TestPolymarketClientHelpers:
    def test_default_urls(self):
        c = PolymarketClient()
        assert c.gamma_url == "https://gamma-api.polymarket.com"
        assert c.clob_url == "https://clob.polymarket.com"

    def test_trailing_slash_stripped(self):
        c = PolymarketClient(gamma_url="https://g.test/", clob_url="https://c.test/")
        assert c.gamma_url == "https://g.test"
        assert c.clob_url == "https://c.test"

    def test_parse_json_list(self):
        assert PolymarketClient.parse_json_list('["Up", "Down"]') == ["Up", "Down"]
        assert PolymarketClient.parse_json_list(["a"]) == ["a"]
        assert PolymarketClient.parse_json_list(None) == []
        assert PolymarketClient.parse_json_list("") == []
        assert PolymarketClient.parse_json_list("not json") == []
        assert PolymarketClient.parse_json_list('{"a": 1}') == []

    def test_parse_market_yes_no_outcomes(self):
        handle = PolymarketClient.parse_market(
            {"conditionId": "0x1", "outcomes": '["Yes", "No"]', "clobTokenIds": '["y", "n"]'},
            SLUG,
        )
        assert handle.up_token_id == "y"
        assert handle.down_token_id == "n"
        assert handle.slug == SLUG

    def test_parse_market_requires_condition_id(self):
        with pytest.raises(ValidationError):
            PolymarketClient.parse_market({"slug": SLUG}, SLUG)


@pytest.mark.asyncio
class TestGetMarketBySlug:
    @respx.mock
    async def test_parses_event_market(self):
        respx.get(f"{GAMMA}/events/slug/{SLUG}").mock(return_value=Response(200, json=_event()))
        client = _client()
        handle = await client.get_market_by_slug(SLUG)
        await client.close()

        assert handle.condition_id == "0xabc"
        assert handle.active is True and handle.closed is False
        assert handle.up_token_id == "111"
        assert handle.down_token_id == "222"
        assert handle.question == "Ethereum Up or Down?"

    @respx.mock
    async def test_404_is_not_found(self):
        respx.get(f"{GAMMA}/events/slug/{SLUG}").mock(return_value=Response(404))
        client = _client()
        with pytest.raises(NotFoundError):
            await client.get_market_by_slug(SLUG)
        await client.close()

    @respx.mock
    async def test_server_error_is_transient(self):
        respx.get(f"{GAMMA}/events/slug/{SLUG}").mock(return_value=Response(503))
        client = _client()
        with pytest.raises(TransientIOError):
            await client.get_market_by_slug(SLUG)
        await client.close()

    @respx.mock
    async def test_connection_error_is_transient(self):
        respx.get(f"{GAMMA}/events/slug/{SLUG}").mock(side_effect=httpx.ConnectError)
        client = _client()
        with pytest.raises(TransientIOError):
            await client.get_market_by_slug(SLUG)
        await client.close()

    @respx.mock
    async def test_event_without_markets(self):
        respx.get(f"{GAMMA}/events/slug/{SLUG}").mock(
            return_value=Response(200, json={"slug": SLUG, "markets": []})
        )
        client = _client()
        with pytest.raises(NotFoundError):
            await client.get_market_by_slug(SLUG)
        await client.close()

    @respx.mock
    async def test_non_json_body(self):
        respx.get(f"{GAMMA}/events/slug/{SLUG}").mock(
            return_value=Response(200, text="<html>maintenance</html>")
        )
        client = _client()
        with pytest.raises(ValidationError):
            await client.get_market_by_slug(SLUG)
        await client.close()

    @respx.mock
    async def test_api_key_sent_as_bearer(self):
        route = respx.get(f"{GAMMA}/events/slug/{SLUG}").mock(return_value=Response(200, json=_event()))
        client = _client(api_key="secret")
        await client.get_market_by_slug(SLUG)
        await client.close()
        assert route.calls.last.request.headers["Authorization"] == "Bearer secret"

    @respx.mock
    async def test_no_auth_header_without_key(self):
        route = respx.get(f"{GAMMA}/events/slug/{SLUG}").mock(return_value=Response(200, json=_event()))
        client = _client()
        await client.get_market_by_slug(SLUG)
        await client.close()
        assert "Authorization" not in route.calls.last.request.headers


@pytest.mark.asyncio
class TestClobEndpoints:
    @respx.mock
    async def test_market_details_tokens(self):
        respx.get(f"{CLOB}/markets/0xabc").mock(
            return_value=Response(
                200,
                json={
                    "condition_id": "0xabc",
                    "tokens": [
                        {"token_id": "111", "outcome": "Up", "price": 0.53, "winner": False},
                        {"token_id": "222", "outcome": "Down", "price": 0.47, "winner": False},
                    ],
                },
            )
        )
        client = _client()
        tokens = await client.get_market_details("0xabc")
        await client.close()
        assert [t.token_id for t in tokens] == ["111", "222"]
        assert tokens[0].outcome == "Up"

    @respx.mock
    async def test_market_details_without_tokens(self):
        respx.get(f"{CLOB}/markets/0xabc").mock(return_value=Response(200, json={"condition_id": "0xabc"}))
        client = _client()
        assert await client.get_market_details("0xabc") == []
        await client.close()

    @respx.mock
    async def test_malformed_tokens(self):
        respx.get(f"{CLOB}/markets/0xabc").mock(
            return_value=Response(200, json={"tokens": [{"outcome": "Up"}]})
        )
        client = _client()
        with pytest.raises(ValidationError):
            await client.get_market_details("0xabc")
        await client.close()

    @respx.mock
    async def test_side_price_is_decimal(self):
        route = respx.get(f"{CLOB}/price").mock(return_value=Response(200, json={"price": "0.52"}))
        client = _client()
        price = await client.get_side_price("111", "BUY")
        await client.close()
        assert price == Decimal("0.52")
        params = route.calls.last.request.url.params
        assert params["token_id"] == "111"
        assert params["side"] == "BUY"

    @respx.mock
    async def test_missing_price_is_quote_unavailable(self):
        respx.get(f"{CLOB}/price").mock(return_value=Response(200, json={}))
        client = _client()
        with pytest.raises(QuoteUnavailable):
            await client.get_side_price("111", "SELL")
        await client.close()

    @respx.mock
    async def test_decoding_error_is_transient(self):
        respx.get(f"{CLOB}/price").mock(side_effect=httpx.DecodingError)
        client = _client()
        with pytest.raises(TransientIOError):
            await client.get_side_price("111", "BUY")
        await client.close()

    @respx.mock
    async def test_unparseable_price(self):
        respx.get(f"{CLOB}/price").mock(return_value=Response(200, json={"price": "n/a"}))
        client = _client()
        with pytest.raises(ValidationError):
            await client.get_side_price("111", "SELL")
        await client.close()
