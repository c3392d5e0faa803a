"""Polymarket exchange client: gamma (events) and CLOB (books) REST APIs.

The gamma API resolves an event slug such as ``eth-updown-15m-1767225600``
to its market. The CLOB API lists a market's outcome tokens and quotes the
best price per token and side.

httpx failures are translated into the package error taxonomy so callers
can apply the best-effort contract without knowing about HTTP.
"""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
import pydantic

from updown_bot.errors import (
    NotFoundError,
    QuoteUnavailable,
    TransientIOError,
    ValidationError,
)
from updown_bot.models import MarketHandle, OutcomeToken


class PolymarketClient:
    """Async client for the Polymarket gamma + CLOB APIs."""

    def __init__(
        self,
        gamma_url: str = "https://gamma-api.polymarket.com",
        clob_url: str = "https://clob.polymarket.com",
        api_key: str | None = None,
        timeout_s: float = 10.0,
    ):
        self.gamma_url = gamma_url.rstrip("/")
        self.clob_url = clob_url.rstrip("/")
        self._api_key = api_key
        self._timeout_s = timeout_s
        self._http: httpx.AsyncClient | None = None

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
            self._http = httpx.AsyncClient(timeout=self._timeout_s, headers=headers)
        return self._http

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        http = await self._get_http()
        try:
            resp = await http.get(url, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise NotFoundError(f"GET {url}: not found") from exc
            raise TransientIOError(f"GET {url}: HTTP {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            raise TransientIOError(f"GET {url}: {exc!r}") from exc
        try:
            return resp.json()
        except ValueError as exc:
            raise ValidationError(f"GET {url}: response is not JSON") from exc

    # --- gamma ---

    async def get_market_by_slug(self, slug: str) -> MarketHandle:
        """Resolve an event slug to the first market of that event."""
        body = await self._get_json(f"{self.gamma_url}/events/slug/{slug}")
        markets = body.get("markets") if isinstance(body, dict) else None
        if not isinstance(markets, list) or not markets:
            raise NotFoundError(f"No markets in event {slug!r}")
        return self.parse_market(markets[0], slug)

    @classmethod
    def parse_market(cls, market: dict, slug: str) -> MarketHandle:
        """Normalize a gamma market dict into a MarketHandle.

        Gamma ships ``outcomes`` and ``clobTokenIds`` as JSON-encoded
        strings; when both are present the Up/Down token ids are filled in.
        """
        if not isinstance(market, dict):
            raise ValidationError(f"Market for {slug!r} is not an object")
        condition_id = market.get("conditionId") or market.get("condition_id") or ""
        if not condition_id:
            raise ValidationError(f"Market for {slug!r} has no condition id")

        outcomes = [str(o) for o in cls.parse_json_list(market.get("outcomes"))]
        token_ids = [str(t) for t in cls.parse_json_list(market.get("clobTokenIds"))]
        by_outcome = {o.lower(): t for o, t in zip(outcomes, token_ids)}

        return MarketHandle(
            condition_id=str(condition_id),
            slug=str(market.get("slug") or slug),
            question=str(market.get("question") or ""),
            active=bool(market.get("active")),
            closed=bool(market.get("closed")),
            up_token_id=by_outcome.get("up") or by_outcome.get("yes"),
            down_token_id=by_outcome.get("down") or by_outcome.get("no"),
        )

    @staticmethod
    def parse_json_list(raw: Any) -> list:
        """Parse a field that may be a JSON string or a list."""
        if isinstance(raw, str) and raw.strip():
            try:
                value = json.loads(raw)
            except ValueError:
                return []
            return value if isinstance(value, list) else []
        if isinstance(raw, list):
            return raw
        return []

    # --- CLOB ---

    async def get_market_details(self, condition_id: str) -> list[OutcomeToken]:
        """Outcome tokens (with token ids) of a CLOB market."""
        body = await self._get_json(f"{self.clob_url}/markets/{condition_id}")
        tokens = body.get("tokens") if isinstance(body, dict) else None
        if tokens is None:
            return []
        try:
            return [OutcomeToken.model_validate(t) for t in tokens]
        except (pydantic.ValidationError, TypeError) as exc:
            raise ValidationError(f"Malformed tokens for market {condition_id}") from exc

    async def get_side_price(self, token_id: str, side: str) -> Decimal:
        """Best price for *token_id* on *side* ("BUY" or "SELL")."""
        body = await self._get_json(
            f"{self.clob_url}/price",
            params={"token_id": token_id, "side": side},
        )
        raw = body.get("price") if isinstance(body, dict) else None
        if raw is None:
            raise QuoteUnavailable(f"No {side} price for token {token_id}")
        try:
            return Decimal(str(raw))
        except InvalidOperation as exc:
            raise ValidationError(f"Unparseable price {raw!r} for token {token_id}") from exc
