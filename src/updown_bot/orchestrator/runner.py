"""Orchestrator runner — the polling loop that turns snapshots into actions."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from decimal import Decimal

import structlog

from updown_bot.config.loader import load_config
from updown_bot.config.schema import AppConfig, IndexType
from updown_bot.errors import MarketNotFound
from updown_bot.exchange.polymarket import PolymarketClient
from updown_bot.execution import OrderExecutor, SimulationExecutor
from updown_bot.logging import bind_run_context, setup_logging
from updown_bot.market.period import format_remaining
from updown_bot.market.snapshot import SnapshotBuilder
from updown_bot.models import MarketSnapshot, NoAction, PricePoint, TokenPrice, TradeAction
from updown_bot.strategy.trending import IndicatorSet, StrategyContext, compute_index, decide

log = structlog.get_logger("orchestrator")

MAX_HISTORY = 100

SnapshotSupplier = Callable[[], Awaitable[MarketSnapshot]]


@dataclass
class AssetState:
    """Everything the loop keeps for one asset between cycles."""

    up: IndicatorSet
    down: IndicatorSet
    history: deque[PricePoint] = field(default_factory=lambda: deque(maxlen=MAX_HISTORY))
    token_ids_logged: set[str] = field(default_factory=set)


def build_asset_states(assets: Iterable[str], ctx: StrategyContext) -> dict[str, AssetState]:
    """Fresh indicator state per asset, RSI and MACD reset to neutral."""
    states: dict[str, AssetState] = {}
    for asset in assets:
        state = AssetState(up=IndicatorSet.for_context(ctx), down=IndicatorSet.for_context(ctx))
        state.up.reset_to_neutral()
        state.down.reset_to_neutral()
        states[asset] = state
    return states


def price_point(snapshot: MarketSnapshot, asset: str) -> PricePoint | None:
    """Up/Down prices for *asset*, or None when either side has no quote."""
    data = snapshot.markets.get(asset)
    if data is None or data.up_token is None or data.down_token is None:
        return None
    up_price = data.up_token.price
    down_price = data.down_token.price
    if up_price is None or down_price is None:
        return None
    return PricePoint(
        timestamp=snapshot.timestamp,
        up_price=up_price,
        down_price=down_price,
        asset=asset,
    )


def format_token_price(token: TokenPrice | None) -> str:
    if token is None or (token.bid is None and token.ask is None):
        return "$--/--"
    bid = token.bid if token.bid is not None else Decimal(0)
    ask = token.ask if token.ask is not None else Decimal(0)
    return f"${bid:.2f}/${ask:.2f}"


def format_index(value: Decimal | None, index_type: IndexType) -> str:
    if value is None:
        return "n/a"
    if index_type in (IndexType.MACD, IndexType.MACD_SIGNAL):
        return f"{value:.4f}"
    return f"{value:.2f}"


def _log_token_ids(snapshot: MarketSnapshot, states: dict[str, AssetState]) -> None:
    for asset, state in states.items():
        data = snapshot.markets.get(asset)
        if data is None:
            continue
        for side, token in (("up", data.up_token), ("down", data.down_token)):
            if token is None or not token.token_id:
                continue
            key = f"{side}:{token.token_id}"
            if key not in state.token_ids_logged:
                state.token_ids_logged.add(key)
                log.info("token_id", asset=asset, side=side, token_id=token.token_id)


def _log_index(asset: str, state: AssetState, ctx: StrategyContext) -> None:
    up = compute_index([p.up_price for p in state.history], ctx, state.up)
    down = compute_index([p.down_price for p in state.history], ctx, state.down)
    label = ctx.index_type.label
    if up is None or down is None:
        log.info("index", asset=asset, index=label, value="n/a")
        return
    extra = {}
    if ctx.index_type is IndexType.MACD_SIGNAL:
        extra = {
            "signal_up": format_index(state.up.macd.signal, ctx.index_type),
            "signal_down": format_index(state.down.macd.signal, ctx.index_type),
        }
    log.info(
        "index",
        asset=asset,
        index=label,
        up=format_index(up, ctx.index_type),
        down=format_index(down, ctx.index_type),
        **extra,
    )


async def run_iteration(
    snapshot: MarketSnapshot,
    states: dict[str, AssetState],
    ctx: StrategyContext,
    executor: OrderExecutor,
) -> dict[str, TradeAction]:
    """One loop cycle: update history and indicators, decide, dispatch.

    Returns the action decided for every asset that had a price point.
    """
    _log_token_ids(snapshot, states)

    remaining = format_remaining(snapshot.time_remaining_seconds)
    for asset in states:
        data = snapshot.markets.get(asset)
        log.info(
            "period_prices",
            asset=asset,
            up=format_token_price(data.up_token if data else None),
            down=format_token_price(data.down_token if data else None),
            remaining=remaining,
        )

    actions: dict[str, TradeAction] = {}
    for asset, state in states.items():
        point = price_point(snapshot, asset)
        if point is None:
            continue
        state.history.append(point)
        state.up.add_price(point.up_price)
        state.down.add_price(point.down_price)

        _log_index(asset, state, ctx)

        action = decide(state.history, ctx, state.up, state.down)
        actions[asset] = action
        if isinstance(action, NoAction):
            continue

        log.info(
            "trade_action",
            asset=asset,
            action=action.kind,
            price=f"{action.price:.4f}",
            shares=str(getattr(action, "shares", "")),
        )
        try:
            result = await executor.execute(asset, action)
        except Exception:
            log.exception("execution_error", asset=asset, action=action.kind)
            continue
        if not result.success:
            log.warning("execution_failed", asset=asset, action=action.kind, message=result.message)

    return actions


async def run_loop(
    get_snapshot: SnapshotSupplier,
    config: AppConfig,
    executor: OrderExecutor | None = None,
    *,
    max_cycles: int | None = None,
) -> dict[str, AssetState]:
    """Poll, decide, sleep; forever unless *max_cycles* is given.

    A failing cycle (snapshot or otherwise) is logged and the loop goes on.
    Cycles never overlap: a slow cycle just delays the next one.
    """
    ctx = StrategyContext.from_config(config.trending_index, config.trading)
    states = build_asset_states(config.trading.enabled_assets, ctx)
    if executor is None:
        executor = SimulationExecutor()
    interval_s = config.trading.check_interval_ms / 1000

    log.info(
        "loop_started",
        index=ctx.index_type.value,
        assets=list(states),
        check_interval_ms=config.trading.check_interval_ms,
    )

    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        try:
            snapshot = await get_snapshot()
            await run_iteration(snapshot, states, ctx, executor)
        except Exception:
            log.exception("tick_error")

        cycles += 1
        await asyncio.sleep(interval_s)

    return states


async def run(config: AppConfig, executor: OrderExecutor | None = None) -> None:
    """Discover markets, then hand a snapshot builder to the loop.

    Raises MarketNotFound if a live asset has no market at startup.
    """
    bind_run_context(mode=config.mode)
    pm = config.polymarket
    client = PolymarketClient(
        gamma_url=pm.gamma_api_url,
        clob_url=pm.clob_api_url,
        api_key=pm.api_key,
        timeout_s=pm.timeout_s,
    )
    try:
        builder = SnapshotBuilder(client, config.trading.assets)
        log.info("discovering_markets", assets=config.trading.enabled_assets)
        markets = await builder.discover()
        for asset, handle in markets.items():
            log.info(
                "market_ready",
                asset=asset,
                slug=handle.slug,
                condition_id=handle.condition_id,
                dummy=handle.is_dummy,
            )

        ti = config.trending_index
        log.info(
            "strategy_config",
            index=ti.mode.value,
            threshold=ti.threshold,
            lookback=ti.lookback,
            position_size=config.trading.position_size,
        )
        if ti.mode is IndexType.MACD_SIGNAL:
            log.warning(
                "macd_signal_uses_macd_line",
                detail="decisions compare the MACD line to the threshold; the signal line is logged only",
            )

        if config.mode == "live" and executor is None:
            log.warning("live_mode_without_executor", detail="actions are logged, no orders are placed")
        await run_loop(builder, config, executor)
    finally:
        await client.close()


def main(config_path: str | None = None, mode: str | None = None) -> None:
    """Load config and logging, then run the async loop."""
    config = load_config(config_path)
    if mode is not None:
        config = config.model_copy(update={"mode": mode})
    setup_logging(level=config.logging.level, log_format=config.logging.format)
    log.info(
        "bot_starting",
        mode=config.mode,
        gamma_url=config.polymarket.gamma_api_url,
        clob_url=config.polymarket.clob_api_url,
        check_interval_ms=config.trading.check_interval_ms,
    )
    try:
        asyncio.run(run(config))
    except MarketNotFound as exc:
        log.error("startup_discovery_failed", asset=exc.asset, error=str(exc))
        sys.exit(1)
    except KeyboardInterrupt:
        log.info("bot_stopped")


def cli(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Up/Down trending-index bot")
    parser.add_argument("-c", "--config", default="config.yaml", help="Path to config.yaml")
    modes = parser.add_mutually_exclusive_group()
    modes.add_argument(
        "--live", dest="mode", action="store_const", const="live",
        help="Forward actions to the order executor",
    )
    modes.add_argument(
        "--simulation", dest="mode", action="store_const", const="simulation",
        help="Log actions only (default)",
    )
    args = parser.parse_args(argv)
    main(config_path=args.config, mode=args.mode)
