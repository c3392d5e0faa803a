"""Where decided trade actions go.

The loop only decides. In simulation mode actions are logged and
reported as filled on paper; a live deployment injects its own
``OrderExecutor`` that talks to the venue.
"""

from __future__ import annotations

from collections import Counter
from typing import Protocol

from pydantic import BaseModel

from updown_bot.logging import get_logger
from updown_bot.models import TradeAction

log = get_logger(__name__)


class ExecutionResult(BaseModel):
    success: bool
    order_id: str | None = None
    message: str = ""


class OrderExecutor(Protocol):
    async def execute(self, asset: str, action: TradeAction) -> ExecutionResult:
        ...


class SimulationExecutor:
    """Paper executor: counts the actions it is handed, places nothing."""

    def __init__(self) -> None:
        self.fills: Counter[str] = Counter()

    async def execute(self, asset: str, action: TradeAction) -> ExecutionResult:
        self.fills[f"{asset}:{action.kind}"] += 1
        log.debug("simulated_fill", asset=asset, action=action.kind)
        return ExecutionResult(success=True, message=f"simulated {action.kind}")
