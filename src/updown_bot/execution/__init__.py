"""Order execution port."""

from updown_bot.execution.executor import (
    ExecutionResult,
    OrderExecutor,
    SimulationExecutor,
)

__all__ = ["ExecutionResult", "OrderExecutor", "SimulationExecutor"]
