"""Orchestrator — owns per-asset state and drives the polling loop."""

from updown_bot.orchestrator.runner import AssetState, run_iteration, run_loop

__all__ = ["AssetState", "run_iteration", "run_loop"]
