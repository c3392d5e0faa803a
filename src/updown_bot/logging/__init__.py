"""Structured logging."""

from updown_bot.logging.setup import bind_run_context, get_logger, setup_logging

__all__ = ["bind_run_context", "get_logger", "setup_logging"]
