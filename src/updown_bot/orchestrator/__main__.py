"""Allow running the bot as: python -m updown_bot.orchestrator [--config path] [--live]."""

from updown_bot.orchestrator.runner import cli

cli()
