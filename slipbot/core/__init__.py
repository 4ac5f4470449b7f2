"""Core bot orchestration."""

from slipbot.core.bot import SlipBot, create_bot
from slipbot.core.orchestrator import RunOrchestrator, build_pipelines

__all__ = [
    "RunOrchestrator",
    "SlipBot",
    "build_pipelines",
    "create_bot",
]
