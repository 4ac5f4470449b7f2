"""Formatting of execution summaries into notification text."""

from typing import Iterable, List

from slipbot.models import ExecutionResult

# LINE push messages are capped at 5000 characters
MAX_MESSAGE_LENGTH = 5000


def join_with_and(items: List[str]) -> str:
    """
    Join names with commas and "and" before the last one.

    Examples:
        ["Max"] -> "Max"
        ["Max", "Bito"] -> "Max and Bito"
        ["Max", "Bito", "Hoya"] -> "Max, Bito and Hoya"
    """
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return f"{', '.join(items[:-1])} and {items[-1]}"


def format_summary_message(results: Iterable[ExecutionResult]) -> str:
    """
    Format results as "<ok names> Success, <failed names> failed".

    The success segment always comes first; either segment is omitted when
    empty, and no results give an empty string.
    """
    results = list(results)
    successful = [r.exchange_name.value for r in results if r.success]
    failed = [r.exchange_name.value for r in results if not r.success]

    parts = []
    if successful:
        parts.append(f"{join_with_and(successful)} Success")
    if failed:
        parts.append(f"{join_with_and(failed)} failed")
    return ", ".join(parts)


def validate_message_length(message: str, max_length: int = MAX_MESSAGE_LENGTH) -> bool:
    """True if the message fits the push channel's limit."""
    return len(message) <= max_length
