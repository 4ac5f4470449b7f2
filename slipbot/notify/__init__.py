"""Run summary notifications."""

from slipbot.notify.formatter import (
    MAX_MESSAGE_LENGTH,
    format_summary_message,
    join_with_and,
    validate_message_length,
)
from slipbot.notify.line import LineNotifier

__all__ = [
    "MAX_MESSAGE_LENGTH",
    "LineNotifier",
    "format_summary_message",
    "join_with_and",
    "validate_message_length",
]
