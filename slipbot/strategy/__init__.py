"""Sizing and pricing policy."""

from slipbot.strategy.sizing import SlipSizer, calculate_balance_delta

__all__ = ["SlipSizer", "calculate_balance_delta"]
