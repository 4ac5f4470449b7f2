"""Order execution and monitoring."""

from slipbot.executor.order_monitor import OrderMonitor
from slipbot.executor.slip_pipeline import SlipPipeline

__all__ = [
    "OrderMonitor",
    "SlipPipeline",
]
