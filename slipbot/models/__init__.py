"""Data models for the slip bot."""

from slipbot.models.execution import (
    EXCHANGE_RUN_ORDER,
    ExchangeName,
    ExecutionResult,
    ExecutionSummary,
    SlipReport,
)
from slipbot.models.market import (
    MarketDepth,
    PriceLevel,
    TradingCurrency,
)
from slipbot.models.order import (
    Order,
    OrderRequest,
    OrderSide,
    OrderStatus,
)

__all__ = [
    # Execution
    "EXCHANGE_RUN_ORDER",
    "ExchangeName",
    "ExecutionResult",
    "ExecutionSummary",
    "SlipReport",
    # Market
    "MarketDepth",
    "PriceLevel",
    "TradingCurrency",
    # Order
    "Order",
    "OrderRequest",
    "OrderSide",
    "OrderStatus",
]
