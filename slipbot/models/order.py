"""Order data models."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    OTHER = "other"

    @property
    def is_terminal(self) -> bool:
        """No further status change is expected."""
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


@dataclass(frozen=True)
class OrderRequest:
    """Request to place a limit order."""

    currency: str  # Base currency, e.g. "usdt"
    side: OrderSide
    volume: Decimal  # In base currency
    price: Decimal  # In quote currency


@dataclass(frozen=True)
class Order:
    """Exchange order snapshot in normalized form."""

    id: str
    status: OrderStatus
    raw: Optional[Dict[str, Any]] = None  # Vendor payload, for logging only

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_completed(self) -> bool:
        return self.status == OrderStatus.COMPLETED
