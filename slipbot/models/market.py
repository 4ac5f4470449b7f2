"""Market depth data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class TradingCurrency(str, Enum):
    USDT = "usdt"
    BTC = "btc"
    ETH = "eth"


@dataclass(frozen=True)
class PriceLevel:
    """Single price level in the order book."""

    price: Decimal  # In quote currency
    amount: Decimal  # In base currency


@dataclass(frozen=True)
class MarketDepth:
    """
    Order book snapshot for one market.

    Either side may be empty. The price accessors return None in that case
    so callers can decide whether a missing quote is fatal.
    """

    asks: Tuple[PriceLevel, ...] = ()
    bids: Tuple[PriceLevel, ...] = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def lowest_ask_price(self) -> Optional[Decimal]:
        """Lowest price anyone is selling at, or None if there are no asks."""
        if not self.asks:
            return None
        return min(level.price for level in self.asks)

    def highest_bid_price(self) -> Optional[Decimal]:
        """Highest price anyone is buying at, or None if there are no bids."""
        if not self.bids:
            return None
        return max(level.price for level in self.bids)

    @property
    def spread(self) -> Optional[Decimal]:
        """Ask minus bid, when both sides are quoted."""
        ask = self.lowest_ask_price()
        bid = self.highest_bid_price()
        if ask is None or bid is None:
            return None
        return ask - bid
