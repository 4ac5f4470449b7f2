"""Order sizing and pricing for the slip round trip."""

import logging
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal

from config.settings import SlipSettings

logger = logging.getLogger(__name__)

# Exchanges accept four decimal places for both price and volume
QUANTUM = Decimal("0.0001")


def ceil4(value: Decimal) -> Decimal:
    return value.quantize(QUANTUM, rounding=ROUND_CEILING)


def floor4(value: Decimal) -> Decimal:
    return value.quantize(QUANTUM, rounding=ROUND_FLOOR)


def calculate_balance_delta(before: Decimal, after: Decimal) -> Decimal:
    """
    Amount received by a buy, floored to four decimals.

    Fees are taken in the traded currency, so the wallet delta is the only
    reliable measure; flooring guarantees the sell never exceeds it.
    """
    return floor4(after - before)


class SlipSizer:
    """
    Calculates volumes and prices for the buy and sell legs.

    Rounding direction is fixed per operation:
    - buy volume and buy price round up (clear the minimum, cross the ask)
    - sell price and balance delta round down (never oversell)
    """

    def __init__(self, settings: SlipSettings):
        """
        Initialize the sizer.

        Args:
            settings: Slip policy configuration
        """
        self.fee_rate = Decimal(str(settings.fee_rate))
        self.target_fee_cost = Decimal(str(settings.target_fee_cost))
        self.buy_price_offset = Decimal(str(settings.buy_price_offset))
        self.sell_price_offset = Decimal(str(settings.sell_price_offset))

    def buy_volume(self, lowest_ask: Decimal) -> Decimal:
        """
        Volume whose fee equals the target fee cost.

        amount = target_fee_cost / lowest_ask / fee_rate, rounded up.

        Raises:
            ValueError: If lowest_ask is not positive
        """
        if lowest_ask <= 0:
            raise ValueError(f"Lowest ask must be positive, got {lowest_ask}")

        volume = ceil4(self.target_fee_cost / lowest_ask / self.fee_rate)
        logger.debug(
            f"Buy sizing: target_fee={self.target_fee_cost}, ask={lowest_ask}, "
            f"fee_rate={self.fee_rate}, volume={volume}"
        )
        return volume

    def buy_price(self, lowest_ask: Decimal) -> Decimal:
        """Limit price slightly above the lowest ask so the buy fills at once."""
        return ceil4(lowest_ask + self.buy_price_offset)

    def sell_price(self, highest_bid: Decimal) -> Decimal:
        """Limit price at (or slightly below) the highest bid."""
        return floor4(highest_bid - self.sell_price_offset)

    def balance_delta(self, before: Decimal, after: Decimal) -> Decimal:
        return calculate_balance_delta(before, after)
