"""Order monitoring: poll an order until it settles or times out."""

import logging
import time
from typing import Callable, Optional

from slipbot.api.base import ExchangeClient
from slipbot.models import Order, OrderStatus

logger = logging.getLogger(__name__)


class OrderMonitor:
    """
    Polls an exchange for an order's status.

    Stops on a terminal status (completed / cancelled) or once the order has
    been open longer than the timeout. A timeout is not an error: the last
    observed order is returned and the caller treats it as not completed.
    """

    def __init__(
        self,
        client: ExchangeClient,
        poll_interval_seconds: float = 0.5,
        timeout_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the monitor.

        Args:
            client: Exchange to poll
            poll_interval_seconds: Delay between polls
            timeout_seconds: Give up this long after the order was placed
            clock: Monotonic clock, injectable for tests
            sleep: Delay function, injectable for tests
        """
        self.client = client
        self.poll_interval = poll_interval_seconds
        self.timeout = timeout_seconds
        self._clock = clock
        self._sleep = sleep

    def monitor(self, order_id: str, currency: str, placed_at: Optional[float] = None) -> Order:
        """
        Poll until the order is terminal or the deadline passes.

        Args:
            order_id: Exchange-assigned order ID
            currency: Base currency of the order's market
            placed_at: Clock reading when the order was placed (defaults to now)

        Returns:
            The last observed Order
        """
        started = self._clock() if placed_at is None else placed_at
        exchange = self.client.name.value
        last_status: Optional[OrderStatus] = None
        polls = 0

        while True:
            try:
                order = self.client.get_order_detail(order_id, currency)
            except Exception as e:
                logger.error(f"[{exchange}] Failed to poll order {order_id}: {e}")
                raise
            polls += 1

            if order.status != last_status:
                logger.info(
                    f"[{exchange}] Order {order_id} status: "
                    f"{last_status.value if last_status else 'new'} -> {order.status.value}"
                )
                last_status = order.status

            if order.is_terminal:
                return order

            elapsed = self._clock() - started
            if elapsed > self.timeout:
                logger.warning(
                    f"[{exchange}] Order {order_id} monitoring timed out after "
                    f"{self.timeout:.0f}s ({polls} polls), last status={order.status.value}"
                )
                return order

            self._sleep(self.poll_interval)
