"""The buy-then-sell round trip for one exchange."""

import logging
import time
from decimal import Decimal
from typing import Callable, Optional

from config.settings import SlipSettings
from slipbot.api.base import ExchangeClient
from slipbot.api.exceptions import NoLiquidityError
from slipbot.executor.order_monitor import OrderMonitor
from slipbot.models import Order, OrderRequest, OrderSide, SlipReport
from slipbot.strategy.sizing import SlipSizer

logger = logging.getLogger(__name__)

# Trade logger for recording placements
trade_logger = logging.getLogger("trades")


class SlipPipeline:
    """
    Executes one slip on one exchange.

    Steps:
    1. Read the lowest ask and the wallet balance
    2. Buy slightly above the ask and wait for the fill
    3. Measure what was actually received from the balance delta
    4. Sell exactly that at the highest bid and wait for the fill

    Every failure propagates; the orchestrator decides what it means.
    """

    def __init__(
        self,
        client: ExchangeClient,
        settings: SlipSettings,
        monitor: Optional[OrderMonitor] = None,
        sizer: Optional[SlipSizer] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the pipeline.

        Args:
            client: Exchange to trade on
            settings: Slip policy configuration
            monitor: Order monitor (built from settings if omitted)
            sizer: Sizing policy (built from settings if omitted)
            clock: Monotonic clock, injectable for tests
            sleep: Delay function, injectable for tests
        """
        self.client = client
        self.settings = settings
        self.currency = settings.trading_currency
        self.monitor = monitor or OrderMonitor(
            client,
            poll_interval_seconds=settings.poll_interval_seconds,
            timeout_seconds=settings.order_timeout_seconds,
            clock=clock,
            sleep=sleep,
        )
        self.sizer = sizer or SlipSizer(settings)
        self._clock = clock
        self._sleep = sleep

    @property
    def exchange(self) -> str:
        return self.client.name.value

    def run(self) -> SlipReport:
        """
        Run the round trip.

        Returns:
            SlipReport describing both legs (sell fields empty if skipped)

        Raises:
            NoLiquidityError: If a required side of the book is empty
            APIError: Any exchange failure
        """
        report = SlipReport(exchange_name=self.client.name)
        try:
            self._run(report)
        except Exception as e:
            logger.error(f"[{self.exchange}] Slip failed: {e}")
            raise
        logger.info(f"[{self.exchange}] Slip completed")
        return report

    def _run(self, report: SlipReport) -> None:
        depth = self.client.fetch_market_depth(self.currency)
        lowest_ask = depth.lowest_ask_price()
        if lowest_ask is None:
            raise NoLiquidityError("ask", self._market())
        logger.info(f"[{self.exchange}] Lowest ask price: {lowest_ask}")

        balance_before = self.client.fetch_wallet_balance(self.currency)
        logger.info(
            f"[{self.exchange}] {self.currency.upper()} balance before buy: {balance_before}"
        )

        buy_request = OrderRequest(
            currency=self.currency,
            side=OrderSide.BUY,
            volume=self.sizer.buy_volume(lowest_ask),
            price=self.sizer.buy_price(lowest_ask),
        )
        report.buy_request = buy_request
        report.buy_order = self._place_and_monitor(buy_request)

        if not report.buy_order.is_completed:
            logger.warning(
                f"[{self.exchange}] Buy order {report.buy_order.id} ended as "
                f"{report.buy_order.status.value}, skipping sell"
            )
            return

        # Give the balance ledger time to reflect the fill
        self._sleep(self.settings.settlement_delay_seconds)
        balance_after = self.client.fetch_wallet_balance(self.currency)
        delta = self.sizer.balance_delta(balance_before, balance_after)
        report.acquired_volume = delta
        logger.info(
            f"[{self.exchange}] {self.currency.upper()} balance after buy: {balance_after} "
            f"(acquired {delta})"
        )

        if delta <= 0:
            logger.info(
                f"[{self.exchange}] No {self.currency.upper()} balance difference detected to sell"
            )
            return

        depth = self.client.fetch_market_depth(self.currency)
        highest_bid = depth.highest_bid_price()
        if highest_bid is None:
            raise NoLiquidityError("bid", self._market())
        logger.info(f"[{self.exchange}] Highest bid price: {highest_bid}")

        sell_request = OrderRequest(
            currency=self.currency,
            side=OrderSide.SELL,
            volume=delta,
            price=self.sizer.sell_price(highest_bid),
        )
        report.sell_request = sell_request
        report.sell_order = self._place_and_monitor(sell_request)
        if not report.sell_order.is_completed:
            logger.warning(
                f"[{self.exchange}] Sell order {report.sell_order.id} ended as "
                f"{report.sell_order.status.value}"
            )

    def _place_and_monitor(self, request: OrderRequest) -> Order:
        logger.info(
            f"[{self.exchange}] Placing {request.side.value} order: "
            f"{request.volume} {self.currency.upper()} @ {request.price}"
        )
        placed_at = self._clock()
        order = self.client.place_order(request)
        trade_logger.info(
            f"{request.side.value.upper()} | {self.exchange} | {self._market()} | "
            f"x{request.volume} @ {request.price} | order={order.id}"
        )
        return self.monitor.monitor(order.id, self.currency, placed_at=placed_at)

    def _market(self) -> str:
        return f"{self.currency}/{self.settings.quote_currency}"
