"""Shared fixtures: fake clock, fake exchange, fake HTTP session."""

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
from unittest.mock import Mock

import pytest

from config.settings import SlipSettings
from slipbot.api.base import ExchangeClient
from slipbot.models import (
    ExchangeName,
    MarketDepth,
    Order,
    OrderRequest,
    OrderStatus,
    PriceLevel,
)


class FakeClock:
    """Monotonic clock whose sleep just advances time."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def depth(asks: Iterable[str] = (), bids: Iterable[str] = ()) -> MarketDepth:
    """Build a MarketDepth from price strings (amount 100 each)."""
    return MarketDepth(
        asks=tuple(PriceLevel(Decimal(p), Decimal("100")) for p in asks),
        bids=tuple(PriceLevel(Decimal(p), Decimal("100")) for p in bids),
    )


class FakeExchange(ExchangeClient):
    """
    Scripted exchange.

    ``depths`` and ``balances`` are consumed one per call (the last entry
    repeats); ``statuses`` maps order id -> status sequence for polling.
    """

    def __init__(
        self,
        name: ExchangeName = ExchangeName.MAX,
        depths: Optional[List[MarketDepth]] = None,
        balances: Optional[List[str]] = None,
        statuses: Optional[Dict[str, List[OrderStatus]]] = None,
    ):
        self.name = name
        self._depths = list(depths or [depth(["31.5"], ["31.4"])])
        self._balances = [Decimal(b) for b in (balances or ["0"])]
        self._statuses = {k: list(v) for k, v in (statuses or {}).items()}
        self.placed: List[OrderRequest] = []
        self.polls: List[str] = []
        self.closed = False

    @staticmethod
    def _next(items: list) -> Any:
        return items.pop(0) if len(items) > 1 else items[0]

    def fetch_market_depth(self, currency: str) -> MarketDepth:
        return self._next(self._depths)

    def fetch_wallet_balance(self, currency: str) -> Decimal:
        return self._next(self._balances)

    def place_order(self, request: OrderRequest) -> Order:
        self.placed.append(request)
        return Order(id=f"order-{len(self.placed)}", status=OrderStatus.PENDING)

    def get_order_detail(self, order_id: str, currency: str) -> Order:
        self.polls.append(order_id)
        sequence = self._statuses.get(order_id, [OrderStatus.COMPLETED])
        return Order(id=order_id, status=self._next(sequence))

    def close(self) -> None:
        self.closed = True


def fake_response(status_code: int = 200, body: Any = None, headers: Optional[dict] = None):
    """Mock of requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.headers = headers or {}
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def slip_settings():
    return SlipSettings(
        trading_currency="usdt",
        quote_currency="twd",
        fee_rate=Decimal("0.002"),
        target_fee_cost=Decimal("0.252"),
        buy_price_offset=Decimal("0.002"),
        sell_price_offset=Decimal("0"),
        poll_interval_seconds=0.5,
        order_timeout_seconds=60,
        settlement_delay_seconds=1,
        request_timeout_seconds=5,
    )
