"""Tests for order status polling."""

from unittest.mock import Mock

import pytest

from slipbot.api.exceptions import VendorApiError
from slipbot.executor import OrderMonitor
from slipbot.models import ExchangeName, OrderStatus
from tests.conftest import FakeExchange

PENDING, COMPLETED, CANCELLED, OTHER = (
    OrderStatus.PENDING,
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
    OrderStatus.OTHER,
)


def make_monitor(exchange, clock, timeout=60.0):
    return OrderMonitor(
        exchange,
        poll_interval_seconds=0.5,
        timeout_seconds=timeout,
        clock=clock,
        sleep=clock.sleep,
    )


class TestOrderMonitor:
    def test_stops_on_completed(self, clock):
        exchange = FakeExchange(statuses={"42": [PENDING, PENDING, COMPLETED]})
        order = make_monitor(exchange, clock).monitor("42", "usdt")

        assert order.status == COMPLETED
        assert exchange.polls == ["42", "42", "42"]
        assert clock.sleeps == [0.5, 0.5]

    def test_stops_on_cancelled(self, clock):
        exchange = FakeExchange(statuses={"42": [PENDING, CANCELLED]})
        order = make_monitor(exchange, clock).monitor("42", "usdt")

        assert order.status == CANCELLED
        assert len(exchange.polls) == 2

    def test_other_status_keeps_polling(self, clock):
        exchange = FakeExchange(statuses={"42": [OTHER, COMPLETED]})
        order = make_monitor(exchange, clock).monitor("42", "usdt")

        assert order.status == COMPLETED
        assert len(exchange.polls) == 2

    def test_already_terminal_no_sleep(self, clock):
        exchange = FakeExchange(statuses={"42": [COMPLETED]})
        make_monitor(exchange, clock).monitor("42", "usdt")

        assert clock.sleeps == []

    def test_timeout_returns_last_order(self, clock):
        exchange = FakeExchange(statuses={"42": [PENDING]})
        order = make_monitor(exchange, clock, timeout=2.0).monitor("42", "usdt")

        assert order.status == PENDING
        # Polls at t=0, 0.5, ..., 2.5; the one at 2.5 is past the deadline
        assert len(exchange.polls) == 6
        assert sum(clock.sleeps) == pytest.approx(2.5)

    def test_timeout_counts_from_placement(self, clock):
        exchange = FakeExchange(statuses={"42": [PENDING]})
        monitor = make_monitor(exchange, clock, timeout=2.0)
        order = monitor.monitor("42", "usdt", placed_at=clock.now - 10)

        assert order.status == PENDING
        assert len(exchange.polls) == 1
        assert clock.sleeps == []

    def test_poll_error_propagates(self, clock):
        client = Mock()
        client.name = ExchangeName.BITO
        client.get_order_detail.side_effect = VendorApiError("boom")

        with pytest.raises(VendorApiError):
            make_monitor(client, clock).monitor("42", "usdt")
