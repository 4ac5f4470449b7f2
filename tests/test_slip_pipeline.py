"""Tests for the buy-then-sell round trip."""

from decimal import Decimal

import pytest

from slipbot.api.exceptions import NoLiquidityError
from slipbot.executor import SlipPipeline
from slipbot.models import OrderSide, OrderStatus
from tests.conftest import FakeExchange, depth


def make_pipeline(exchange, settings, clock):
    return SlipPipeline(exchange, settings, clock=clock, sleep=clock.sleep)


class TestSlipPipeline:
    def test_full_round_trip(self, slip_settings, clock):
        exchange = FakeExchange(balances=["10.00001", "10.00029"])
        report = make_pipeline(exchange, slip_settings, clock).run()

        buy, sell = exchange.placed
        assert buy.side == OrderSide.BUY
        assert buy.currency == "usdt"
        assert buy.volume == Decimal("4")
        assert buy.price == Decimal("31.502")

        assert sell.side == OrderSide.SELL
        assert sell.volume == Decimal("0.0002")
        assert sell.price == Decimal("31.4")

        assert report.acquired_volume == Decimal("0.0002")
        assert report.sold
        assert report.sell_order.status == OrderStatus.COMPLETED

    def test_waits_for_settlement_before_measuring(self, slip_settings, clock):
        exchange = FakeExchange(balances=["10", "14"])
        make_pipeline(exchange, slip_settings, clock).run()

        assert clock.sleeps == [slip_settings.settlement_delay_seconds]

    def test_sells_full_delta(self, slip_settings, clock):
        exchange = FakeExchange(balances=["1.5", "5.49123"])
        make_pipeline(exchange, slip_settings, clock).run()

        assert exchange.placed[1].volume == Decimal("3.9912")

    def test_no_balance_change_skips_sell(self, slip_settings, clock):
        exchange = FakeExchange(balances=["10", "10"])
        report = make_pipeline(exchange, slip_settings, clock).run()

        assert len(exchange.placed) == 1
        assert report.acquired_volume == Decimal("0")
        assert not report.sold

    def test_dust_below_precision_skips_sell(self, slip_settings, clock):
        exchange = FakeExchange(balances=["10", "10.00009"])
        report = make_pipeline(exchange, slip_settings, clock).run()

        assert len(exchange.placed) == 1
        assert not report.sold

    def test_cancelled_buy_skips_sell(self, slip_settings, clock):
        exchange = FakeExchange(
            balances=["10", "14"],
            statuses={"order-1": [OrderStatus.CANCELLED]},
        )
        report = make_pipeline(exchange, slip_settings, clock).run()

        assert len(exchange.placed) == 1
        assert report.buy_order.status == OrderStatus.CANCELLED
        assert not report.sold

    def test_timed_out_buy_skips_sell(self, slip_settings, clock):
        settings = slip_settings.model_copy(update={"order_timeout_seconds": 1.0})
        exchange = FakeExchange(
            balances=["10", "14"],
            statuses={"order-1": [OrderStatus.PENDING]},
        )
        report = make_pipeline(exchange, settings, clock).run()

        assert len(exchange.placed) == 1
        assert report.buy_order.status == OrderStatus.PENDING
        assert not report.sold

    def test_no_asks_raises(self, slip_settings, clock):
        exchange = FakeExchange(depths=[depth(asks=[], bids=["31.4"])])

        with pytest.raises(NoLiquidityError, match="ask"):
            make_pipeline(exchange, slip_settings, clock).run()
        assert exchange.placed == []

    def test_no_bids_on_sell_raises(self, slip_settings, clock):
        exchange = FakeExchange(
            depths=[depth(["31.5"], ["31.4"]), depth(["31.5"], [])],
            balances=["10", "14"],
        )

        with pytest.raises(NoLiquidityError, match="bid"):
            make_pipeline(exchange, slip_settings, clock).run()
        assert len(exchange.placed) == 1

    def test_sell_uses_fresh_depth(self, slip_settings, clock):
        exchange = FakeExchange(
            depths=[depth(["31.5"], ["31.4"]), depth(["31.6"], ["31.55"])],
            balances=["10", "14"],
        )
        make_pipeline(exchange, slip_settings, clock).run()

        assert exchange.placed[1].price == Decimal("31.55")
