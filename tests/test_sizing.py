"""Tests for slip sizing and rounding."""

from decimal import Decimal

import pytest

from slipbot.strategy import SlipSizer, calculate_balance_delta
from slipbot.strategy.sizing import ceil4, floor4


class TestRounding:
    def test_ceil_rounds_up(self):
        assert ceil4(Decimal("1.00001")) == Decimal("1.0001")
        assert ceil4(Decimal("1.0001")) == Decimal("1.0001")

    def test_floor_rounds_down(self):
        assert floor4(Decimal("1.00009")) == Decimal("1.0000")
        assert floor4(Decimal("-0.00005")) == Decimal("-0.0001")


class TestBalanceDelta:
    def test_floors_small_gain(self):
        delta = calculate_balance_delta(Decimal("10.00001"), Decimal("10.00029"))
        assert delta == Decimal("0.0002")

    def test_no_change(self):
        assert calculate_balance_delta(Decimal("10"), Decimal("10")) == Decimal("0")

    def test_loss_is_not_positive(self):
        assert calculate_balance_delta(Decimal("10"), Decimal("9.99995")) <= 0

    def test_never_exceeds_actual_gain(self):
        before, after = Decimal("5.12345678"), Decimal("9.87654321")
        delta = calculate_balance_delta(before, after)
        assert delta <= after - before
        assert after - before - delta < Decimal("0.0001")


class TestSlipSizer:
    @pytest.fixture
    def sizer(self, slip_settings):
        return SlipSizer(slip_settings)

    def test_buy_volume_exact(self, sizer):
        # 0.252 / 31.5 / 0.002 = 4
        assert sizer.buy_volume(Decimal("31.5")) == Decimal("4")

    def test_buy_volume_rounds_up(self, sizer):
        # 0.252 / 31.49 / 0.002 = 4.00127...
        assert sizer.buy_volume(Decimal("31.49")) == Decimal("4.0013")

    def test_buy_volume_fee_covers_target(self, sizer):
        ask = Decimal("32.17")
        volume = sizer.buy_volume(ask)
        assert volume * ask * Decimal("0.002") >= Decimal("0.252")
        assert volume == volume.quantize(Decimal("0.0001"))

    @pytest.mark.parametrize("ask", [Decimal("0"), Decimal("-1")])
    def test_buy_volume_rejects_non_positive_ask(self, sizer, ask):
        with pytest.raises(ValueError):
            sizer.buy_volume(ask)

    def test_buy_price_adds_offset(self, sizer):
        assert sizer.buy_price(Decimal("31.5")) == Decimal("31.502")

    def test_buy_price_rounds_up(self, slip_settings):
        sizer = SlipSizer(slip_settings.model_copy(update={"buy_price_offset": Decimal("0.00001")}))
        assert sizer.buy_price(Decimal("31.5")) == Decimal("31.5001")

    def test_sell_price_at_bid(self, sizer):
        assert sizer.sell_price(Decimal("31.4")) == Decimal("31.4")

    def test_sell_price_rounds_down(self, slip_settings):
        sizer = SlipSizer(slip_settings.model_copy(update={"sell_price_offset": Decimal("0.00005")}))
        assert sizer.sell_price(Decimal("31.4")) == Decimal("31.3999")
