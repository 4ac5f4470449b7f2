"""Tests for market depth and order models."""

from decimal import Decimal

from slipbot.models import (
    ExchangeName,
    ExecutionResult,
    ExecutionSummary,
    MarketDepth,
    OrderStatus,
)
from tests.conftest import depth


class TestMarketDepth:
    def test_lowest_ask_is_min_price(self):
        book = depth(asks=["31.52", "31.49", "31.60"])
        assert book.lowest_ask_price() == Decimal("31.49")

    def test_highest_bid_is_max_price(self):
        book = depth(bids=["31.40", "31.45", "31.10"])
        assert book.highest_bid_price() == Decimal("31.45")

    def test_unsorted_levels(self):
        book = depth(asks=["32", "30", "31"], bids=["29", "30.5", "28"])
        assert book.lowest_ask_price() == Decimal("30")
        assert book.highest_bid_price() == Decimal("30.5")

    def test_empty_sides_signal_unavailable(self):
        book = MarketDepth()
        assert book.lowest_ask_price() is None
        assert book.highest_bid_price() is None
        assert book.spread is None

    def test_one_sided_book(self):
        book = depth(asks=["31.5"])
        assert book.lowest_ask_price() == Decimal("31.5")
        assert book.highest_bid_price() is None

    def test_spread(self):
        assert depth(["31.5"], ["31.4"]).spread == Decimal("0.1")


class TestOrderStatus:
    def test_terminal_states(self):
        assert OrderStatus.COMPLETED.is_terminal
        assert OrderStatus.CANCELLED.is_terminal
        assert not OrderStatus.PENDING.is_terminal
        assert not OrderStatus.OTHER.is_terminal


class TestExecutionSummary:
    def test_partitions_keep_order(self):
        summary = ExecutionSummary(
            results=(
                ExecutionResult(ExchangeName.HOYA, False),
                ExecutionResult(ExchangeName.MAX, True),
                ExecutionResult(ExchangeName.BITO, False),
            )
        )
        assert summary.successful == [ExchangeName.MAX]
        assert summary.failed == [ExchangeName.HOYA, ExchangeName.BITO]
        assert not summary.is_empty

    def test_empty(self):
        assert ExecutionSummary().is_empty
