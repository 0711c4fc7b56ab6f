"""Tests for live re-validation and order placement."""

import pytest

from conftest import NOW, make_signal
from signal_arena.execution.position_sizer import PositionSizer
from signal_arena.execution.simulated_executor import SimulatedExecutionAdapter
from signal_arena.execution.trade_executor import TradeExecutor
from signal_arena.models import (
    AccountMargin,
    ExecutionStatus,
    MarginMode,
    OrderIntent,
    Side,
    TimeInForce,
)


@pytest.fixture
def venue():
    return SimulatedExecutionAdapter()


@pytest.fixture
def executor(data_service, venue):
    return TradeExecutor(
        data_service, venue, sizer=PositionSizer(data_service, clock=lambda: NOW)
    )


# ── Successful placement ─────────────────────────────────────────────────


class TestPlacement:

    def test_limit_order_rests_at_signal_entry(self, executor, venue):
        result = executor.execute(make_signal(), account=None)

        assert result.status == ExecutionStatus.RESTING
        assert result.success is True
        assert result.order_id == "SIM-1"
        order = venue.orders[0]
        assert order.coin == "BTC"
        assert order.is_buy is True
        assert order.time_in_force == TimeInForce.GTC
        assert order.limit_price == pytest.approx(100.0)
        assert order.size == pytest.approx(40.0)
        assert venue.leverage_calls == [("BTC-PERP", 3.0, MarginMode.CROSS)]

    def test_market_intent_uses_ioc_with_slippage(self, executor, venue):
        result = executor.execute(make_signal(), account=None, order_type=OrderIntent.MARKET)

        assert result.status == ExecutionStatus.FILLED
        assert venue.orders[0].time_in_force == TimeInForce.IOC
        assert result.executed_price == pytest.approx(100.1)
        assert result.executed_size == pytest.approx(40.0)

    def test_short_market_slips_down(self, executor, venue):
        signal = make_signal(side=Side.SHORT, stop=105.0, target=85.0)
        executor.execute(signal, account=None, order_type=OrderIntent.MARKET)

        assert venue.orders[0].is_buy is False
        assert venue.orders[0].limit_price == pytest.approx(99.9)

    def test_limit_repriced_when_far_from_market(self, executor, venue, market_data):
        market_data.prices["BTC-PERP"] = 103.0
        executor.execute(make_signal(), account=None)

        assert venue.orders[0].limit_price == pytest.approx(103.1)

    def test_leverage_failure_does_not_block(self, data_service):
        venue = SimulatedExecutionAdapter(leverage_error="leverage locked")
        executor = TradeExecutor(
            data_service, venue, sizer=PositionSizer(data_service, clock=lambda: NOW)
        )
        result = executor.execute(make_signal(), account=None)
        assert result.status == ExecutionStatus.RESTING


# ── Refusals ─────────────────────────────────────────────────────────────


class TestRefusals:

    def test_validation_failure_blocks_order(self, executor, venue, market_data):
        market_data.margin = AccountMargin(account_value=1_000.0, used_margin=999.0)
        result = executor.execute(make_signal(), account=None)

        assert result.status == ExecutionStatus.FAILED
        assert result.message.startswith("Cannot execute trade:")
        assert result.errors
        assert venue.orders == []

    def test_missing_price_reported(self, executor, market_data):
        market_data.prices["BTC-PERP"] = 0.0
        result = executor.execute(make_signal(), account=None)

        assert result.status == ExecutionStatus.FAILED
        assert result.message == "Cannot execute trade: Cannot get current price for BTC-PERP"

    def test_price_moved_since_signal(self, executor, venue, market_data):
        market_data.prices["BTC-PERP"] = 106.0
        result = executor.execute(make_signal(), account=None)

        assert result.status == ExecutionStatus.FAILED
        assert result.message == "Price moved 6.00% since signal - canceling for safety"
        assert venue.orders == []

    def test_price_lost_before_placement(self, executor, data_service, monkeypatch):
        prices = iter([100.0, 0.0])
        monkeypatch.setattr(data_service, "get_price", lambda symbol: next(prices))

        result = executor.execute(make_signal(), account=None)

        assert result.message == "Cannot execute: Current price unavailable"

    def test_margin_rechecked_before_placement(self, executor, data_service, monkeypatch):
        margins = iter(
            [
                AccountMargin(account_value=10_000.0, used_margin=0.0),
                AccountMargin(account_value=10_000.0, used_margin=9_900.0),
            ]
        )
        monkeypatch.setattr(data_service, "get_account_margin", lambda account: next(margins))

        result = executor.execute(make_signal(), account=None)

        assert result.message == "Insufficient margin after rechecking account"
        assert result.details["available"] == pytest.approx(100.0)

    def test_venue_rejection_surfaced(self, data_service):
        venue = SimulatedExecutionAdapter(reject_reason="Insufficient margin to place order")
        executor = TradeExecutor(
            data_service, venue, sizer=PositionSizer(data_service, clock=lambda: NOW)
        )
        result = executor.execute(make_signal(), account=None)

        assert result.status == ExecutionStatus.FAILED
        assert result.message == "Order error: Insufficient margin to place order"
