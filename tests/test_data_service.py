"""Tests for the market data access layer."""

import pytest

from conftest import NOW_MS, candles_from_closes
from signal_arena.data.data_service import DAY_MS


class TestDataService:

    def test_candle_window_ends_now(self, data_service, market_data):
        data_service.get_candles("BTC-PERP", "4h")
        symbol, interval, start, end = market_data.candle_requests[0]
        assert (symbol, interval) == ("BTC-PERP", "4h")
        assert end == NOW_MS
        assert start == NOW_MS - 7 * DAY_MS

    def test_lookback_override(self, data_service, market_data):
        data_service.get_candles("BTC-PERP", "1h", lookback_days=2, end_ms=DAY_MS * 10)
        assert market_data.candle_requests[0][2:] == (DAY_MS * 8, DAY_MS * 10)

    def test_snapshot_unavailable_without_candles(self, data_service):
        snapshot = data_service.get_market_snapshot("ETH-PERP")
        assert snapshot.available is False
        assert snapshot.rsi == 50.0

    def test_snapshot_from_hourly_candles(self, data_service, market_data):
        closes = [100.0 + i for i in range(30)]
        market_data.candles["BTC-PERP"] = candles_from_closes(closes, volume=1_000.0)

        snapshot = data_service.get_market_snapshot("BTC-PERP")

        # 24 bars back opens at the close of bar 5 (105.0); latest close is 129.0
        assert snapshot.price == 129.0
        assert snapshot.change_24h == pytest.approx((129.0 - 105.0) / 105.0 * 100)
        assert snapshot.volume_24h == pytest.approx(24_000.0)
        assert snapshot.technicals is not None
        assert snapshot.rsi == pytest.approx(100 - 100 / 101)

    def test_short_history_uses_first_bar(self, data_service, market_data):
        market_data.candles["BTC-PERP"] = candles_from_closes([100.0, 110.0], volume=5.0)
        snapshot = data_service.get_market_snapshot("BTC-PERP")
        assert snapshot.change_24h == pytest.approx(10.0)
        assert snapshot.volume_24h == pytest.approx(10.0)

    def test_live_reads_are_not_cached(self, data_service, market_data):
        assert data_service.get_price("BTC-PERP") == 100.0
        market_data.prices["BTC-PERP"] = 101.0
        assert data_service.get_price("BTC-PERP") == 101.0
