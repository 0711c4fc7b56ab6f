"""Read-only data service for market data access."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from signal_arena.config import settings
from signal_arena.data.adapters import MarketDataAdapter
from signal_arena.models.market import (
    AccountMargin,
    Candle,
    ExchangeAccount,
    InstrumentSpecs,
    MarketSnapshot,
)
from signal_arena.strategies.indicators import compute_indicators, compute_metrics
from signal_arena.utils.time import utc_now_ms

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000
SNAPSHOT_INTERVAL = "1h"
BARS_PER_DAY = 24


class DataService:
    """Unified read-only access layer for market data.

    Every call goes to the adapter; nothing is cached here so sizing and
    execution always see live prices and margin.
    """

    def __init__(
        self,
        market_data: Optional[MarketDataAdapter] = None,
        lookback_days: Optional[int] = None,
        clock: Callable[[], int] = utc_now_ms,
    ) -> None:
        if market_data is None:
            from signal_arena.data.hyperliquid import HyperliquidMarketData

            market_data = HyperliquidMarketData()
        self.market_data = market_data
        self.lookback_days = lookback_days or settings.market_lookback_days
        self._clock = clock

    def get_candles(
        self,
        symbol: str,
        interval: str,
        lookback_days: Optional[int] = None,
        end_ms: Optional[int] = None,
    ) -> List[Candle]:
        end = end_ms if end_ms is not None else self._clock()
        start = end - (lookback_days or self.lookback_days) * DAY_MS
        return self.market_data.get_candles(symbol, interval, start, end)

    def get_price(self, symbol: str) -> float:
        return self.market_data.get_mid_price(symbol)

    def get_instrument_specs(self, symbol: str) -> InstrumentSpecs:
        return self.market_data.get_instrument_specs(symbol)

    def get_account_margin(self, account: Optional[ExchangeAccount]) -> AccountMargin:
        return self.market_data.get_account_margin(account)

    def list_symbols(self, limit: Optional[int] = None) -> List[str]:
        return self.market_data.list_symbols(limit)

    def get_market_snapshot(self, symbol: str) -> MarketSnapshot:
        """Price, 24h change/volume, RSI and return statistics from hourly bars.

        Returns ``MarketSnapshot.unavailable`` when no candles come back.
        """
        try:
            candles = self.get_candles(symbol, SNAPSHOT_INTERVAL)
        except Exception as exc:
            logger.warning("Market snapshot failed for %s: %s", symbol, exc)
            return MarketSnapshot.unavailable(symbol)
        if not candles:
            logger.warning("No candles for %s", symbol)
            return MarketSnapshot.unavailable(symbol)

        latest = candles[-1]
        day_ago = candles[-BARS_PER_DAY] if len(candles) >= BARS_PER_DAY else candles[0]
        change_24h = (
            (latest.close - day_ago.open) / day_ago.open * 100.0 if day_ago.open else 0.0
        )
        volume_24h = sum(c.volume for c in candles[-BARS_PER_DAY:])

        technicals = compute_indicators(candles)
        metrics = compute_metrics(candles)
        logger.debug(
            "%s: price=%s change=%.2f%% win_rate=%.1f%%",
            symbol,
            latest.close,
            change_24h,
            metrics.win_rate,
        )
        return MarketSnapshot(
            symbol=symbol,
            price=latest.close,
            change_24h=change_24h,
            volume_24h=volume_24h,
            rsi=technicals.rsi,
            win_rate=metrics.win_rate,
            sharpe_ratio=metrics.sharpe_ratio,
            max_drawdown=metrics.max_drawdown_pct,
            avg_volatility=metrics.avg_volatility_pct,
            technicals=technicals,
        )
