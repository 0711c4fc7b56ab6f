"""Hyperliquid market data over ccxt."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import ccxt

from signal_arena.data.adapters import (
    DEFAULT_LOT_SIZE,
    DEFAULT_MIN_ORDER_VALUE,
    DEFAULT_SPECS,
    DEFAULT_TICK_SIZE,
    MarketDataAdapter,
)
from signal_arena.ingest.hyperliquid import (
    ExchangeSessionPool,
    display_symbol,
    to_market_symbol,
)
from signal_arena.models.market import AccountMargin, Candle, ExchangeAccount, InstrumentSpecs

logger = logging.getLogger(__name__)


def _safe_float(value: object) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip() == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class HyperliquidMarketData(MarketDataAdapter):
    """Market-data adapter returning sentinels on any venue failure."""

    def __init__(
        self,
        pool: Optional[ExchangeSessionPool] = None,
        account: Optional[ExchangeAccount] = None,
    ) -> None:
        self.pool = pool or ExchangeSessionPool()
        self.account = account

    def _client(self, account: Optional[ExchangeAccount] = None) -> Any:
        return self.pool.get_client(account or self.account)

    def _markets(self, client: Any) -> dict:
        if not client.markets:
            client.load_markets()
        return client.markets or {}

    def get_mid_price(self, symbol: str) -> float:
        try:
            ticker = self._client().fetch_ticker(to_market_symbol(symbol))
        except Exception as exc:
            logger.warning("Price fetch failed for %s: %s", symbol, exc)
            return 0.0
        info = ticker.get("info") or {}
        for candidate in (info.get("midPx"), ticker.get("last"), ticker.get("close")):
            price = _safe_float(candidate)
            if price is not None and price > 0:
                return price
        logger.warning("No price found for %s", symbol)
        return 0.0

    def get_candles(
        self, symbol: str, interval: str, start_ms: int, end_ms: int
    ) -> List[Candle]:
        try:
            rows = self._client().fetch_ohlcv(
                to_market_symbol(symbol),
                timeframe=interval,
                since=start_ms,
                params={"until": end_ms},
            )
            interval_ms = ccxt.Exchange.parse_timeframe(interval) * 1000
        except Exception as exc:
            logger.warning("Candle fetch failed for %s %s: %s", symbol, interval, exc)
            return []

        name = display_symbol(symbol)
        candles: List[Candle] = []
        for row in rows or []:
            if len(row) < 6 or any(value is None for value in row[:6]):
                continue
            open_time = int(row[0])
            candles.append(
                Candle(
                    open_time=open_time,
                    close_time=open_time + int(interval_ms) - 1,
                    symbol=name,
                    interval=interval,
                    open=float(row[1]),
                    high=float(row[2]),
                    low=float(row[3]),
                    close=float(row[4]),
                    volume=float(row[5]),
                )
            )
        return candles

    def get_instrument_specs(self, symbol: str) -> InstrumentSpecs:
        try:
            markets = self._markets(self._client())
        except Exception as exc:
            logger.warning("Failed to load instrument specs for %s: %s", symbol, exc)
            return DEFAULT_SPECS
        market = markets.get(to_market_symbol(symbol))
        if not market:
            logger.warning("Instrument specs not found for %s, using defaults", symbol)
            return DEFAULT_SPECS

        precision = market.get("precision") or {}
        cost_limits = (market.get("limits") or {}).get("cost") or {}
        specs = InstrumentSpecs(
            lot_size=_safe_float(precision.get("amount")) or DEFAULT_LOT_SIZE,
            tick_size=_safe_float(precision.get("price")) or DEFAULT_TICK_SIZE,
            min_order_value=_safe_float(cost_limits.get("min")) or DEFAULT_MIN_ORDER_VALUE,
        )
        logger.debug(
            "Instrument specs for %s: lot=%s tick=%s min_value=%s",
            symbol,
            specs.lot_size,
            specs.tick_size,
            specs.min_order_value,
        )
        return specs

    def get_account_margin(self, account: Optional[ExchangeAccount]) -> AccountMargin:
        target = account or self.account
        if target is None or not target.wallet_address:
            return AccountMargin(account_value=0.0, used_margin=0.0)
        try:
            balance = self._client(target).fetch_balance({"user": target.wallet_address})
        except Exception as exc:
            logger.warning("Margin fetch failed for %s: %s", target.wallet_address, exc)
            return AccountMargin(account_value=0.0, used_margin=0.0)
        summary = (balance.get("info") or {}).get("marginSummary") or {}
        return AccountMargin(
            account_value=_safe_float(summary.get("accountValue")) or 0.0,
            used_margin=_safe_float(summary.get("totalMarginUsed")) or 0.0,
        )

    def list_symbols(self, limit: Optional[int] = None) -> List[str]:
        try:
            markets = self._markets(self._client())
        except Exception as exc:
            logger.warning("Failed to list symbols: %s", exc)
            return []
        symbols = [
            display_symbol(market["base"])
            for market in markets.values()
            if market.get("swap") and market.get("active", True) and market.get("base")
        ]
        return symbols[:limit] if limit else symbols
