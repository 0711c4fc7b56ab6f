"""Market data entities: candles, derived indicators and account state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Candle:
    """A single OHLCV bar. Times are epoch milliseconds."""

    open_time: int
    close_time: int
    symbol: str
    interval: str
    open: float
    close: float
    high: float
    low: float
    volume: float
    trade_count: int = 0


@dataclass(frozen=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float


@dataclass(frozen=True)
class MACDValues:
    macd: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class TechnicalSnapshot:
    rsi: float
    sma: float
    ema: float
    bollinger: BollingerBands
    macd: MACDValues
    # False for the neutral snapshot returned on fewer than 20 candles.
    sufficient_data: bool = True


@dataclass(frozen=True)
class PerformanceMetrics:
    win_rate: float
    sharpe_ratio: float
    max_drawdown_pct: float
    avg_volatility_pct: float
    sufficient_data: bool = True


@dataclass(frozen=True)
class MarketSnapshot:
    """Per-symbol market view used by the scanner and the synthesizer."""

    symbol: str
    price: float
    change_24h: float
    volume_24h: float
    rsi: float
    win_rate: float
    sharpe_ratio: float
    max_drawdown: float
    avg_volatility: float
    technicals: Optional[TechnicalSnapshot] = None

    @property
    def available(self) -> bool:
        return self.price > 0

    @classmethod
    def unavailable(cls, symbol: str) -> "MarketSnapshot":
        return cls(
            symbol=symbol,
            price=0.0,
            change_24h=0.0,
            volume_24h=0.0,
            rsi=50.0,
            win_rate=50.0,
            sharpe_ratio=0.0,
            max_drawdown=0.0,
            avg_volatility=0.0,
        )


@dataclass(frozen=True)
class InstrumentSpecs:
    lot_size: float
    tick_size: float
    min_order_value: float

    @property
    def valid(self) -> bool:
        return self.lot_size > 0 and self.tick_size > 0


@dataclass(frozen=True)
class AccountMargin:
    account_value: float
    used_margin: float

    @property
    def available_margin(self) -> float:
        return self.account_value - self.used_margin


@dataclass(frozen=True)
class ExchangeAccount:
    """Credentials that identify one trading account on the venue."""

    wallet_address: str
    private_key: Optional[str] = field(default=None, repr=False)

    @property
    def session_key(self) -> str:
        if self.wallet_address:
            return self.wallet_address.lower()
        if self.private_key:
            return self.private_key[-8:]
        return "public"
