"""Technical indicators and return statistics over candle series."""

from __future__ import annotations

import math
from typing import Sequence

import pandas as pd

from signal_arena.models.market import (
    BollingerBands,
    Candle,
    MACDValues,
    PerformanceMetrics,
    TechnicalSnapshot,
)

MIN_INDICATOR_CANDLES = 20
MIN_METRIC_CANDLES = 30
RSI_PERIOD = 14
MA_PERIOD = 20
BOLLINGER_STD = 2.0
MACD_FAST = 12
MACD_SLOW = 26
TRADING_DAYS = 252


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "timestamp": [c.open_time for c in candles],
            "open": [c.open for c in candles],
            "high": [c.high for c in candles],
            "low": [c.low for c in candles],
            "close": [c.close for c in candles],
            "volume": [c.volume for c in candles],
        },
        dtype=float,
    )


def ema(series: pd.Series, span: int) -> pd.Series:
    """EMA seeded with the first value, recursing over the whole series."""
    return series.ewm(span=span, adjust=False).mean()


def trailing_rsi(series: pd.Series, period: int = RSI_PERIOD) -> float:
    """Simple-average RSI over the most recent ``period`` deltas."""
    delta = series.diff().dropna()
    gains = delta.clip(lower=0).tail(period)
    losses = (-delta.clip(upper=0)).tail(period)
    avg_gain = float(gains.sum()) / period
    avg_loss = float(losses.sum()) / period
    rs = 100.0 if avg_loss == 0 else avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def neutral_snapshot(candles: Sequence[Candle]) -> TechnicalSnapshot:
    last_close = candles[-1].close if candles else 0.0
    return TechnicalSnapshot(
        rsi=50.0,
        sma=last_close,
        ema=last_close,
        bollinger=BollingerBands(upper=0.0, middle=0.0, lower=0.0),
        macd=MACDValues(macd=0.0, signal=0.0, histogram=0.0),
        sufficient_data=False,
    )


def compute_indicators(candles: Sequence[Candle]) -> TechnicalSnapshot:
    """RSI, SMA, EMA, Bollinger and MACD for the latest bar.

    Fewer than 20 candles yields the neutral snapshot (``sufficient_data``
    is False) instead of an error.
    """
    if len(candles) < MIN_INDICATOR_CANDLES:
        return neutral_snapshot(candles)

    closes = pd.Series([c.close for c in candles], dtype=float)
    window = closes.tail(MA_PERIOD)
    sma = float(window.mean())
    std = float(window.std(ddof=0))
    ema_value = float(ema(closes, MA_PERIOD).iloc[-1])

    # Trailing simple averages, not exponential ones. The signal line mirrors
    # the MACD line so the histogram is always zero.
    macd_line = float(closes.tail(MACD_FAST).mean() - closes.tail(MACD_SLOW).mean())

    return TechnicalSnapshot(
        rsi=trailing_rsi(closes, RSI_PERIOD),
        sma=sma,
        ema=ema_value,
        bollinger=BollingerBands(
            upper=sma + BOLLINGER_STD * std,
            middle=sma,
            lower=sma - BOLLINGER_STD * std,
        ),
        macd=MACDValues(macd=macd_line, signal=macd_line, histogram=0.0),
    )


def compute_metrics(candles: Sequence[Candle]) -> PerformanceMetrics:
    """Win rate, Sharpe, max drawdown and average bar range of a series.

    Needs at least 30 candles; shorter series get neutral defaults.
    """
    if len(candles) < MIN_METRIC_CANDLES:
        return PerformanceMetrics(
            win_rate=50.0,
            sharpe_ratio=0.0,
            max_drawdown_pct=0.0,
            avg_volatility_pct=0.0,
            sufficient_data=False,
        )

    df = candles_to_frame(candles)
    close = df["close"]
    returns = (close.diff() / close.shift(1)).iloc[1:]

    win_rate = float((returns > 0).sum()) / len(returns) * 100.0

    mean_return = float(returns.mean())
    std_return = float(returns.std(ddof=0))
    annualizer = math.sqrt(TRADING_DAYS)
    sharpe = 0.0 if std_return == 0 else (mean_return * annualizer) / (std_return * annualizer)

    running_peak = close.cummax()
    drawdown = (running_peak - close) / running_peak
    max_drawdown = float(drawdown.max()) * 100.0

    bar_range = ((df["high"] - df["low"]).abs() / close).iloc[1:]
    avg_volatility = float(bar_range.mean()) * 100.0

    return PerformanceMetrics(
        win_rate=win_rate,
        sharpe_ratio=sharpe,
        max_drawdown_pct=max_drawdown,
        avg_volatility_pct=avg_volatility,
    )
