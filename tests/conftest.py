"""Shared fixtures: candle builders and in-memory collaborators."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

import pytest

from signal_arena.data.adapters import DEFAULT_SPECS, MarketDataAdapter
from signal_arena.data.data_service import DataService
from signal_arena.data.sentiment import SentimentFeed
from signal_arena.decision.models import OracleProposal
from signal_arena.decision.oracle import ReasoningOracle
from signal_arena.models import (
    AccountMargin,
    Candle,
    InstrumentSpecs,
    PatternBias,
    PatternMatch,
    Side,
    TradingSignal,
)

HOUR_MS = 60 * 60 * 1000
NOW = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)
NOW_MS = int(NOW.timestamp() * 1000)


def candles_from_closes(
    closes: Sequence[float],
    symbol: str = "BTC-PERP",
    interval: str = "1h",
    spread: float = 0.005,
    volume: float = 100_000.0,
) -> List[Candle]:
    """Bars that open at the previous close with a symmetric high/low spread."""
    candles: List[Candle] = []
    for i, close in enumerate(closes):
        open_ = closes[i - 1] if i else close
        candles.append(
            Candle(
                open_time=i * HOUR_MS,
                close_time=(i + 1) * HOUR_MS - 1,
                symbol=symbol,
                interval=interval,
                open=float(open_),
                close=float(close),
                high=max(open_, close) * (1 + spread),
                low=min(open_, close) * (1 - spread),
                volume=volume,
            )
        )
    return candles


def make_signal(
    side: Side = Side.LONG,
    entry: float = 100.0,
    stop: float = 95.0,
    target: float = 115.0,
    leverage: float = 3.0,
    rr: float = 3.0,
    confidence: float = 85.0,
    expires_at: Optional[datetime] = None,
    symbol: str = "BTC-PERP",
) -> TradingSignal:
    return TradingSignal(
        symbol=symbol,
        side=side,
        entry_price=entry,
        stop_loss=stop,
        take_profit=target,
        leverage=leverage,
        risk_reward_ratio=rr,
        confidence=confidence,
        expires_at=expires_at or NOW + timedelta(hours=24),
    )


def make_pattern(
    name: str = "DOUBLE TOP",
    confidence: float = 80.0,
    bias: PatternBias = PatternBias.BEARISH,
) -> PatternMatch:
    return PatternMatch(
        pattern_name=name, confidence=confidence, signal=bias, description=name.lower()
    )


class FakeMarketData(MarketDataAdapter):
    """Dictionary-backed market data; unknown symbols get sentinels."""

    def __init__(self) -> None:
        self.prices: Dict[str, float] = {}
        self.candles: Dict[str, List[Candle]] = {}
        self.specs: Dict[str, InstrumentSpecs] = {}
        self.margin = AccountMargin(account_value=10_000.0, used_margin=0.0)
        self.symbols: List[str] = []
        self.candle_requests: List[tuple] = []

    def get_mid_price(self, symbol: str) -> float:
        return self.prices.get(symbol, 0.0)

    def get_candles(self, symbol, interval, start_ms, end_ms):
        self.candle_requests.append((symbol, interval, start_ms, end_ms))
        return list(self.candles.get(symbol, []))

    def get_instrument_specs(self, symbol: str) -> InstrumentSpecs:
        return self.specs.get(symbol, DEFAULT_SPECS)

    def get_account_margin(self, account) -> AccountMargin:
        return self.margin

    def list_symbols(self, limit=None):
        return self.symbols[:limit] if limit else list(self.symbols)


class FakeSentiment(SentimentFeed):
    def __init__(self, value: int = 50) -> None:
        self.value = value
        self.calls = 0

    def get_fear_greed_index(self) -> int:
        self.calls += 1
        return self.value


class FakeOracle(ReasoningOracle):
    """Returns a fixed proposal and records every prompt it sees."""

    def __init__(self, proposal: Optional[dict] = None, error: Optional[Exception] = None):
        self.proposal = proposal
        self.error = error
        self.prompts = []

    def propose(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return OracleProposal.model_validate(self.proposal)


class Clock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def oracle_payload(**overrides) -> dict:
    signal = {
        "side": "long",
        "entry_price": 100.0,
        "stop_loss": 95.0,
        "take_profit": 115.0,
        "leverage": 3,
        "risk_reward_ratio": 3.0,
        "confidence": 85,
        "analysis": {"technical_analysis": "Oversold bounce off support."},
        "ai_insights": {"key_levels": [95.0, 115.0]},
    }
    signal.update(overrides)
    return {"signal": signal, "reasoning": " Tier 1 setup with pattern confluence. "}


@pytest.fixture
def market_data():
    fake = FakeMarketData()
    fake.prices["BTC-PERP"] = 100.0
    fake.specs["BTC-PERP"] = InstrumentSpecs(lot_size=0.0001, tick_size=0.01, min_order_value=10.0)
    return fake


@pytest.fixture
def data_service(market_data):
    return DataService(market_data=market_data, lookback_days=7, clock=lambda: NOW_MS)


@pytest.fixture
def clock():
    return Clock()
