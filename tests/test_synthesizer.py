"""Tests for signal synthesis and the quality gate."""

from datetime import timedelta

import pytest

from conftest import (
    NOW,
    FakeOracle,
    FakeSentiment,
    make_pattern,
    oracle_payload,
)
from signal_arena.decision.synthesizer import SignalSynthesizer
from signal_arena.errors import (
    InvalidSymbol,
    MarketUnavailable,
    SignalGenerationFailed,
    SignalQualityLow,
)
from signal_arena.models import (
    HistoricalPerformance,
    InstrumentSpecs,
    MarketSnapshot,
    PatternBias,
    Side,
)
from signal_arena.strategies.patterns import summarize_patterns


def snapshot(symbol="BTC-PERP", **overrides):
    values = dict(
        symbol=symbol,
        price=100.0,
        change_24h=1.0,
        volume_24h=5_000_000.0,
        rsi=30.0,
        win_rate=75.0,
        sharpe_ratio=1.2,
        max_drawdown=10.0,
        avg_volatility=10.0,
    )
    values.update(overrides)
    return MarketSnapshot(**values)


class StubRecognizer:
    def __init__(self, matches=()):
        self.matches = list(matches)
        self.symbols = []

    def recognize(self, symbol):
        self.symbols.append(symbol)
        return summarize_patterns(self.matches)


BULLISH_PAIR = [
    make_pattern("BULLISH FLAG", 80, PatternBias.BULLISH),
    make_pattern("CUP AND HANDLE", 80, PatternBias.BULLISH),
]


@pytest.fixture
def oracle():
    return FakeOracle(oracle_payload())


def build(data_service, oracle, monkeypatch, snap=None, matches=BULLISH_PAIR, fear_greed=80):
    snap = snap or snapshot()
    monkeypatch.setattr(data_service, "get_market_snapshot", lambda symbol: snap)
    return SignalSynthesizer(
        data_service,
        oracle=oracle,
        sentiment=FakeSentiment(fear_greed),
        pattern_recognizer=StubRecognizer(matches),
        clock=lambda: NOW,
    )


# ── Happy path ───────────────────────────────────────────────────────────


class TestSynthesize:

    def test_premium_setup_passes_gate(self, data_service, oracle, monkeypatch):
        synthesizer = build(data_service, oracle, monkeypatch)

        signal = synthesizer.synthesize("BTC-PERP")

        assert signal.side == Side.LONG
        assert signal.quality_score == 95
        assert signal.confidence == 95
        assert signal.leverage == 3
        assert signal.risk_normalized is True
        assert signal.expires_at == NOW + timedelta(hours=24)
        assert signal.reasoning == "Tier 1 setup with pattern confluence."
        assert signal.market_conditions.fear_greed_index == 80
        assert signal.ai_insights.key_levels == (95.0, 115.0)

    def test_prompt_carries_market_context(self, data_service, oracle, monkeypatch):
        build(data_service, oracle, monkeypatch).synthesize("BTC-PERP")

        user = oracle.prompts[0].user
        assert "- Win Rate: 75.0% (TIER 1 - PREMIUM)" in user
        assert "BULLISH FLAG (80% confidence)" in user
        assert "80/100 (Extreme Greed - Contrarian Opportunity)" in user
        assert "No historical data - use conservative approach" in user
        assert '"entry_price"' in oracle.prompts[0].system

    def test_history_rendered_when_given(self, data_service, oracle, monkeypatch):
        history = HistoricalPerformance(
            total_trades=12,
            win_rate=58.333,
            avg_return=0.01,
            sharpe_ratio=0.456,
            max_drawdown=0.1,
            consecutive_wins=3,
            consecutive_losses=2,
        )
        build(data_service, oracle, monkeypatch).synthesize("BTC-PERP", history=history)

        assert (
            "Historical Performance: 12 trades, 58.3% win rate, Sharpe: 0.46"
            in oracle.prompts[0].user
        )

    def test_symbol_uppercased(self, data_service, market_data, oracle, monkeypatch):
        market_data.prices["eth-perp"] = 100.0
        signal = build(data_service, oracle, monkeypatch).synthesize("eth-perp")
        assert signal.symbol == "ETH-PERP"


# ── Rejections ───────────────────────────────────────────────────────────


class TestRejections:

    def test_missing_price(self, data_service, market_data, oracle, monkeypatch):
        market_data.prices["BTC-PERP"] = 0.0
        with pytest.raises(MarketUnavailable, match="not available or not liquid"):
            build(data_service, oracle, monkeypatch).synthesize("BTC-PERP")
        assert oracle.prompts == []

    def test_invalid_specs(self, data_service, market_data, oracle, monkeypatch):
        market_data.specs["BTC-PERP"] = InstrumentSpecs(
            lot_size=0.0, tick_size=0.0, min_order_value=10.0
        )
        with pytest.raises(InvalidSymbol):
            build(data_service, oracle, monkeypatch).synthesize("BTC-PERP")

    def test_oracle_failure_wrapped(self, data_service, monkeypatch):
        oracle = FakeOracle(error=RuntimeError("timeout"))
        with pytest.raises(SignalGenerationFailed) as excinfo:
            build(data_service, oracle, monkeypatch).synthesize("BTC-PERP")
        assert excinfo.value.message == "Failed to generate trading signal from AI"
        assert excinfo.value.code == "SIGNAL_GENERATION_FAILED"

    def test_low_quality_rejected(self, data_service, oracle, monkeypatch):
        weak = snapshot(win_rate=40.0, volume_24h=50_000.0)
        synthesizer = build(data_service, oracle, monkeypatch, snap=weak, matches=())

        with pytest.raises(SignalQualityLow) as excinfo:
            synthesizer.synthesize("BTC-PERP")

        # 22.86 + 20 + 0 + (3 + 4) + (3 + 2) - 15
        assert excinfo.value.score == 40
        assert excinfo.value.reasons[0] == "Poor win rate: 40.0%"
        assert excinfo.value.message.startswith("Signal quality too low (40/100): ")
