"""Tests for opportunity scoring, ranking and the scanner loop."""

import pytest

from conftest import FakeSentiment
from signal_arena.decision.scanner import (
    OpportunityScanner,
    analyze_setup,
    describe_signals,
    opportunity_score,
    rank_opportunities,
)
from signal_arena.errors import OpportunityScanFailed
from signal_arena.models import (
    MarketOpportunity,
    MarketSnapshot,
    OpportunitySetup,
    SetupDirection,
)


def snapshot(symbol="BTC-PERP", **overrides):
    values = dict(
        symbol=symbol,
        price=100.0,
        change_24h=0.0,
        volume_24h=5_000_000.0,
        rsi=50.0,
        win_rate=60.0,
        sharpe_ratio=0.0,
        max_drawdown=10.0,
        avg_volatility=10.0,
    )
    values.update(overrides)
    return MarketSnapshot(**values)


def opportunity(symbol, win_rate, score):
    return MarketOpportunity(
        symbol=symbol,
        score=score,
        price=100.0,
        change_24h=0.0,
        volume=1_000_000.0,
        rsi=50.0,
        win_rate=win_rate,
        sharpe_ratio=0.0,
        max_drawdown=0.0,
        signals=(),
        setup=OpportunitySetup("Consistent Performer", SetupDirection.LONG, "", 65),
    )


# ── Scoring ──────────────────────────────────────────────────────────────


class TestOpportunityScore:

    def test_baseline_score(self):
        # 60*0.4 + 50*0.2 + 40*0.2 + 50*0.1 + 0
        assert opportunity_score(snapshot(), 50) == pytest.approx(47.0)

    def test_drawdown_penalty(self):
        assert opportunity_score(snapshot(max_drawdown=60.0), 50) == pytest.approx(47.0 * 0.8)

    def test_contrarian_greed_setup(self):
        snap = snapshot(
            win_rate=80.0, sharpe_ratio=2.0, rsi=75.0, change_24h=6.0, volume_24h=20_000_000.0
        )
        # 32 + 20 + 80*0.2 + 10 + 80*0.1
        assert opportunity_score(snap, 80) == pytest.approx(86.0)

    def test_score_is_clamped(self):
        snap = snapshot(win_rate=0.0, sharpe_ratio=-10.0, rsi=50.0, volume_24h=0.0)
        assert opportunity_score(snap, 50) >= 0.0


# ── Ranking ──────────────────────────────────────────────────────────────


class TestRanking:

    def test_win_rate_dominates_beyond_five_points(self):
        ranked = rank_opportunities([opportunity("B", 64.0, 90.0), opportunity("A", 70.0, 60.0)])
        assert [o.symbol for o in ranked] == ["A", "B"]

    def test_score_breaks_ties_within_five_points(self):
        ranked = rank_opportunities([opportunity("A", 68.0, 60.0), opportunity("B", 64.0, 90.0)])
        assert [o.symbol for o in ranked] == ["B", "A"]

    def test_exactly_five_points_uses_score(self):
        ranked = rank_opportunities([opportunity("A", 70.0, 60.0), opportunity("B", 65.0, 90.0)])
        assert [o.symbol for o in ranked] == ["B", "A"]


# ── Setup and tags ───────────────────────────────────────────────────────


class TestSetupAndSignals:

    @pytest.mark.parametrize(
        "rsi, change, fear_greed, win_rate, setup_type, direction, confidence",
        [
            (75, 0, 70, 72, "High Win Rate Bearish Reversal", SetupDirection.SHORT, 85),
            (25, 0, 30, 68, "High Win Rate Bullish Reversal", SetupDirection.LONG, 80),
            (50, -7, 50, 62, "High Win Rate Momentum", SetupDirection.SHORT, 75),
            (55, 1, 50, 58, "Consistent Performer", SetupDirection.LONG, 65),
            (45, 1, 50, 58, "Consistent Performer", SetupDirection.SHORT, 65),
            (50, 0, 50, 50, "Low Probability Setup", SetupDirection.NEUTRAL, 40),
        ],
    )
    def test_setup_classification(
        self, rsi, change, fear_greed, win_rate, setup_type, direction, confidence
    ):
        setup = analyze_setup(rsi, change, fear_greed, win_rate)
        assert setup.type == setup_type
        assert setup.direction == direction
        assert setup.confidence == confidence

    def test_setup_reasoning_includes_win_rate(self):
        setup = analyze_setup(75, 0, 70, 72.345)
        assert setup.reasoning.startswith("72.3% win rate")

    def test_signal_tags(self):
        snap = snapshot(win_rate=72.0, sharpe_ratio=1.5, rsi=25.0, change_24h=9.0, max_drawdown=5.0)
        tags = describe_signals(snap, 80)
        assert tags == [
            "High Win Rate: 72.0%",
            "Strong Sharpe: 1.50",
            "RSI Oversold",
            "High Volatility",
            "Strong Bullish Move",
            "Extreme Greed",
            "Low Risk Profile",
            "Premium Contrarian Setup",
        ]


# ── Scanner loop ─────────────────────────────────────────────────────────


class TestOpportunityScanner:

    @pytest.fixture
    def scanner(self, market_data, data_service, monkeypatch):
        snapshots = {
            "GOOD-PERP": snapshot(
                "GOOD-PERP",
                win_rate=80.0,
                sharpe_ratio=2.0,
                rsi=75.0,
                change_24h=6.0,
                volume_24h=20_000_000.0,
            ),
            "THIN-PERP": snapshot("THIN-PERP", win_rate=80.0, volume_24h=500_000.0),
            "WEAK-PERP": snapshot("WEAK-PERP", win_rate=40.0),
        }

        def fake_snapshot(symbol):
            if symbol == "BROKEN-PERP":
                raise RuntimeError("candles unavailable")
            return snapshots[symbol]

        for symbol in ("GOOD-PERP", "THIN-PERP", "WEAK-PERP", "BROKEN-PERP"):
            market_data.prices[symbol] = 100.0
        market_data.symbols = ["GOOD-PERP", "THIN-PERP", "DEAD-PERP", "BROKEN-PERP", "WEAK-PERP"]
        monkeypatch.setattr(data_service, "get_market_snapshot", fake_snapshot)
        return OpportunityScanner(data_service, sentiment=FakeSentiment(80))

    def test_filters_and_skips_failures(self, scanner):
        result = scanner.scan(
            symbols=["GOOD-PERP", "THIN-PERP", "DEAD-PERP", "BROKEN-PERP", "WEAK-PERP"],
            min_volume=2_000_000,
            top_count=5,
        )
        assert [o.symbol for o in result.opportunities] == ["GOOD-PERP"]
        assert result.summary.total_scanned == 5
        assert result.summary.opportunities_found == 1
        assert result.summary.avg_win_rate == pytest.approx(80.0)
        assert result.summary.top_win_rate == pytest.approx(80.0)

        best = result.opportunities[0]
        assert best.score == pytest.approx(86.0)
        assert best.setup.type == "High Win Rate Bearish Reversal"
        assert "Extreme Greed" in best.signals

    def test_uses_adapter_universe_when_no_symbols(self, scanner):
        result = scanner.scan(min_volume=2_000_000, top_count=5, max_symbols=2)
        assert result.summary.total_scanned == 2
        assert [o.symbol for o in result.opportunities] == ["GOOD-PERP"]

    def test_empty_scan_summary(self, scanner):
        result = scanner.scan(symbols=[], min_volume=2_000_000)
        assert result.opportunities == ()
        assert result.summary.avg_win_rate == 0.0
        assert result.summary.top_win_rate == 0.0

    def test_universe_failure_raises(self, data_service, monkeypatch):
        def boom(limit=None):
            raise ConnectionError("meta unavailable")

        monkeypatch.setattr(data_service, "list_symbols", boom)
        scanner = OpportunityScanner(data_service, sentiment=FakeSentiment())
        with pytest.raises(OpportunityScanFailed, match="Failed to scan"):
            scanner.scan()
