"""Tests for the signal engine orchestration."""

import itertools

import pytest

from conftest import NOW, Clock, FakeOracle, FakeSentiment, oracle_payload
from signal_arena.decision.engine import SignalEngine
from signal_arena.decision.synthesizer import SignalSynthesizer
from signal_arena.errors import NoOpportunitiesFound, SignalNotActive
from signal_arena.execution.position_sizer import PositionSizer
from signal_arena.execution.simulated_executor import SimulatedExecutionAdapter
from signal_arena.execution.trade_executor import TradeExecutor
from signal_arena.models import (
    AccountMargin,
    ExecutionStatus,
    MarketOpportunity,
    MarketSnapshot,
    OpportunitySetup,
    ScanResult,
    ScanSummary,
    SetupDirection,
    SignalStatus,
    TradeOutcome,
)
from signal_arena.signals.lifecycle import SignalBook
from signal_arena.strategies.patterns import summarize_patterns

SNAPSHOT = MarketSnapshot(
    symbol="BTC-PERP",
    price=100.0,
    change_24h=1.0,
    volume_24h=5_000_000.0,
    rsi=30.0,
    win_rate=75.0,
    sharpe_ratio=1.2,
    max_drawdown=10.0,
    avg_volatility=10.0,
)


class StubScanner:
    def __init__(self, symbols=("BTC-PERP",)):
        self.symbols = symbols
        self.calls = []

    def scan(self, **kwargs):
        self.calls.append(kwargs)
        opportunities = tuple(
            MarketOpportunity(
                symbol=symbol,
                score=80.0,
                price=100.0,
                change_24h=1.0,
                volume=5_000_000.0,
                rsi=30.0,
                win_rate=75.0,
                sharpe_ratio=1.2,
                max_drawdown=10.0,
                signals=(),
                setup=OpportunitySetup("Oversold", SetupDirection.LONG, "RSI 30", 80),
            )
            for symbol in self.symbols
        )
        summary = ScanSummary(len(self.symbols), len(opportunities), 75.0, 75.0)
        return ScanResult(opportunities=opportunities, summary=summary)


class StubRecognizer:
    def recognize(self, symbol):
        return summarize_patterns([])


@pytest.fixture
def oracle():
    return FakeOracle(oracle_payload())


@pytest.fixture
def venue():
    return SimulatedExecutionAdapter()


@pytest.fixture
def engine(data_service, oracle, venue, monkeypatch):
    monkeypatch.setattr(data_service, "get_market_snapshot", lambda symbol: SNAPSHOT)
    ids = itertools.count(1)
    synthesizer = SignalSynthesizer(
        data_service,
        oracle=oracle,
        sentiment=FakeSentiment(50),
        pattern_recognizer=StubRecognizer(),
        clock=lambda: NOW,
    )
    return SignalEngine(
        data_service=data_service,
        synthesizer=synthesizer,
        scanner=StubScanner(),
        executor=TradeExecutor(
            data_service, venue, sizer=PositionSizer(data_service, clock=lambda: NOW)
        ),
        book=SignalBook(clock=Clock(), id_factory=lambda: f"sig-{next(ids)}"),
    )


# ── Creation ─────────────────────────────────────────────────────────────


class TestCreateSignal:

    def test_explicit_symbol_registered(self, engine):
        record = engine.create_signal("alice", "BTC-PERP")
        assert record.signal_id == "sig-1"
        assert record.creator_id == "alice"
        assert record.status == SignalStatus.ACTIVE
        assert engine.scanner.calls == []

    def test_auto_selects_top_opportunity(self, engine):
        record = engine.create_signal("alice")
        assert record.signal.symbol == "BTC-PERP"
        assert engine.scanner.calls[0]["top_count"] == 1
        assert engine.scanner.calls[0]["min_volume"] == 1_000_000

    def test_no_opportunities(self, engine):
        engine.scanner = StubScanner(symbols=())
        with pytest.raises(NoOpportunitiesFound):
            engine.create_signal("alice")

    def test_creator_history_passed_to_prompt(self, engine, oracle):
        first = engine.create_signal("alice", "BTC-PERP")
        engine.book.record_outcome(first.signal_id, TradeOutcome.WIN, 0.1)

        engine.create_signal("alice", "BTC-PERP")

        assert "No historical data" in oracle.prompts[0].user
        assert "Historical Performance: 1 trades, 100.0% win rate" in oracle.prompts[1].user


# ── Execution ────────────────────────────────────────────────────────────


class TestExecuteSignal:

    def test_successful_execution_marks_signal(self, engine, venue):
        record = engine.create_signal("alice", "BTC-PERP")

        result = engine.execute_signal(record.signal_id, account=None)

        assert result.status == ExecutionStatus.RESTING
        assert record.status == SignalStatus.EXECUTED
        assert record.execution is result
        assert len(venue.orders) == 1

    def test_executed_signal_cannot_run_twice(self, engine):
        record = engine.create_signal("alice", "BTC-PERP")
        engine.execute_signal(record.signal_id, account=None)
        with pytest.raises(SignalNotActive):
            engine.execute_signal(record.signal_id, account=None)

    def test_failed_execution_keeps_signal_active(self, engine, market_data, venue):
        record = engine.create_signal("alice", "BTC-PERP")
        market_data.margin = AccountMargin(account_value=1_000.0, used_margin=999.0)

        result = engine.execute_signal(record.signal_id, account=None)

        assert result.status == ExecutionStatus.FAILED
        assert record.status == SignalStatus.ACTIVE
        assert venue.orders == []

    def test_concurrent_execution_refused(self, engine):
        record = engine.create_signal("alice", "BTC-PERP")
        inner = engine.executor
        nested = []

        class ReentrantExecutor:
            def execute(self, signal, account, risk_pct=None, max_leverage=None, **kwargs):
                try:
                    engine.execute_signal(record.signal_id, account=None)
                except SignalNotActive as exc:
                    nested.append(exc)
                return inner.execute(signal, account, risk_pct, max_leverage, **kwargs)

        engine._executor = ReentrantExecutor()
        result = engine.execute_signal(record.signal_id, account=None)

        assert result.success
        assert len(nested) == 1
        assert record.status == SignalStatus.EXECUTED

    def test_executor_error_releases_signal(self, engine):
        record = engine.create_signal("alice", "BTC-PERP")

        class BrokenExecutor:
            def execute(self, *args, **kwargs):
                raise RuntimeError("venue down")

        engine._executor = BrokenExecutor()
        with pytest.raises(RuntimeError):
            engine.execute_signal(record.signal_id, account=None)

        assert record.status == SignalStatus.ACTIVE
        assert record.executing is False
