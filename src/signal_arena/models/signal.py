"""Signal-side entities: patterns, opportunities and trading signals."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from signal_arena.models.enums import (
    OverallSignal,
    PatternBias,
    SetupDirection,
    Side,
    TradeOutcome,
)


@dataclass(frozen=True)
class PatternMatch:
    pattern_name: str
    confidence: float
    signal: PatternBias
    description: str
    timeframe: str = ""
    entry: Optional[float] = None
    target: Optional[float] = None
    stop_loss: Optional[float] = None


@dataclass(frozen=True)
class PatternRecognition:
    patterns: Tuple[PatternMatch, ...]
    overall_signal: OverallSignal
    bearish_count: int
    bullish_count: int
    neutral_count: int


@dataclass(frozen=True)
class OpportunitySetup:
    type: str
    direction: SetupDirection
    reasoning: str
    confidence: int


@dataclass(frozen=True)
class MarketOpportunity:
    symbol: str
    score: float
    price: float
    change_24h: float
    volume: float
    rsi: float
    win_rate: float
    sharpe_ratio: float
    max_drawdown: float
    signals: Tuple[str, ...]
    setup: OpportunitySetup


@dataclass(frozen=True)
class ScanSummary:
    total_scanned: int
    opportunities_found: int
    avg_win_rate: float
    top_win_rate: float


@dataclass(frozen=True)
class ScanResult:
    opportunities: Tuple[MarketOpportunity, ...]
    summary: ScanSummary


@dataclass(frozen=True)
class HistoricalPerformance:
    total_trades: int
    win_rate: float
    avg_return: float
    sharpe_ratio: float
    max_drawdown: float
    consecutive_wins: int
    consecutive_losses: int


@dataclass(frozen=True)
class SignalOutcome:
    outcome: TradeOutcome
    actual_return: float = 0.0


@dataclass(frozen=True)
class SignalAnalysis:
    technical_analysis: str = ""
    market_analysis: str = ""
    sentiment_analysis: str = ""
    risk_assessment: str = ""


@dataclass(frozen=True)
class AIInsights:
    key_levels: Tuple[float, ...] = ()
    pattern_recognition: str = ""
    volume_profile: str = ""
    momentum_indicators: str = ""


@dataclass(frozen=True)
class MarketConditions:
    fear_greed_index: Optional[int]
    volatility: float
    volume_24h: float
    price_change_24h: float


@dataclass(frozen=True)
class TradingSignal:
    """A risk-bounded trade idea.

    Instances are immutable: risk normalization and the quality gate return
    new copies. ``expires_at`` is a hard deadline for execution.
    """

    symbol: str
    side: Side
    entry_price: float
    stop_loss: float
    take_profit: float
    leverage: float
    risk_reward_ratio: float
    confidence: float
    expires_at: datetime
    analysis: SignalAnalysis = field(default_factory=SignalAnalysis)
    ai_insights: AIInsights = field(default_factory=AIInsights)
    market_conditions: Optional[MarketConditions] = None
    reasoning: str = ""
    quality_score: Optional[int] = None
    quality_reasons: Tuple[str, ...] = ()
    risk_normalized: bool = False

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class QualityAssessment:
    score: int
    reasons: Tuple[str, ...]
