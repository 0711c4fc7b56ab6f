"""Model exports."""

from signal_arena.models.enums import (
    ExecutionStatus,
    ImprovementType,
    MarginMode,
    OrderIntent,
    OverallSignal,
    PatternBias,
    SetupDirection,
    Side,
    SignalStatus,
    TimeInForce,
    TradeOutcome,
)
from signal_arena.models.improvement import (
    ACCEPTANCE_THRESHOLD,
    AcceptedImprovement,
    ImprovementAssessment,
    ImprovementSubmission,
)
from signal_arena.models.market import (
    AccountMargin,
    BollingerBands,
    Candle,
    ExchangeAccount,
    InstrumentSpecs,
    MACDValues,
    MarketSnapshot,
    PerformanceMetrics,
    TechnicalSnapshot,
)
from signal_arena.models.order import (
    ExecutionResult,
    OrderRequest,
    PositionCalculation,
    ValidationReport,
    VenueFill,
    VenueOrderResult,
    VenueResting,
)
from signal_arena.models.signal import (
    AIInsights,
    HistoricalPerformance,
    MarketConditions,
    MarketOpportunity,
    OpportunitySetup,
    PatternMatch,
    PatternRecognition,
    QualityAssessment,
    ScanResult,
    ScanSummary,
    SignalAnalysis,
    SignalOutcome,
    TradingSignal,
)

__all__ = [
    "ACCEPTANCE_THRESHOLD",
    "AIInsights",
    "AcceptedImprovement",
    "AccountMargin",
    "BollingerBands",
    "Candle",
    "ExchangeAccount",
    "ExecutionResult",
    "ExecutionStatus",
    "HistoricalPerformance",
    "ImprovementAssessment",
    "ImprovementSubmission",
    "ImprovementType",
    "InstrumentSpecs",
    "MACDValues",
    "MarginMode",
    "MarketConditions",
    "MarketOpportunity",
    "MarketSnapshot",
    "OpportunitySetup",
    "OrderIntent",
    "OrderRequest",
    "OverallSignal",
    "PatternBias",
    "PatternMatch",
    "PatternRecognition",
    "PerformanceMetrics",
    "PositionCalculation",
    "QualityAssessment",
    "ScanResult",
    "ScanSummary",
    "SetupDirection",
    "Side",
    "SignalAnalysis",
    "SignalOutcome",
    "SignalStatus",
    "TechnicalSnapshot",
    "TimeInForce",
    "TradeOutcome",
    "TradingSignal",
    "ValidationReport",
    "VenueFill",
    "VenueOrderResult",
    "VenueResting",
]
