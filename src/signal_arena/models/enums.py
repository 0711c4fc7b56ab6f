"""Enumerations shared across the engine."""

from enum import Enum


class Side(str, Enum):
    LONG = "long"
    SHORT = "short"


class PatternBias(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class OverallSignal(str, Enum):
    STRONG_BEARISH = "strong_bearish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"
    BULLISH = "bullish"
    STRONG_BULLISH = "strong_bullish"


class SetupDirection(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"
    NEUTRAL = "NEUTRAL"


class SignalStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    EXECUTED = "executed"
    CANCELLED = "cancelled"


class TradeOutcome(str, Enum):
    PENDING = "pending"
    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"


class ImprovementType(str, Enum):
    ENTRY_ADJUSTMENT = "entry-adjustment"
    STOP_LOSS_ADJUSTMENT = "stop-loss-adjustment"
    TAKE_PROFIT_ADJUSTMENT = "take-profit-adjustment"
    ANALYSIS_ENHANCEMENT = "analysis-enhancement"


class OrderIntent(str, Enum):
    MARKET = "market"
    LIMIT = "limit"


class TimeInForce(str, Enum):
    GTC = "Gtc"
    IOC = "Ioc"


class MarginMode(str, Enum):
    CROSS = "cross"
    ISOLATED = "isolated"


class ExecutionStatus(str, Enum):
    FILLED = "filled"
    RESTING = "resting"
    FAILED = "failed"
