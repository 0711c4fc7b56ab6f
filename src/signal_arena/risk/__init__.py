"""Risk normalization, quality scoring and position safety checks."""

from signal_arena.risk.manager import PositionContext, PositionValidator, RiskRule
from signal_arena.risk.normalization import normalize_signal
from signal_arena.risk.quality import QUALITY_GATE, score_signal_quality

__all__ = [
    "QUALITY_GATE",
    "PositionContext",
    "PositionValidator",
    "RiskRule",
    "normalize_signal",
    "score_signal_quality",
]
