"""Quality scoring for human improvements to a signal."""

from __future__ import annotations

from typing import List, Optional

from signal_arena.models.enums import ImprovementType, Side
from signal_arena.models.improvement import (
    ImprovementAssessment,
    ImprovementSubmission,
    ImprovementValue,
)
from signal_arena.models.signal import TradingSignal

REVENUE_SHARE = 0.6

INSIGHT_KEYWORDS = frozenset(
    {
        "support",
        "resistance",
        "volume",
        "momentum",
        "trend",
        "pattern",
        "fibonacci",
        "ma",
        "rsi",
        "macd",
        "bollinger",
        "institutional",
        "liquidity",
        "breakout",
        "breakdown",
        "consolidation",
        "divergence",
    }
)

MIN_CHANGE = {
    ImprovementType.ENTRY_ADJUSTMENT: 0.005,
    ImprovementType.STOP_LOSS_ADJUSTMENT: 0.01,
    ImprovementType.TAKE_PROFIT_ADJUSTMENT: 0.01,
}


def _as_price(value: ImprovementValue) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def is_substantive(submission: ImprovementSubmission) -> bool:
    if submission.improvement_type == ImprovementType.ANALYSIS_ENHANCEMENT:
        return len(submission.reasoning) > 80

    original = _as_price(submission.original_value)
    improved = _as_price(submission.improved_value)
    if original is None or improved is None or original == 0 or original == improved:
        return False
    return abs((improved - original) / original) > MIN_CHANGE[submission.improvement_type]


def is_logical(signal: TradingSignal, submission: ImprovementSubmission) -> bool:
    """The improved level must stay on the right side of the signal's other levels."""
    kind = submission.improvement_type
    if kind == ImprovementType.ANALYSIS_ENHANCEMENT:
        return True

    value = _as_price(submission.improved_value)
    if value is None:
        return False

    entry, stop, target = signal.entry_price, signal.stop_loss, signal.take_profit
    long = signal.side == Side.LONG
    if kind == ImprovementType.ENTRY_ADJUSTMENT:
        return stop < value < target if long else target < value < stop
    if kind == ImprovementType.STOP_LOSS_ADJUSTMENT:
        return (value < entry and value < target) if long else (value > entry and value > target)
    return (value > entry and value > stop) if long else (value < entry and value < stop)


def keyword_matches(text: str) -> int:
    """Count vocabulary terms appearing anywhere in the text, each once."""
    lowered = text.lower()
    return sum(1 for keyword in INSIGHT_KEYWORDS if keyword in lowered)


def has_new_insight(reasoning: str) -> bool:
    return keyword_matches(reasoning) >= 2 and len(reasoning) > 60


def grammar_score(text: str) -> int:
    if not text or len(text) < 20:
        return 0
    score = 5
    if any(mark in text for mark in ".!?"):
        score += 2
    if len(text.split()) >= 15:
        score += 2
    if text == text.strip():
        score += 1
    return score


def score_improvement(
    signal: TradingSignal, submission: ImprovementSubmission
) -> ImprovementAssessment:
    score = 0
    reasons: List[str] = []
    reasoning = submission.reasoning or ""

    if len(reasoning) >= 50:
        score += 20
        if len(reasoning) >= 100:
            score += 5
        reasons.append(f"Detailed reasoning ({len(reasoning)} chars)")
    else:
        reasons.append(f"Reasoning too short ({len(reasoning)} chars)")

    if is_substantive(submission):
        score += 25
        reasons.append("Substantive change")
    else:
        reasons.append("Change too small to matter")

    if is_logical(signal, submission):
        score += 25
        reasons.append("Levels remain consistent with the signal direction")
    else:
        reasons.append("Improved level conflicts with the signal's other levels")

    if has_new_insight(reasoning):
        score += 25
        reasons.append("Provides new technical insight")

    score += min(10, grammar_score(reasoning))
    return ImprovementAssessment(score=max(0, min(100, score)), reasons=tuple(reasons))
