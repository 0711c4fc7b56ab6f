"""Signal quality scoring and the generation gate."""

from __future__ import annotations

import math
from typing import List

from signal_arena.models.enums import Side
from signal_arena.models.market import MarketSnapshot
from signal_arena.models.signal import PatternRecognition, QualityAssessment, TradingSignal

QUALITY_GATE = 60
MAX_REASONS = 5

# Win rate at which the win-rate component earns its full 40 points.
FULL_CREDIT_WIN_RATE = 70.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_signal_quality(
    signal: TradingSignal,
    snapshot: MarketSnapshot,
    patterns: PatternRecognition,
) -> QualityAssessment:
    """Score a normalized signal from 0 to 100 with its top five reasons.

    Components: win rate (40), risk/reward (20), pattern confluence (15),
    market conditions (10) and confidence/leverage/drawdown (10), less
    penalties for a negative Sharpe ratio and thin volume.
    """
    score = 0.0
    reasons: List[str] = []

    win_rate = snapshot.win_rate
    score += min(40.0, max(0.0, win_rate / FULL_CREDIT_WIN_RATE * 40.0))
    if win_rate > 70:
        reasons.append(f"Excellent win rate: {win_rate:.1f}%")
    elif win_rate > 60:
        reasons.append(f"Good win rate: {win_rate:.1f}%")
    elif win_rate < 50:
        reasons.append(f"Poor win rate: {win_rate:.1f}%")

    rr = signal.risk_reward_ratio
    score += min(20.0, max(0.0, (rr - 1) * 10))
    if rr >= 3:
        reasons.append(f"Excellent R/R: 1:{rr:.1f}")
    elif rr >= 2:
        reasons.append(f"Good R/R: 1:{rr:.1f}")
    else:
        reasons.append(f"Poor R/R: 1:{rr:.1f}")

    strong = sum(1 for p in patterns.patterns if p.confidence > 70)
    moderate = sum(1 for p in patterns.patterns if p.confidence > 50)
    if strong >= 2:
        score += 15
        reasons.append(f"Strong pattern confluence: {strong} high-confidence patterns")
    elif strong >= 1 or moderate >= 2:
        score += 10
        reasons.append("Moderate pattern support")
    else:
        reasons.append("Weak pattern support")

    if snapshot.volume_24h > 1_000_000:
        score += 3
        reasons.append(f"Good liquidity: ${snapshot.volume_24h / 1_000_000:.1f}M volume")
    if 5 < snapshot.avg_volatility < 30:
        score += 3
        reasons.append(f"Healthy volatility: {snapshot.avg_volatility:.1f}%")
    elif snapshot.avg_volatility > 50:
        reasons.append(f"High volatility warning: {snapshot.avg_volatility:.1f}%")
    if (snapshot.rsi < 35 and signal.side == Side.LONG) or (
        snapshot.rsi > 65 and signal.side == Side.SHORT
    ):
        score += 4
        reasons.append(f"Good RSI positioning: {snapshot.rsi:.1f}")

    risk_score = 0
    if signal.confidence > 80:
        risk_score += 5
        reasons.append(f"High AI confidence: {signal.confidence:g}%")
    elif signal.confidence < 60:
        reasons.append(f"Low AI confidence: {signal.confidence:g}%")
    if signal.leverage <= 3:
        risk_score += 3
        reasons.append(f"Conservative leverage: {signal.leverage:g}x")
    elif signal.leverage > 5:
        risk_score -= 2
        reasons.append(f"High leverage risk: {signal.leverage:g}x")
    if snapshot.max_drawdown < 20:
        risk_score += 2
        reasons.append(f"Low historical drawdown: {snapshot.max_drawdown:.1f}%")
    score += max(0, risk_score)

    if snapshot.sharpe_ratio < 0:
        score -= 10
        reasons.append(f"Negative Sharpe ratio: {snapshot.sharpe_ratio:.2f}")
    if snapshot.volume_24h < 100_000:
        score -= 15
        reasons.append(f"Low volume warning: ${snapshot.volume_24h:,.0f}")

    final = max(0.0, min(100.0, score))
    return QualityAssessment(score=_round_half_up(final), reasons=tuple(reasons[:MAX_REASONS]))
