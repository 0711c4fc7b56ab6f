"""Deterministic risk normalization applied to oracle proposals."""

from __future__ import annotations

from dataclasses import replace

from signal_arena.models.signal import TradingSignal

MAX_SIGNAL_LEVERAGE = 5.0
MIN_SIGNAL_LEVERAGE = 2.0
# Leverage above this cap requires confidence > HIGH_CONFIDENCE.
STANDARD_LEVERAGE_CAP = 3.0
HIGH_CONFIDENCE = 80
MIN_RISK_REWARD = 2.0
TIER_ONE_WIN_RATE = 70
LOW_WIN_RATE = 50


def normalize_signal(signal: TradingSignal, win_rate: float) -> TradingSignal:
    """Clamp leverage, adjust confidence by win rate and floor R:R at 2.

    Leverage is judged against the oracle's own confidence before the win-rate
    adjustment. Already-normalized signals are returned unchanged.
    """
    if signal.risk_normalized:
        return signal

    cap = MAX_SIGNAL_LEVERAGE if signal.confidence > HIGH_CONFIDENCE else STANDARD_LEVERAGE_CAP
    leverage = max(MIN_SIGNAL_LEVERAGE, min(signal.leverage, MAX_SIGNAL_LEVERAGE, cap))

    confidence = signal.confidence
    if win_rate > TIER_ONE_WIN_RATE:
        confidence = min(95.0, confidence + 10)
    elif win_rate < LOW_WIN_RATE:
        confidence = max(30.0, confidence - 20)

    return replace(
        signal,
        leverage=leverage,
        confidence=confidence,
        risk_reward_ratio=max(MIN_RISK_REWARD, signal.risk_reward_ratio),
        risk_normalized=True,
    )
