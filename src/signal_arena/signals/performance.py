"""Historical performance over closed signal outcomes."""

from __future__ import annotations

import math
from typing import Iterable

from signal_arena.models.enums import TradeOutcome
from signal_arena.models.signal import HistoricalPerformance, SignalOutcome


def analyze_performance(outcomes: Iterable[SignalOutcome]) -> HistoricalPerformance:
    """Win rate, return statistics and streaks; pending outcomes are ignored.

    Max drawdown is measured on the running sum of returns, in return units.
    """
    closed = [o for o in outcomes if o.outcome != TradeOutcome.PENDING]
    if not closed:
        return HistoricalPerformance(
            total_trades=0,
            win_rate=0.0,
            avg_return=0.0,
            sharpe_ratio=0.0,
            max_drawdown=0.0,
            consecutive_wins=0,
            consecutive_losses=0,
        )

    wins = sum(1 for o in closed if o.outcome == TradeOutcome.WIN)
    returns = [o.actual_return or 0.0 for o in closed]
    avg_return = sum(returns) / len(returns)
    variance = sum((r - avg_return) ** 2 for r in returns) / len(returns)
    std = math.sqrt(variance)
    sharpe = 0.0 if std == 0 else avg_return / std

    max_drawdown = 0.0
    peak = 0.0
    cumulative = 0.0
    for value in returns:
        cumulative += value
        peak = max(peak, cumulative)
        max_drawdown = max(max_drawdown, peak - cumulative)

    best_wins = best_losses = win_streak = loss_streak = 0
    for o in closed:
        if o.outcome == TradeOutcome.WIN:
            win_streak += 1
            loss_streak = 0
            best_wins = max(best_wins, win_streak)
        elif o.outcome == TradeOutcome.LOSS:
            loss_streak += 1
            win_streak = 0
            best_losses = max(best_losses, loss_streak)

    return HistoricalPerformance(
        total_trades=len(closed),
        win_rate=wins / len(closed) * 100,
        avg_return=avg_return,
        sharpe_ratio=sharpe,
        max_drawdown=max_drawdown,
        consecutive_wins=best_wins,
        consecutive_losses=best_losses,
    )
