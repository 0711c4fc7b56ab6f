"""Signal lifecycle, performance and improvement scoring exports."""

from signal_arena.signals.improvement import REVENUE_SHARE, score_improvement
from signal_arena.signals.lifecycle import LifecycleEvent, SignalBook, SignalRecord
from signal_arena.signals.performance import analyze_performance

__all__ = [
    "LifecycleEvent",
    "REVENUE_SHARE",
    "SignalBook",
    "SignalRecord",
    "analyze_performance",
    "score_improvement",
]
