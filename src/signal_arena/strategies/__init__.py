"""Indicator and chart pattern analysis."""

from signal_arena.strategies.indicators import compute_indicators, compute_metrics
from signal_arena.strategies.patterns import PatternRecognizer, find_patterns, summarize_patterns

__all__ = [
    "PatternRecognizer",
    "compute_indicators",
    "compute_metrics",
    "find_patterns",
    "summarize_patterns",
]
