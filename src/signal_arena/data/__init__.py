"""Data access layer exports."""

from signal_arena.data.adapters import DEFAULT_SPECS, MarketDataAdapter
from signal_arena.data.data_service import DataService
from signal_arena.data.sentiment import FearGreedFeed, SentimentFeed

__all__ = [
    "DEFAULT_SPECS",
    "DataService",
    "FearGreedFeed",
    "MarketDataAdapter",
    "SentimentFeed",
]
