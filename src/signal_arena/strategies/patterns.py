"""Chart pattern detection over candle series."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from signal_arena.config import settings
from signal_arena.models.enums import OverallSignal, PatternBias
from signal_arena.models.market import Candle
from signal_arena.models.signal import PatternMatch, PatternRecognition

if TYPE_CHECKING:
    from signal_arena.data.data_service import DataService

logger = logging.getLogger(__name__)

MIN_PATTERN_CANDLES = 50
SWING_MARGIN = 10
SWING_OFFSET = 5


def _swing_points(
    highs: np.ndarray, lows: np.ndarray
) -> Tuple[List[Tuple[int, float]], List[Tuple[int, float]]]:
    swing_highs: List[Tuple[int, float]] = []
    swing_lows: List[Tuple[int, float]] = []
    for i in range(SWING_MARGIN, len(highs) - SWING_MARGIN):
        if highs[i] > highs[i - SWING_OFFSET] and highs[i] > highs[i + SWING_OFFSET]:
            swing_highs.append((i, float(highs[i])))
        if lows[i] < lows[i - SWING_OFFSET] and lows[i] < lows[i + SWING_OFFSET]:
            swing_lows.append((i, float(lows[i])))
    return swing_highs, swing_lows


def _slope(points: Sequence[Tuple[int, float]]) -> float:
    (i0, p0), (i1, p1) = points[-2], points[-1]
    return (p1 - p0) / (i1 - i0)


def _match(
    name: str,
    confidence: float,
    signal: PatternBias,
    description: str,
    price: float,
    timeframe: str,
    offsets: Tuple[float, float, float],
) -> PatternMatch:
    entry, target, stop = offsets
    return PatternMatch(
        pattern_name=name,
        confidence=confidence,
        signal=signal,
        description=description,
        timeframe=timeframe,
        entry=price * entry,
        target=price * target,
        stop_loss=price * stop,
    )


def find_patterns(
    candles: Sequence[Candle], symbol: str, timeframe: str = ""
) -> List[PatternMatch]:
    """Evaluate every rule in the catalogue; matches may co-fire."""
    if len(candles) < MIN_PATTERN_CANDLES:
        return []

    closes = np.array([c.close for c in candles], dtype=float)
    highs = np.array([c.high for c in candles], dtype=float)
    lows = np.array([c.low for c in candles], dtype=float)
    volumes = np.array([c.volume for c in candles], dtype=float)

    price = float(closes[-1])
    recent_high = float(highs[-20:].max())
    recent_low = float(lows[-20:].min())
    avg_volume = float(volumes[-20:].mean())
    recent_volume = float(volumes[-5:].mean())

    swing_highs, swing_lows = _swing_points(highs, lows)
    patterns: List[PatternMatch] = []

    if len(swing_highs) >= 2 and len(swing_lows) >= 2:
        high_slope = _slope(swing_highs)
        low_slope = _slope(swing_lows)
        if (
            high_slope > 0
            and low_slope > 0
            and low_slope > high_slope
            and recent_volume < avg_volume * 0.8
        ):
            patterns.append(
                _match(
                    "RISING WEDGE",
                    78,
                    PatternBias.BEARISH,
                    "Rising wedge with volume decline - bearish breakdown expected",
                    price,
                    timeframe,
                    (0.998, 0.92, 1.025),
                )
            )

    if len(swing_highs) >= 2:
        first, second = swing_highs[-2][1], swing_highs[-1][1]
        if abs(second - first) / first < 0.02 and price < recent_high * 0.95:
            patterns.append(
                _match(
                    "DOUBLE TOP",
                    72,
                    PatternBias.BEARISH,
                    "Double top formation with rejection - bearish reversal signal",
                    price,
                    timeframe,
                    (0.997, 0.90, 1.03),
                )
            )

    long_ma = float(closes[-20:].mean())
    consolidating = (recent_high - recent_low) / price < 0.04
    if price > long_ma * 1.05 and consolidating and recent_volume > avg_volume:
        patterns.append(
            _match(
                "BULLISH FLAG",
                69,
                PatternBias.BULLISH,
                "Bullish flag consolidation with volume - continuation expected",
                price,
                timeframe,
                (1.002, 1.12, 0.975),
            )
        )

    support_tests = int((np.abs(lows[-10:] - recent_low) / recent_low < 0.01).sum())
    if support_tests >= 2 and price < recent_high * 0.98:
        patterns.append(
            _match(
                "DESCENDING TRIANGLE",
                75,
                PatternBias.BEARISH,
                "Descending triangle with horizontal support - breakdown likely",
                price,
                timeframe,
                (0.998, 0.88, 1.03),
            )
        )

    if len(candles) >= 100:
        mid = len(candles) // 2
        left_high = float(closes[:mid].max())
        right_high = float(closes[mid:].max())
        cup_low = float(closes[mid - 10 : mid + 10].min())
        if (
            abs(left_high - right_high) / left_high < 0.05
            and (left_high - cup_low) / left_high > 0.15
            and price > right_high * 0.95
        ):
            patterns.append(
                _match(
                    "CUP AND HANDLE",
                    68,
                    PatternBias.BULLISH,
                    "Cup and handle formation - long-term bullish breakout",
                    price,
                    timeframe,
                    (1.002, 1.20, 0.92),
                )
            )

    if len(candles) > MIN_PATTERN_CANDLES:
        window_highs = highs[-30:]
        window_lows = lows[-30:]
        jumps = np.abs(np.diff(window_highs)) / window_highs[1:]
        volatile = bool((jumps > 0.03).any())
        converging = (float(window_highs.max()) - float(window_lows.min())) / price < 0.06
        if volatile and converging and recent_volume < avg_volume * 0.7:
            patterns.append(
                _match(
                    "DIAMOND PATTERN",
                    82,
                    PatternBias.BEARISH,
                    "Diamond exhaustion pattern - rare reversal signal",
                    price,
                    timeframe,
                    (0.995, 0.85, 1.04),
                )
            )

    logger.debug("Found %s patterns for %s %s", len(patterns), symbol, timeframe)
    return patterns


def _mean_confidence(patterns: Sequence[PatternMatch]) -> float:
    if not patterns:
        return 0.0
    return sum(p.confidence for p in patterns) / len(patterns)


def summarize_patterns(patterns: Iterable[PatternMatch]) -> PatternRecognition:
    """Count matches per bias and classify the overall signal.

    Bearish rules are checked before bullish ones.
    """
    patterns = tuple(patterns)
    bearish = [p for p in patterns if p.signal == PatternBias.BEARISH]
    bullish = [p for p in patterns if p.signal == PatternBias.BULLISH]
    neutral = [p for p in patterns if p.signal == PatternBias.NEUTRAL]

    bearish_conf = _mean_confidence(bearish)
    bullish_conf = _mean_confidence(bullish)

    overall = OverallSignal.NEUTRAL
    if len(bearish) >= 2 and bearish_conf > 70:
        overall = OverallSignal.STRONG_BEARISH
    elif len(bearish) >= 1 and bearish_conf > 60:
        overall = OverallSignal.BEARISH
    elif len(bullish) >= 2 and bullish_conf > 70:
        overall = OverallSignal.STRONG_BULLISH
    elif len(bullish) >= 1 and bullish_conf > 60:
        overall = OverallSignal.BULLISH

    return PatternRecognition(
        patterns=patterns,
        overall_signal=overall,
        bearish_count=len(bearish),
        bullish_count=len(bullish),
        neutral_count=len(neutral),
    )


class PatternRecognizer:
    """Run pattern detection across several timeframes of one symbol."""

    def __init__(
        self,
        data_service: "DataService",
        timeframes: Optional[Sequence[str]] = None,
        lookback_days: Optional[int] = None,
    ) -> None:
        self.data_service = data_service
        self.timeframes = tuple(timeframes or settings.pattern_timeframes)
        self.lookback_days = lookback_days or settings.market_lookback_days

    def recognize(self, symbol: str) -> PatternRecognition:
        matches: List[PatternMatch] = []
        for timeframe in self.timeframes:
            try:
                candles = self.data_service.get_candles(
                    symbol, timeframe, lookback_days=self.lookback_days
                )
            except Exception as exc:
                logger.warning(
                    "Pattern data fetch failed for %s %s: %s", symbol, timeframe, exc
                )
                continue
            matches.extend(find_patterns(candles, symbol, timeframe))
        return summarize_patterns(matches)
