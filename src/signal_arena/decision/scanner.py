"""Market opportunity scanner."""

from __future__ import annotations

from functools import cmp_to_key
import logging
from typing import List, Optional, Sequence

from signal_arena.config import settings
from signal_arena.data.data_service import DataService
from signal_arena.data.sentiment import FearGreedFeed, SentimentFeed
from signal_arena.errors import OpportunityScanFailed
from signal_arena.models.enums import SetupDirection
from signal_arena.models.market import MarketSnapshot
from signal_arena.models.signal import (
    MarketOpportunity,
    OpportunitySetup,
    ScanResult,
    ScanSummary,
)

logger = logging.getLogger(__name__)

MIN_OPPORTUNITY_SCORE = 55
# Win-rate gap above which win rate alone decides the ranking.
WIN_RATE_DOMINANCE = 5.0
DRAWDOWN_PENALTY_THRESHOLD = 50.0
DRAWDOWN_PENALTY = 0.8


def opportunity_score(snapshot: MarketSnapshot, fear_greed_index: int) -> float:
    """Composite 0-100 score; win rate carries 40% of the weight."""
    score = min(snapshot.win_rate, 100.0) * 0.4

    sharpe_score = max(0.0, min(100.0, (snapshot.sharpe_ratio + 2) * 25))
    score += sharpe_score * 0.2

    momentum = 50.0
    if snapshot.rsi > 70:
        momentum += 15
    elif snapshot.rsi < 30:
        momentum += 20
    elif 45 < snapshot.rsi < 55:
        momentum -= 10
    if abs(snapshot.change_24h) > 5:
        momentum += 15
    score += min(100.0, momentum) * 0.2

    volume_score = min(100.0, snapshot.volume_24h / 1_000_000 * 10)
    score += volume_score * 0.1

    # Contrarian: extreme sentiment aligned with an RSI extreme.
    sentiment = 0.0
    if fear_greed_index > 75 and snapshot.rsi > 65:
        sentiment = 80.0
    elif fear_greed_index < 25 and snapshot.rsi < 35:
        sentiment = 70.0
    elif abs(fear_greed_index - 50) > 20:
        sentiment = 30.0
    score += sentiment * 0.1

    if snapshot.max_drawdown > DRAWDOWN_PENALTY_THRESHOLD:
        score *= DRAWDOWN_PENALTY
    return max(0.0, min(100.0, score))


def analyze_setup(
    rsi: float, change_24h: float, fear_greed_index: int, win_rate: float
) -> OpportunitySetup:
    if win_rate > 70 and rsi > 70 and fear_greed_index > 60:
        return OpportunitySetup(
            type="High Win Rate Bearish Reversal",
            direction=SetupDirection.SHORT,
            reasoning=(
                f"{win_rate:.1f}% win rate with overbought conditions and greed "
                "- premium contrarian setup"
            ),
            confidence=85,
        )
    if win_rate > 65 and rsi < 30 and fear_greed_index < 40:
        return OpportunitySetup(
            type="High Win Rate Bullish Reversal",
            direction=SetupDirection.LONG,
            reasoning=(
                f"{win_rate:.1f}% win rate with oversold conditions and fear "
                "- strong reversal signal"
            ),
            confidence=80,
        )
    if win_rate > 60 and abs(change_24h) > 6:
        return OpportunitySetup(
            type="High Win Rate Momentum",
            direction=SetupDirection.LONG if change_24h > 0 else SetupDirection.SHORT,
            reasoning=(
                f"{win_rate:.1f}% win rate with strong momentum - trend continuation likely"
            ),
            confidence=75,
        )
    if win_rate > 55:
        return OpportunitySetup(
            type="Consistent Performer",
            direction=SetupDirection.LONG if rsi > 50 else SetupDirection.SHORT,
            reasoning=f"{win_rate:.1f}% win rate - reliable performer with decent setup",
            confidence=65,
        )
    return OpportunitySetup(
        type="Low Probability Setup",
        direction=SetupDirection.NEUTRAL,
        reasoning=f"{win_rate:.1f}% win rate - wait for better opportunity",
        confidence=40,
    )


def describe_signals(snapshot: MarketSnapshot, fear_greed_index: int) -> List[str]:
    tags: List[str] = []
    if snapshot.win_rate > 70:
        tags.append(f"High Win Rate: {snapshot.win_rate:.1f}%")
    if snapshot.sharpe_ratio > 1:
        tags.append(f"Strong Sharpe: {snapshot.sharpe_ratio:.2f}")
    if snapshot.rsi < 30:
        tags.append("RSI Oversold")
    if snapshot.rsi > 70:
        tags.append("RSI Overbought")
    if abs(snapshot.change_24h) > 8:
        tags.append("High Volatility")
    if snapshot.change_24h > 5:
        tags.append("Strong Bullish Move")
    if snapshot.change_24h < -5:
        tags.append("Strong Bearish Move")
    if fear_greed_index > 75:
        tags.append("Extreme Greed")
    if fear_greed_index < 25:
        tags.append("Extreme Fear")
    if snapshot.max_drawdown < 10:
        tags.append("Low Risk Profile")
    if snapshot.win_rate > 60 and fear_greed_index > 65:
        tags.append("Premium Contrarian Setup")
    return tags


def _compare(a: MarketOpportunity, b: MarketOpportunity) -> float:
    win_rate_diff = b.win_rate - a.win_rate
    if abs(win_rate_diff) > WIN_RATE_DOMINANCE:
        return win_rate_diff
    return b.score - a.score


def rank_opportunities(
    opportunities: Sequence[MarketOpportunity],
) -> List[MarketOpportunity]:
    """Win rate first; score breaks ties within five win-rate points."""
    return sorted(opportunities, key=cmp_to_key(_compare))


class OpportunityScanner:
    """Score a symbol universe and return the best-ranked opportunities.

    A failure on one symbol is logged and skipped; only a failure to load the
    universe itself aborts the scan.
    """

    def __init__(
        self,
        data_service: DataService,
        sentiment: Optional[SentimentFeed] = None,
    ) -> None:
        self.data_service = data_service
        self.sentiment = sentiment or FearGreedFeed()

    def scan(
        self,
        symbols: Optional[Sequence[str]] = None,
        min_volume: Optional[float] = None,
        top_count: Optional[int] = None,
        max_symbols: Optional[int] = None,
    ) -> ScanResult:
        min_volume = settings.scan_min_volume if min_volume is None else min_volume
        top_count = settings.scan_top_count if top_count is None else top_count
        max_symbols = settings.scan_max_symbols if max_symbols is None else max_symbols

        try:
            universe = (
                list(symbols)
                if symbols is not None
                else self.data_service.list_symbols(max_symbols)
            )
            fear_greed = self.sentiment.get_fear_greed_index()
        except Exception as exc:
            logger.error("Failed to find top opportunities: %s", exc)
            raise OpportunityScanFailed("Failed to scan for market opportunities") from exc

        logger.info("Scanning %s symbols for top %s opportunities", len(universe), top_count)
        found: List[MarketOpportunity] = []
        for symbol in universe:
            try:
                opportunity = self._evaluate(symbol, min_volume, fear_greed)
            except Exception as exc:
                logger.warning("Error analyzing %s for opportunities: %s", symbol, exc)
                continue
            if opportunity is not None:
                found.append(opportunity)

        ranked = rank_opportunities(found)
        top = ranked[:top_count]
        avg_win_rate = sum(o.win_rate for o in ranked) / len(ranked) if ranked else 0.0
        summary = ScanSummary(
            total_scanned=len(universe),
            opportunities_found=len(ranked),
            avg_win_rate=round(avg_win_rate, 2),
            top_win_rate=top[0].win_rate if top else 0.0,
        )
        logger.info(
            "Found %s opportunities, top win rate: %.1f%%",
            summary.opportunities_found,
            summary.top_win_rate,
        )
        return ScanResult(opportunities=tuple(top), summary=summary)

    def _evaluate(
        self, symbol: str, min_volume: float, fear_greed: int
    ) -> Optional[MarketOpportunity]:
        if self.data_service.get_price(symbol) <= 0:
            return None
        snapshot = self.data_service.get_market_snapshot(symbol)
        if not snapshot.available or snapshot.volume_24h < min_volume:
            return None

        score = opportunity_score(snapshot, fear_greed)
        if score <= MIN_OPPORTUNITY_SCORE:
            return None

        return MarketOpportunity(
            symbol=symbol,
            score=score,
            price=snapshot.price,
            change_24h=snapshot.change_24h,
            volume=snapshot.volume_24h,
            rsi=round(snapshot.rsi, 2),
            win_rate=round(snapshot.win_rate, 2),
            sharpe_ratio=round(snapshot.sharpe_ratio, 2),
            max_drawdown=round(snapshot.max_drawdown, 2),
            signals=tuple(describe_signals(snapshot, fear_greed)),
            setup=analyze_setup(
                snapshot.rsi, snapshot.change_24h, fear_greed, snapshot.win_rate
            ),
        )
