"""Signal synthesis: market context -> oracle proposal -> risk gate."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
import logging
from typing import Callable, Optional

from signal_arena.config import settings
from signal_arena.data.data_service import DataService
from signal_arena.data.sentiment import FearGreedFeed, SentimentFeed
from signal_arena.decision.models import OracleProposal
from signal_arena.decision.oracle import LLMReasoningOracle, ReasoningOracle
from signal_arena.decision.prompt_builder import PromptBuilder
from signal_arena.errors import (
    InvalidSymbol,
    MarketUnavailable,
    SignalGenerationFailed,
    SignalQualityLow,
)
from signal_arena.models.market import MarketSnapshot
from signal_arena.models.signal import (
    AIInsights,
    HistoricalPerformance,
    MarketConditions,
    SignalAnalysis,
    TradingSignal,
)
from signal_arena.risk.normalization import normalize_signal
from signal_arena.risk.quality import QUALITY_GATE, score_signal_quality
from signal_arena.strategies.patterns import PatternRecognizer
from signal_arena.utils.time import utc_now

logger = logging.getLogger(__name__)

LOW_VOLUME_WARNING = 100_000
HIGH_VOLATILITY_WARNING = 50.0


class SignalSynthesizer:
    """Turn one symbol's market context into a quality-gated trading signal.

    Sentiment and pattern data are gathered before the prompt is built; the
    oracle never sees a partial context.
    """

    def __init__(
        self,
        data_service: DataService,
        oracle: Optional[ReasoningOracle] = None,
        sentiment: Optional[SentimentFeed] = None,
        pattern_recognizer: Optional[PatternRecognizer] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.data_service = data_service
        self.oracle = oracle or LLMReasoningOracle()
        self.sentiment = sentiment or FearGreedFeed()
        self.pattern_recognizer = pattern_recognizer or PatternRecognizer(data_service)
        self.prompt_builder = prompt_builder or PromptBuilder()
        self._clock = clock

    def synthesize(
        self,
        symbol: str,
        account_balance: Optional[float] = None,
        history: Optional[HistoricalPerformance] = None,
    ) -> TradingSignal:
        reference_balance = account_balance or settings.signal_reference_balance

        price = self.data_service.get_price(symbol)
        if price <= 0:
            raise MarketUnavailable(f"Market for {symbol} is not available or not liquid")
        specs = self.data_service.get_instrument_specs(symbol)
        if not specs.valid:
            raise InvalidSymbol(f"Symbol {symbol} is not valid for trading")

        snapshot = self.data_service.get_market_snapshot(symbol)
        if snapshot.volume_24h < LOW_VOLUME_WARNING:
            logger.warning("Low volume warning for %s: %.0f", symbol, snapshot.volume_24h)
        if snapshot.avg_volatility > HIGH_VOLATILITY_WARNING:
            logger.warning(
                "High volatility warning for %s: %.1f%%", symbol, snapshot.avg_volatility
            )

        fear_greed = self.sentiment.get_fear_greed_index()
        patterns = self.pattern_recognizer.recognize(symbol)

        prompt = self.prompt_builder.build_signal_prompt(
            symbol, snapshot, patterns, fear_greed, reference_balance, history
        )
        try:
            proposal = self.oracle.propose(prompt)
        except SignalGenerationFailed:
            raise
        except Exception as exc:
            logger.error("Failed to generate trading signal for %s: %s", symbol, exc)
            raise SignalGenerationFailed("Failed to generate trading signal from AI") from exc

        candidate = self._to_signal(symbol, proposal, snapshot, fear_greed)
        signal = normalize_signal(candidate, snapshot.win_rate)
        quality = score_signal_quality(signal, snapshot, patterns)
        if quality.score < QUALITY_GATE:
            raise SignalQualityLow(
                f"Signal quality too low ({quality.score}/100): {', '.join(quality.reasons)}",
                quality.score,
                quality.reasons,
            )

        signal = replace(signal, quality_score=quality.score, quality_reasons=quality.reasons)
        logger.info(
            "Trading signal generated for %s: side=%s confidence=%s quality=%s win_rate=%.1f",
            signal.symbol,
            signal.side.value,
            signal.confidence,
            signal.quality_score,
            snapshot.win_rate,
        )
        return signal

    def _to_signal(
        self,
        symbol: str,
        proposal: OracleProposal,
        snapshot: MarketSnapshot,
        fear_greed: int,
    ) -> TradingSignal:
        candidate = proposal.signal
        return TradingSignal(
            symbol=symbol.upper(),
            side=candidate.side,
            entry_price=candidate.entry_price,
            stop_loss=candidate.stop_loss,
            take_profit=candidate.take_profit,
            leverage=candidate.leverage,
            risk_reward_ratio=candidate.risk_reward_ratio,
            confidence=candidate.confidence,
            expires_at=self._clock() + timedelta(hours=settings.signal_ttl_hours),
            analysis=SignalAnalysis(**candidate.analysis.model_dump()),
            ai_insights=AIInsights(
                key_levels=tuple(candidate.ai_insights.key_levels),
                pattern_recognition=candidate.ai_insights.pattern_recognition,
                volume_profile=candidate.ai_insights.volume_profile,
                momentum_indicators=candidate.ai_insights.momentum_indicators,
            ),
            market_conditions=MarketConditions(
                fear_greed_index=fear_greed,
                volatility=snapshot.avg_volatility,
                volume_24h=snapshot.volume_24h,
                price_change_24h=snapshot.change_24h,
            ),
            reasoning=proposal.reasoning,
        )
