"""Prompt builder for oracle signal generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from signal_arena.models.market import MarketSnapshot
from signal_arena.models.signal import HistoricalPerformance, PatternRecognition


@dataclass(frozen=True)
class PromptBundle:
    system: str
    user: str


def win_rate_tier(win_rate: float) -> str:
    if win_rate > 70:
        return "TIER 1 - PREMIUM"
    if win_rate > 60:
        return "TIER 2 - STRONG"
    if win_rate > 50:
        return "TIER 3 - CAUTIOUS"
    return "AVOID"


def rsi_label(rsi: float) -> str:
    if rsi > 70:
        return "Overbought"
    if rsi < 30:
        return "Oversold"
    return "Neutral"


def fear_greed_label(index: int) -> str:
    if index > 75:
        return "Extreme Greed - Contrarian Opportunity"
    if index < 25:
        return "Extreme Fear - Contrarian Opportunity"
    return "Neutral Sentiment"


SYSTEM_PROMPT = (
    "You are an elite cryptocurrency trading analyst specializing in high win rate "
    "opportunities. Generate a generic trading signal that can be used by multiple "
    "traders. Do not calculate position sizes; sizing happens later per account.\n"
    "Win rate is the primary factor:\n"
    "- TIER 1 (>70% win rate): premium setups\n"
    "- TIER 2 (60-70% win rate): strong opportunities\n"
    "- TIER 3 (50-60% win rate): cautious approach\n"
    "- AVOID (<50% win rate): skip entirely\n"
    "Requirements:\n"
    "1. Conservative leverage: 2-5x maximum, never exceed.\n"
    "2. Stop loss 2-4% from entry.\n"
    "3. Risk/reward ratio of at least 1:2.\n"
    "4. High win rate with extreme sentiment is the best contrarian setup.\n"
    "Return JSON only. No markdown, no extra text. "
    "Use this schema exactly:\n"
    "{\n"
    '  "signal": {\n'
    '    "side": "long|short",\n'
    '    "entry_price": 0.0,\n'
    '    "stop_loss": 0.0,\n'
    '    "take_profit": 0.0,\n'
    '    "leverage": 0.0,\n'
    '    "risk_reward_ratio": 0.0,\n'
    '    "confidence": 0.0,\n'
    '    "analysis": {\n'
    '      "technical_analysis": "string",\n'
    '      "market_analysis": "string",\n'
    '      "sentiment_analysis": "string",\n'
    '      "risk_assessment": "string"\n'
    "    },\n"
    '    "ai_insights": {\n'
    '      "key_levels": [0.0],\n'
    '      "pattern_recognition": "string",\n'
    '      "volume_profile": "string",\n'
    '      "momentum_indicators": "string"\n'
    "    }\n"
    "  },\n"
    '  "reasoning": "string"\n'
    "}\n"
    "Rules:\n"
    "- confidence must be between 0 and 100.\n"
    "- leverage must be between 2 and 5.\n"
    "- risk_reward_ratio must be at least 2.0.\n"
    "- reasoning is 2-3 sentences on win rate tier, technical confluence, "
    "sentiment edge and risk management.\n"
)


class PromptBuilder:
    """Build system and user prompts for signal generation."""

    def build_signal_prompt(
        self,
        symbol: str,
        snapshot: MarketSnapshot,
        patterns: PatternRecognition,
        fear_greed_index: int,
        reference_balance: float,
        history: Optional[HistoricalPerformance] = None,
    ) -> PromptBundle:
        if history is not None:
            performance = (
                f"Historical Performance: {history.total_trades} trades, "
                f"{history.win_rate:.1f}% win rate, Sharpe: {history.sharpe_ratio:.2f}"
            )
        else:
            performance = "No historical data - use conservative approach"

        detected = ", ".join(
            f"{p.pattern_name} ({p.confidence:g}% confidence)" for p in patterns.patterns
        )
        lines: List[str] = [
            f"Generate a trading signal for {symbol}.",
            "",
            f"CURRENT MARKET DATA for {symbol}:",
            f"- Price: ${snapshot.price}",
            f"- Win Rate: {snapshot.win_rate:.1f}% ({win_rate_tier(snapshot.win_rate)})",
            f"- 24h Volume: ${snapshot.volume_24h:,.0f}",
            f"- 24h Change: {snapshot.change_24h:.2f}%",
            f"- RSI: {snapshot.rsi:.1f} ({rsi_label(snapshot.rsi)})",
            f"- Sharpe Ratio: {snapshot.sharpe_ratio:.2f}",
            f"- Max Drawdown: {snapshot.max_drawdown:.1f}%",
            f"- Volatility: {snapshot.avg_volatility:.2f}%",
            "",
            "PATTERN ANALYSIS:",
            f"- Overall Signal: {patterns.overall_signal.value.upper()}",
            f"- Bearish Patterns: {patterns.bearish_count}",
            f"- Bullish Patterns: {patterns.bullish_count}",
            f"- Key Patterns Detected: {detected or 'None detected'}",
            "",
            "SENTIMENT CONTEXT:",
            f"- Fear & Greed Index: {fear_greed_index}/100 "
            f"({fear_greed_label(fear_greed_index)})",
            "",
            "REFERENCE CONTEXT:",
            f"- Reference Balance: ${reference_balance:,.0f}",
            f"- {performance}",
        ]
        return PromptBundle(system=SYSTEM_PROMPT, user="\n".join(lines))
