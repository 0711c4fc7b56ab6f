"""Oracle response schemas."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator

from signal_arena.models.enums import Side


class SignalAnalysisModel(BaseModel):
    technical_analysis: str = ""
    market_analysis: str = ""
    sentiment_analysis: str = ""
    risk_assessment: str = ""


class AIInsightsModel(BaseModel):
    key_levels: List[float] = Field(default_factory=list)
    pattern_recognition: str = ""
    volume_profile: str = ""
    momentum_indicators: str = ""


class CandidateSignal(BaseModel):
    side: Side
    entry_price: float
    stop_loss: float
    take_profit: float
    leverage: float
    risk_reward_ratio: float
    confidence: float
    analysis: SignalAnalysisModel = Field(default_factory=SignalAnalysisModel)
    ai_insights: AIInsightsModel = Field(default_factory=AIInsightsModel)

    @field_validator("side", mode="before")
    @classmethod
    def _normalize_side(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("entry_price", "stop_loss", "take_profit", "leverage")
    @classmethod
    def _check_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("prices and leverage must be positive")
        return value

    @field_validator("risk_reward_ratio")
    @classmethod
    def _check_risk_reward(cls, value: float) -> float:
        if value < 0:
            raise ValueError("risk_reward_ratio must not be negative")
        return value

    @field_validator("confidence")
    @classmethod
    def _check_confidence(cls, value: float) -> float:
        if value < 0 or value > 100:
            raise ValueError("confidence must be between 0 and 100")
        return value


class OracleProposal(BaseModel):
    signal: CandidateSignal
    reasoning: str = ""

    @field_validator("reasoning")
    @classmethod
    def _normalize_reasoning(cls, value: str) -> str:
        return value.strip()
