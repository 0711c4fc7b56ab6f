"""Human improvements submitted against a generated signal."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Union

from signal_arena.models.enums import ImprovementType

ImprovementValue = Union[float, str, None]

# Submissions scoring below this are rejected outright.
ACCEPTANCE_THRESHOLD = 50


@dataclass(frozen=True)
class ImprovementSubmission:
    improvement_type: ImprovementType
    original_value: ImprovementValue
    improved_value: ImprovementValue
    reasoning: str
    new_expiry: Optional[datetime] = None


@dataclass(frozen=True)
class ImprovementAssessment:
    score: int
    reasons: Tuple[str, ...]

    @property
    def accepted(self) -> bool:
        return self.score >= ACCEPTANCE_THRESHOLD


@dataclass(frozen=True)
class AcceptedImprovement:
    user_id: str
    submission: ImprovementSubmission
    quality_score: int
    revenue_share: float
    created_at: datetime
