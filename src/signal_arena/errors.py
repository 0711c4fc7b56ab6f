"""Error taxonomy for the signal engine.

Every error carries a stable ``code`` so callers can map it to a response
without string matching. Quality rejections also carry the score and the
reasons that produced them.
"""

from __future__ import annotations

from typing import Iterable, Tuple


class SignalArenaError(Exception):
    code = "SIGNAL_ARENA_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MarketUnavailable(SignalArenaError):
    """Price or instrument specs missing; retry later or pick another symbol."""

    code = "MARKET_UNAVAILABLE"


class InvalidSymbol(MarketUnavailable):
    code = "INVALID_SYMBOL"


class _ScoredRejection(SignalArenaError):
    def __init__(self, message: str, score: int, reasons: Iterable[str]) -> None:
        super().__init__(message)
        self.score = score
        self.reasons: Tuple[str, ...] = tuple(reasons)


class SignalQualityLow(_ScoredRejection):
    code = "SIGNAL_QUALITY_LOW"


class ImprovementQualityLow(_ScoredRejection):
    code = "IMPROVEMENT_QUALITY_LOW"


class SignalGenerationFailed(SignalArenaError):
    """The reasoning oracle failed or returned unusable output. Retryable."""

    code = "SIGNAL_GENERATION_FAILED"


class OpportunityScanFailed(SignalArenaError):
    code = "OPPORTUNITY_SCAN_FAILED"


class NoOpportunitiesFound(SignalArenaError):
    code = "NO_OPPORTUNITIES"


class PositionCalcError(SignalArenaError):
    code = "POSITION_CALC_ERROR"


class SignalNotFound(SignalArenaError):
    code = "SIGNAL_NOT_FOUND"


class SignalNotActive(SignalArenaError):
    code = "SIGNAL_NOT_ACTIVE"


class SignalAlreadyImproved(SignalArenaError):
    code = "SIGNAL_ALREADY_IMPROVED"


class CannotImproveOwnSignal(SignalArenaError):
    code = "CANNOT_IMPROVE_OWN_SIGNAL"


class InvalidStatusTransition(SignalArenaError):
    code = "INVALID_STATUS_TRANSITION"
