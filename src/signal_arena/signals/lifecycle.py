"""Signal lifecycle: status transitions, improvements and outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
import logging
import threading
from typing import Callable, Dict, List, Optional
import uuid

from signal_arena.errors import (
    CannotImproveOwnSignal,
    ImprovementQualityLow,
    InvalidStatusTransition,
    SignalAlreadyImproved,
    SignalNotActive,
    SignalNotFound,
)
from signal_arena.models.enums import SignalStatus, TradeOutcome
from signal_arena.models.improvement import AcceptedImprovement, ImprovementSubmission
from signal_arena.models.order import ExecutionResult
from signal_arena.models.signal import HistoricalPerformance, SignalOutcome, TradingSignal
from signal_arena.signals.improvement import REVENUE_SHARE, score_improvement
from signal_arena.signals.performance import analyze_performance
from signal_arena.utils.time import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LifecycleEvent:
    signal_id: str
    from_status: Optional[SignalStatus]
    to_status: SignalStatus
    message: str
    timestamp: datetime

    @property
    def details(self) -> str:
        from_value = self.from_status.value if self.from_status else "UNKNOWN"
        return f"{from_value} -> {self.to_status.value}. {self.message}"


@dataclass
class SignalRecord:
    signal_id: str
    creator_id: str
    signal: TradingSignal
    created_at: datetime
    status: SignalStatus = SignalStatus.ACTIVE
    improvement: Optional[AcceptedImprovement] = None
    outcome: TradeOutcome = TradeOutcome.PENDING
    actual_return: float = 0.0
    exit_reason: Optional[str] = None
    execution: Optional[ExecutionResult] = None
    # Set while an order for this signal is being placed.
    executing: bool = False
    events: List[LifecycleEvent] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status == SignalStatus.ACTIVE


class SignalBook:
    """In-memory registry of generated signals.

    A signal leaves ``active`` exactly once, for ``expired``, ``executed`` or
    ``cancelled``. Improvements and execution are only allowed while active.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self._clock = clock
        self._id_factory = id_factory
        self._records: Dict[str, SignalRecord] = {}
        self._lock = threading.RLock()

    def register(self, signal: TradingSignal, creator_id: str) -> SignalRecord:
        with self._lock:
            now = self._clock()
            record = SignalRecord(
                signal_id=self._id_factory(),
                creator_id=creator_id,
                signal=signal,
                created_at=now,
            )
            self._records[record.signal_id] = record
            self._record_event(record, None, SignalStatus.ACTIVE, "signal created", now)
        logger.info("Registered signal %s for %s", record.signal_id, signal.symbol)
        return record

    def get(self, signal_id: str) -> SignalRecord:
        with self._lock:
            record = self._records.get(signal_id)
            if record is None:
                raise SignalNotFound(f"Signal not found: {signal_id}")
            self._expire_if_due(record, self._clock())
            return record

    def active_signals(self) -> List[SignalRecord]:
        with self._lock:
            now = self._clock()
            for record in self._records.values():
                self._expire_if_due(record, now)
            return [r for r in self._records.values() if r.is_active]

    def submit_improvement(
        self, signal_id: str, user_id: str, submission: ImprovementSubmission
    ) -> AcceptedImprovement:
        with self._lock:
            record = self.get(signal_id)
            if not record.is_active:
                raise SignalNotActive("Only active signals can be improved")
            if record.improvement is not None:
                raise SignalAlreadyImproved(
                    "This signal has already been improved by another user"
                )
            if record.creator_id == user_id:
                raise CannotImproveOwnSignal("You cannot improve your own signal")

            assessment = score_improvement(record.signal, submission)
            if not assessment.accepted:
                raise ImprovementQualityLow(
                    f"Improvement quality too low ({assessment.score}/100). "
                    "Please provide more substantive changes and reasoning.",
                    assessment.score,
                    assessment.reasons,
                )

            now = self._clock()
            accepted = AcceptedImprovement(
                user_id=user_id,
                submission=submission,
                quality_score=assessment.score,
                revenue_share=REVENUE_SHARE,
                created_at=now,
            )
            record.improvement = accepted
            if submission.new_expiry is not None:
                record.signal = replace(record.signal, expires_at=submission.new_expiry)
                logger.info("Signal %s expiry updated to %s", signal_id, submission.new_expiry)
        logger.info(
            "Signal improvement added to %s by %s (score=%s)",
            signal_id,
            user_id,
            assessment.score,
        )
        return accepted

    def begin_execution(self, signal_id: str) -> SignalRecord:
        """Reserve an active signal for one execution attempt.

        The reservation is released by ``mark_executed`` or
        ``release_execution``; a second caller is refused meanwhile.
        """
        with self._lock:
            record = self.get(signal_id)
            if not record.is_active:
                raise SignalNotActive(
                    f"Signal is {record.status.value}; only active signals execute"
                )
            if record.executing:
                raise SignalNotActive(f"Signal {signal_id} is already being executed")
            record.executing = True
            return record

    def release_execution(self, signal_id: str) -> None:
        with self._lock:
            self.get(signal_id).executing = False

    def mark_executed(
        self, signal_id: str, execution: Optional[ExecutionResult] = None
    ) -> SignalRecord:
        with self._lock:
            record = self.get(signal_id)
            record.executing = False
            self._transition(record, SignalStatus.EXECUTED, "order placed")
            record.execution = execution
            return record

    def record_outcome(
        self,
        signal_id: str,
        outcome: TradeOutcome,
        actual_return: float,
        exit_reason: Optional[str] = None,
    ) -> SignalRecord:
        """Close a trade; an active signal moves to ``executed``."""
        if outcome == TradeOutcome.PENDING:
            raise InvalidStatusTransition("Outcome must be win, loss or breakeven")
        with self._lock:
            record = self.get(signal_id)
            if record.is_active:
                self._transition(record, SignalStatus.EXECUTED, f"closed as {outcome.value}")
            elif record.status != SignalStatus.EXECUTED:
                raise InvalidStatusTransition(
                    f"Cannot record an outcome for a {record.status.value} signal"
                )
            record.outcome = outcome
            record.actual_return = actual_return
            record.exit_reason = exit_reason
            return record

    def cancel(self, signal_id: str, reason: str = "cancelled") -> SignalRecord:
        with self._lock:
            record = self.get(signal_id)
            self._transition(record, SignalStatus.CANCELLED, reason)
            return record

    def expire_due(self, now: Optional[datetime] = None) -> List[str]:
        with self._lock:
            now = now or self._clock()
            expired = [
                record.signal_id
                for record in self._records.values()
                if self._expire_if_due(record, now)
            ]
        if expired:
            logger.info("Expired %s old signals", len(expired))
        return expired

    def creator_outcomes(self, creator_id: str) -> List[SignalOutcome]:
        with self._lock:
            records = sorted(
                (r for r in self._records.values() if r.creator_id == creator_id),
                key=lambda r: r.created_at,
            )
            return [
                SignalOutcome(outcome=r.outcome, actual_return=r.actual_return)
                for r in records
                if r.outcome != TradeOutcome.PENDING
            ]

    def creator_performance(self, creator_id: str) -> HistoricalPerformance:
        return analyze_performance(self.creator_outcomes(creator_id))

    def _expire_if_due(self, record: SignalRecord, now: datetime) -> bool:
        if not record.is_active or record.executing or not record.signal.is_expired(now):
            return False
        self._transition(record, SignalStatus.EXPIRED, "expired", now)
        record.outcome = TradeOutcome.BREAKEVEN
        record.exit_reason = "expired"
        return True

    def _transition(
        self,
        record: SignalRecord,
        to_status: SignalStatus,
        message: str,
        now: Optional[datetime] = None,
    ) -> None:
        if not record.is_active:
            raise InvalidStatusTransition(
                f"Signal {record.signal_id} is {record.status.value}; "
                f"cannot move to {to_status.value}"
            )
        from_status = record.status
        record.status = to_status
        self._record_event(record, from_status, to_status, message, now or self._clock())

    def _record_event(
        self,
        record: SignalRecord,
        from_status: Optional[SignalStatus],
        to_status: SignalStatus,
        message: str,
        now: datetime,
    ) -> None:
        event = LifecycleEvent(
            signal_id=record.signal_id,
            from_status=from_status,
            to_status=to_status,
            message=message,
            timestamp=now,
        )
        record.events.append(event)
        logger.debug("Signal %s: %s", record.signal_id, event.details)
