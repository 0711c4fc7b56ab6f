"""Order, sizing and execution result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from signal_arena.models.enums import ExecutionStatus, TimeInForce


@dataclass(frozen=True)
class ValidationReport:
    can_execute: bool
    warnings: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PositionCalculation:
    """Fresh sizing result; never reused across execution attempts."""

    position_size: float
    position_value: float
    margin_required: float
    risk_amount: float
    leverage: float
    entry_price: float
    raw_size: float
    available_margin: float
    validation: ValidationReport


@dataclass(frozen=True)
class OrderRequest:
    coin: str
    is_buy: bool
    size: float
    limit_price: float
    time_in_force: TimeInForce
    reduce_only: bool = False


@dataclass(frozen=True)
class VenueFill:
    order_id: Optional[str]
    avg_price: float
    total_size: float


@dataclass(frozen=True)
class VenueResting:
    order_id: Optional[str]


@dataclass(frozen=True)
class VenueOrderResult:
    """Normalized venue reply: exactly one of filled, resting or error is set on success paths."""

    ok: bool
    filled: Optional[VenueFill] = None
    resting: Optional[VenueResting] = None
    error: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ExecutionResult:
    status: ExecutionStatus
    message: str
    order_id: Optional[str] = None
    executed_price: Optional[float] = None
    executed_size: Optional[float] = None
    order: Optional[OrderRequest] = None
    position: Optional[PositionCalculation] = None
    warnings: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.status in {ExecutionStatus.FILLED, ExecutionStatus.RESTING}
