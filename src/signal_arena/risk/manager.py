"""Position safety rules and validator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import math
from typing import List, Optional, Tuple

from signal_arena.models.market import InstrumentSpecs
from signal_arena.models.order import ValidationReport

MARGIN_UTILIZATION_LIMIT = 0.95


@dataclass(frozen=True)
class PositionContext:
    """Inputs a sized position is checked against."""

    size: float
    entry_price: float
    stop_loss: float
    leverage: float
    position_value: float
    margin_required: float
    available_margin: float
    specs: InstrumentSpecs
    expired: bool = False

    @property
    def stop_distance(self) -> float:
        return abs(self.entry_price - self.stop_loss)

    @property
    def stop_distance_pct(self) -> float:
        if self.entry_price <= 0:
            return 0.0
        return self.stop_distance / self.entry_price * 100


class RiskRule(ABC):
    name: str

    @abstractmethod
    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        raise NotImplementedError


@dataclass(frozen=True)
class StopDistanceRule(RiskRule):
    name: str = "stop_distance"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        if not ctx.stop_distance > 0:
            return False, "Stop loss distance is zero"
        return True, "ok"


@dataclass(frozen=True)
class PositiveSizeRule(RiskRule):
    name: str = "positive_size"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        if not ctx.size > 0:
            return False, "Position size is zero or negative"
        return True, "ok"


@dataclass(frozen=True)
class MinLotRule(RiskRule):
    name: str = "min_lot"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        if ctx.size < ctx.specs.lot_size:
            return False, (
                f"Position size {ctx.size} is below minimum lot size {ctx.specs.lot_size}"
            )
        return True, "ok"


@dataclass(frozen=True)
class MinOrderValueRule(RiskRule):
    name: str = "min_order_value"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        if ctx.position_value < ctx.specs.min_order_value:
            return False, (
                f"Position value {ctx.position_value} is below minimum order value "
                f"{ctx.specs.min_order_value}"
            )
        return True, "ok"


@dataclass(frozen=True)
class AvailableMarginRule(RiskRule):
    name: str = "available_margin"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        if ctx.margin_required > ctx.available_margin:
            return False, (
                f"Required margin {ctx.margin_required:.2f} exceeds available margin "
                f"{ctx.available_margin:.2f}"
            )
        return True, "ok"


@dataclass(frozen=True)
class ExpiryRule(RiskRule):
    name: str = "expiry"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        if ctx.expired:
            return False, "Signal has expired"
        return True, "ok"


@dataclass(frozen=True)
class MarginUtilizationRule(RiskRule):
    """Unbuffered margin (notional / leverage) must stay within 95% of available."""

    limit: float = MARGIN_UTILIZATION_LIMIT
    name: str = "margin_utilization"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        if ctx.leverage > 0 and ctx.position_value / ctx.leverage > ctx.available_margin * self.limit:
            return False, "Position size would use >95% of available margin"
        return True, "ok"


@dataclass(frozen=True)
class LeverageStopRule(RiskRule):
    max_leverage: float = 10.0
    min_stop_pct: float = 2.0
    name: str = "leverage_stop"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        if ctx.leverage > self.max_leverage and ctx.stop_distance_pct < self.min_stop_pct:
            return False, "High leverage with tight stop loss - extreme risk"
        return True, "ok"


@dataclass(frozen=True)
class MaxStopDistanceRule(RiskRule):
    max_pct: float = 15.0
    name: str = "max_stop_distance"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        pct = ctx.stop_distance_pct
        if pct > self.max_pct:
            return False, f"Stop loss too far: {pct:.1f}% - reconsider trade"
        return True, "ok"


@dataclass(frozen=True)
class DustRule(RiskRule):
    min_value: float = 5.0
    name: str = "dust"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        if ctx.position_value < self.min_value:
            return False, "Position value too small - not worth trading fees"
        return True, "ok"


@dataclass(frozen=True)
class FiniteNumbersRule(RiskRule):
    name: str = "finite_numbers"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        values = (ctx.size, ctx.margin_required, ctx.position_value)
        if any(math.isnan(value) for value in values):
            return False, "Calculation error - invalid numbers detected"
        return True, "ok"


@dataclass(frozen=True)
class TightStopWarning(RiskRule):
    min_pct: float = 0.5
    name: str = "tight_stop"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        pct = ctx.stop_distance_pct
        if pct < self.min_pct:
            return False, f"Stop loss is very close ({pct:.2f}%) - may cause slippage issues"
        return True, "ok"


@dataclass(frozen=True)
class MarginHeadroomWarning(RiskRule):
    """Buffered margin above 95% of available; exactly 95% passes."""

    limit: float = MARGIN_UTILIZATION_LIMIT
    name: str = "margin_headroom"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        if ctx.margin_required > ctx.available_margin * self.limit:
            return False, "Using >95% of available margin - high risk"
        return True, "ok"


@dataclass(frozen=True)
class WideStopWarning(RiskRule):
    max_pct: float = 10.0
    name: str = "wide_stop"

    def check(self, ctx: PositionContext) -> Tuple[bool, str]:
        pct = ctx.stop_distance_pct
        if pct > self.max_pct:
            return False, f"Stop loss is {pct:.1f}% away - very high risk"
        return True, "ok"


def default_rules() -> List[RiskRule]:
    return [
        StopDistanceRule(),
        PositiveSizeRule(),
        MinLotRule(),
        MinOrderValueRule(),
        AvailableMarginRule(),
        ExpiryRule(),
        MarginUtilizationRule(),
        LeverageStopRule(),
        MaxStopDistanceRule(),
        DustRule(),
        FiniteNumbersRule(),
    ]


def default_advisories() -> List[RiskRule]:
    return [TightStopWarning(), MarginHeadroomWarning(), WideStopWarning()]


class PositionValidator:
    """Run every rule and collect all failures.

    Failing ``rules`` become errors and block execution; failing
    ``advisories`` become warnings only.
    """

    def __init__(
        self,
        rules: Optional[List[RiskRule]] = None,
        advisories: Optional[List[RiskRule]] = None,
    ) -> None:
        self.rules = rules if rules is not None else default_rules()
        self.advisories = advisories if advisories is not None else default_advisories()

    def validate(
        self, ctx: PositionContext, warnings: Optional[List[str]] = None
    ) -> ValidationReport:
        collected_warnings = list(warnings or [])
        errors: List[str] = []
        for rule in self.advisories:
            passed, reason = rule.check(ctx)
            if not passed:
                collected_warnings.append(reason)
        for rule in self.rules:
            passed, reason = rule.check(ctx)
            if not passed:
                errors.append(reason)
        return ValidationReport(
            can_execute=not errors,
            warnings=tuple(collected_warnings),
            errors=tuple(errors),
        )
