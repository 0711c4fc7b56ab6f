"""Risk-based position sizing with safety validation."""

from __future__ import annotations

from datetime import datetime
import logging
import math
from typing import Callable, List, Optional

from signal_arena.config import settings
from signal_arena.data.data_service import DataService
from signal_arena.errors import MarketUnavailable, PositionCalcError
from signal_arena.models.market import AccountMargin, ExchangeAccount, InstrumentSpecs
from signal_arena.models.order import PositionCalculation
from signal_arena.models.signal import TradingSignal
from signal_arena.risk.manager import PositionContext, PositionValidator
from signal_arena.utils.time import utc_now

logger = logging.getLogger(__name__)

ENTRY_DRIFT_LIMIT = 0.05
HARD_MAX_LEVERAGE = 5.0
SMALL_ACCOUNT_VALUE = 100.0
SMALL_ACCOUNT_MAX_RISK_PCT = 5.0
MAX_RISK_PCT = 2.0
MARGIN_BUFFER = 1.05
PRICE_DECIMALS = 8


def _round_half_up(value: float, decimals: int) -> float:
    if not math.isfinite(value):
        return value
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def precise(value: float) -> float:
    """Round to 8 decimal places to strip float noise."""
    return _round_half_up(value, PRICE_DECIMALS)


def _step_decimals(step: float) -> int:
    return max(0, math.ceil(-math.log10(step)))


def round_to_lot(size: float, lot_size: float) -> float:
    """Round half-up to the nearest lot; decimals come from the lot size."""
    if lot_size <= 0:
        return _round_half_up(size, 4)
    if not math.isfinite(size):
        return size
    steps = math.floor(size / lot_size + 0.5)
    return _round_half_up(steps * lot_size, _step_decimals(lot_size))


def round_to_tick(price: float, tick_size: float) -> float:
    if tick_size <= 0 or not math.isfinite(price):
        return price
    steps = math.floor(price / tick_size + 0.5)
    return _round_half_up(steps * tick_size, _step_decimals(tick_size))


def calculate_position(
    signal: TradingSignal,
    current_price: float,
    margin: AccountMargin,
    specs: InstrumentSpecs,
    risk_pct: float,
    max_leverage: float,
    now: datetime,
    validator: Optional[PositionValidator] = None,
) -> PositionCalculation:
    """Size a position for one account from its live margin and price.

    The signal's entry is used unless it sits 5% or more from the live price,
    in which case the live price is substituted with a warning.
    """
    validator = validator or PositionValidator()
    warnings: List[str] = []

    entry_price = signal.entry_price
    if abs(signal.entry_price - current_price) / current_price >= ENTRY_DRIFT_LIMIT:
        entry_price = current_price
        warnings.append(
            f"Entry price adjusted from {signal.entry_price} to {current_price} (market moved)"
        )

    leverage = min(signal.leverage, max_leverage, HARD_MAX_LEVERAGE)
    risk_cap = (
        SMALL_ACCOUNT_MAX_RISK_PCT if margin.account_value < SMALL_ACCOUNT_VALUE else MAX_RISK_PCT
    )
    effective_risk = min(risk_pct, risk_cap)
    risk_amount = margin.account_value * effective_risk / 100

    stop_distance = abs(entry_price - signal.stop_loss)
    raw_size = risk_amount / stop_distance if stop_distance > 0 else 0.0

    size = round_to_lot(raw_size, specs.lot_size)
    position_value = precise(size * entry_price)
    margin_required = position_value / leverage * MARGIN_BUFFER if leverage > 0 else math.nan
    available_margin = margin.available_margin

    ctx = PositionContext(
        size=size,
        entry_price=entry_price,
        stop_loss=signal.stop_loss,
        leverage=leverage,
        position_value=position_value,
        margin_required=margin_required,
        available_margin=available_margin,
        specs=specs,
        expired=signal.is_expired(now),
    )
    report = validator.validate(ctx, warnings)

    logger.info(
        "Position size calculated for %s: size=%s margin=%.2f risk=%.2f leverage=%s "
        "can_execute=%s warnings=%s errors=%s",
        signal.symbol,
        size,
        margin_required,
        risk_amount,
        leverage,
        report.can_execute,
        len(report.warnings),
        len(report.errors),
    )
    return PositionCalculation(
        position_size=size,
        position_value=position_value,
        margin_required=margin_required,
        risk_amount=risk_amount,
        leverage=leverage,
        entry_price=entry_price,
        raw_size=raw_size,
        available_margin=available_margin,
        validation=report,
    )


class PositionSizer:
    """Fetch live margin, specs and price, then size the position.

    Nothing is cached between calls.
    """

    def __init__(
        self,
        data_service: DataService,
        validator: Optional[PositionValidator] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.data_service = data_service
        self.validator = validator or PositionValidator()
        self._clock = clock

    def size(
        self,
        signal: TradingSignal,
        account: Optional[ExchangeAccount],
        risk_pct: Optional[float] = None,
        max_leverage: Optional[float] = None,
    ) -> PositionCalculation:
        margin = self.data_service.get_account_margin(account)
        specs = self.data_service.get_instrument_specs(signal.symbol)
        current_price = self.data_service.get_price(signal.symbol)
        if current_price <= 0:
            raise MarketUnavailable(f"Cannot get current price for {signal.symbol}")

        try:
            return calculate_position(
                signal,
                current_price,
                margin,
                specs,
                risk_pct if risk_pct is not None else settings.risk_default_pct,
                max_leverage if max_leverage is not None else settings.risk_max_leverage,
                self._clock(),
                validator=self.validator,
            )
        except (ArithmeticError, ValueError) as exc:
            logger.error("Position size calculation failed for %s: %s", signal.symbol, exc)
            raise PositionCalcError("Failed to calculate position size") from exc
