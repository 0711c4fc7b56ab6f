"""Signal execution: fresh sizing, staleness checks and order placement."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from signal_arena.data.data_service import DataService
from signal_arena.errors import SignalArenaError
from signal_arena.execution.base_executor import ExecutionAdapter
from signal_arena.execution.position_sizer import PositionSizer, precise, round_to_tick
from signal_arena.ingest.hyperliquid import api_coin
from signal_arena.models.enums import ExecutionStatus, MarginMode, OrderIntent, Side, TimeInForce
from signal_arena.models.market import ExchangeAccount
from signal_arena.models.order import ExecutionResult, OrderRequest, PositionCalculation
from signal_arena.models.signal import TradingSignal

logger = logging.getLogger(__name__)

MAX_PRICE_MOVEMENT = 0.05
LIMIT_REPRICE_DISTANCE = 0.02
SLIPPAGE_BUFFER = 0.001
TICK_ADJUST_WARN = 0.001


class TradeExecutor:
    """Re-validate against live state and place one limit order.

    Every attempt resizes from freshly fetched margin and price. Failures are
    reported in the result, never retried.
    """

    def __init__(
        self,
        data_service: DataService,
        execution: ExecutionAdapter,
        sizer: Optional[PositionSizer] = None,
        margin_mode: MarginMode = MarginMode.CROSS,
    ) -> None:
        self.data_service = data_service
        self.execution = execution
        self.sizer = sizer or PositionSizer(data_service)
        self.margin_mode = margin_mode

    def execute(
        self,
        signal: TradingSignal,
        account: Optional[ExchangeAccount],
        risk_pct: Optional[float] = None,
        max_leverage: Optional[float] = None,
        order_type: OrderIntent = OrderIntent.LIMIT,
    ) -> ExecutionResult:
        try:
            position = self.sizer.size(signal, account, risk_pct, max_leverage)
        except SignalArenaError as exc:
            return _failed(f"Cannot execute trade: {exc.message}", errors=(exc.message,))

        if not position.validation.can_execute:
            return _failed(
                "Cannot execute trade: " + ", ".join(position.validation.errors),
                position=position,
            )

        try:
            return self._place(signal, account, position, order_type)
        except Exception as exc:
            logger.error("Trade execution failed for %s: %s", signal.symbol, exc)
            return _failed(f"Trade execution failed: {exc}", position=position)

    def _place(
        self,
        signal: TradingSignal,
        account: Optional[ExchangeAccount],
        position: PositionCalculation,
        order_type: OrderIntent,
    ) -> ExecutionResult:
        specs = self.data_service.get_instrument_specs(signal.symbol)

        try:
            self.execution.set_leverage(
                signal.symbol, position.leverage, self.margin_mode, account=account
            )
        except Exception as exc:
            logger.warning("Failed to set leverage for %s: %s", signal.symbol, exc)

        current_price = self.data_service.get_price(signal.symbol)
        if current_price <= 0:
            return _failed(
                "Cannot execute: Current price unavailable",
                position=position,
                details={"error": "Price feed unavailable"},
            )

        movement = abs(current_price - signal.entry_price) / signal.entry_price
        if movement > MAX_PRICE_MOVEMENT:
            return _failed(
                f"Price moved {movement * 100:.2f}% since signal - canceling for safety",
                position=position,
                details={
                    "price_movement": movement,
                    "original_price": signal.entry_price,
                    "current_price": current_price,
                },
            )

        fresh_margin = self.data_service.get_account_margin(account)
        if position.margin_required > fresh_margin.available_margin:
            return _failed(
                "Insufficient margin after rechecking account",
                position=position,
                details={
                    "required": position.margin_required,
                    "available": fresh_margin.available_margin,
                },
            )

        is_buy = signal.side == Side.LONG
        if order_type == OrderIntent.LIMIT:
            target_price = signal.entry_price
            if abs(target_price - current_price) / current_price > LIMIT_REPRICE_DISTANCE:
                target_price = _with_slippage(current_price, is_buy)
            limit_price = round_to_tick(target_price, specs.tick_size)
            if abs(limit_price - target_price) / target_price > TICK_ADJUST_WARN:
                logger.warning(
                    "Limit price adjusted due to tick size: %s -> %s", target_price, limit_price
                )
            time_in_force = TimeInForce.GTC
        else:
            limit_price = round_to_tick(_with_slippage(current_price, is_buy), specs.tick_size)
            time_in_force = TimeInForce.IOC

        order = OrderRequest(
            coin=api_coin(signal.symbol),
            is_buy=is_buy,
            size=precise(position.position_size),
            limit_price=limit_price,
            time_in_force=time_in_force,
        )
        if order.size <= 0 or order.limit_price <= 0:
            return _failed("Invalid order parameters calculated", order=order, position=position)

        logger.info(
            "Executing trade %s %s size=%s price=%s leverage=%s type=%s",
            signal.symbol,
            signal.side.value,
            order.size,
            order.limit_price,
            position.leverage,
            order_type.value,
        )
        reply = self.execution.place_order(order, account=account)

        if not reply.ok:
            return _failed(
                f"Order error: {reply.error}",
                order=order,
                position=position,
                details={"response": reply.raw},
            )
        if reply.filled is not None:
            fill = reply.filled
            logger.info(
                "Trade executed for %s: size=%s price=%s order_id=%s",
                signal.symbol,
                fill.total_size,
                fill.avg_price,
                fill.order_id,
            )
            return ExecutionResult(
                status=ExecutionStatus.FILLED,
                message=(
                    f"Trade executed successfully. Size: {fill.total_size}, "
                    f"Price: {fill.avg_price}"
                ),
                order_id=fill.order_id,
                executed_price=fill.avg_price,
                executed_size=fill.total_size,
                order=order,
                position=position,
                warnings=position.validation.warnings,
            )
        if reply.resting is not None:
            return ExecutionResult(
                status=ExecutionStatus.RESTING,
                message=(
                    "Limit order placed successfully, waiting for fill. "
                    f"Size: {position.position_size}"
                ),
                order_id=reply.resting.order_id,
                order=order,
                position=position,
                warnings=position.validation.warnings,
            )
        return _failed(
            "Order placed but status unclear",
            order=order,
            position=position,
            details={"response": reply.raw},
        )


def _with_slippage(price: float, is_buy: bool) -> float:
    return price * (1 + SLIPPAGE_BUFFER) if is_buy else price * (1 - SLIPPAGE_BUFFER)


def _failed(
    message: str,
    order: Optional[OrderRequest] = None,
    position: Optional[PositionCalculation] = None,
    errors: tuple = (),
    details: Optional[Dict[str, Any]] = None,
) -> ExecutionResult:
    if position is not None and not errors:
        errors = position.validation.errors
    return ExecutionResult(
        status=ExecutionStatus.FAILED,
        message=message,
        order=order,
        position=position,
        warnings=position.validation.warnings if position is not None else (),
        errors=tuple(errors),
        details=details or {},
    )
