"""Simulated execution adapter for dry runs."""

from __future__ import annotations

import itertools
import time
from typing import List, Optional, Tuple

from signal_arena.execution.base_executor import ExecutionAdapter
from signal_arena.models.enums import MarginMode, TimeInForce
from signal_arena.models.market import ExchangeAccount
from signal_arena.models.order import OrderRequest, VenueFill, VenueOrderResult, VenueResting


class SimulatedExecutionAdapter(ExecutionAdapter):
    """Fills IOC orders at their limit price and rests GTC orders."""

    def __init__(
        self,
        latency_ms: int = 0,
        reject_reason: Optional[str] = None,
        leverage_error: Optional[str] = None,
    ) -> None:
        self.latency_ms = latency_ms
        self.reject_reason = reject_reason
        self.leverage_error = leverage_error
        self.orders: List[OrderRequest] = []
        self.leverage_calls: List[Tuple[str, float, MarginMode]] = []
        self._ids = itertools.count(1)

    def set_leverage(
        self,
        symbol: str,
        leverage: float,
        mode: MarginMode = MarginMode.CROSS,
        account: Optional[ExchangeAccount] = None,
    ) -> None:
        if self.leverage_error:
            raise RuntimeError(self.leverage_error)
        self.leverage_calls.append((symbol, leverage, mode))

    def place_order(
        self, order: OrderRequest, account: Optional[ExchangeAccount] = None
    ) -> VenueOrderResult:
        self.orders.append(order)
        if self.latency_ms:
            time.sleep(self.latency_ms / 1000.0)
        if self.reject_reason:
            return VenueOrderResult(ok=False, error=self.reject_reason)

        order_id = f"SIM-{next(self._ids)}"
        if order.time_in_force == TimeInForce.IOC:
            return VenueOrderResult(
                ok=True,
                filled=VenueFill(
                    order_id=order_id, avg_price=order.limit_price, total_size=order.size
                ),
            )
        return VenueOrderResult(ok=True, resting=VenueResting(order_id=order_id))
