"""Hyperliquid execution adapter over ccxt."""

from __future__ import annotations

import logging
from typing import Any, Optional

import ccxt

from signal_arena.execution.base_executor import ExecutionAdapter
from signal_arena.ingest.hyperliquid import ExchangeSessionPool, to_market_symbol
from signal_arena.models.enums import MarginMode
from signal_arena.models.market import ExchangeAccount
from signal_arena.models.order import OrderRequest, VenueFill, VenueOrderResult, VenueResting

logger = logging.getLogger(__name__)


def _safe_float(value: object) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _order_id(value: object) -> Optional[str]:
    return None if value is None else str(value)


def map_order_response(response: dict) -> VenueOrderResult:
    """Map a ccxt order reply to filled, resting or error.

    The venue's own status entry in ``info`` wins over ccxt's unified fields.
    """
    info = response.get("info") or {}
    if isinstance(info.get("filled"), dict):
        filled = info["filled"]
        return VenueOrderResult(
            ok=True,
            filled=VenueFill(
                order_id=_order_id(filled.get("oid")),
                avg_price=_safe_float(filled.get("avgPx")) or 0.0,
                total_size=_safe_float(filled.get("totalSz")) or 0.0,
            ),
            raw=response,
        )
    if isinstance(info.get("resting"), dict):
        return VenueOrderResult(
            ok=True,
            resting=VenueResting(order_id=_order_id(info["resting"].get("oid"))),
            raw=response,
        )
    if info.get("error"):
        return VenueOrderResult(ok=False, error=str(info["error"]), raw=response)

    status = (response.get("status") or "").lower()
    filled_qty = _safe_float(response.get("filled")) or 0.0
    amount = _safe_float(response.get("amount")) or 0.0
    if status in {"canceled", "cancelled", "rejected", "expired"}:
        return VenueOrderResult(ok=False, error=f"order {status}", raw=response)
    if status in {"closed", "filled"} or (amount and filled_qty >= amount):
        return VenueOrderResult(
            ok=True,
            filled=VenueFill(
                order_id=_order_id(response.get("id")),
                avg_price=_safe_float(response.get("average"))
                or _safe_float(response.get("price"))
                or 0.0,
                total_size=filled_qty or amount,
            ),
            raw=response,
        )
    if status == "open":
        return VenueOrderResult(
            ok=True, resting=VenueResting(order_id=_order_id(response.get("id"))), raw=response
        )
    return VenueOrderResult(ok=True, raw=response)


class HyperliquidExecutionAdapter(ExecutionAdapter):
    """Places limit orders on Hyperliquid with per-account clients."""

    def __init__(self, pool: Optional[ExchangeSessionPool] = None) -> None:
        self.pool = pool or ExchangeSessionPool()

    def _client(self, account: Optional[ExchangeAccount]) -> Any:
        if account is None or not account.private_key:
            raise ValueError("Trading requires an account with a private key")
        client = self.pool.get_client(account)
        if not client.markets:
            client.load_markets()
        return client

    def set_leverage(
        self,
        symbol: str,
        leverage: float,
        mode: MarginMode = MarginMode.CROSS,
        account: Optional[ExchangeAccount] = None,
    ) -> None:
        client = self._client(account)
        client.set_leverage(int(leverage), to_market_symbol(symbol), {"marginMode": mode.value})

    def place_order(
        self, order: OrderRequest, account: Optional[ExchangeAccount] = None
    ) -> VenueOrderResult:
        client = self._client(account)
        params = {
            "timeInForce": order.time_in_force.value,
            "reduceOnly": order.reduce_only,
        }
        try:
            response = client.create_order(
                to_market_symbol(order.coin),
                "limit",
                "buy" if order.is_buy else "sell",
                order.size,
                order.limit_price,
                params,
            )
        except ccxt.BaseError as exc:
            logger.warning("Order rejected for %s: %s", order.coin, exc)
            return VenueOrderResult(ok=False, error=str(exc))
        return map_order_response(response or {})
