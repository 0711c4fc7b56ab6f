"""Abstract execution adapter interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from signal_arena.models.enums import MarginMode
from signal_arena.models.market import ExchangeAccount
from signal_arena.models.order import OrderRequest, VenueOrderResult


class ExecutionAdapter(ABC):
    """Venue write-side used for live trading and dry runs."""

    @abstractmethod
    def set_leverage(
        self,
        symbol: str,
        leverage: float,
        mode: MarginMode = MarginMode.CROSS,
        account: Optional[ExchangeAccount] = None,
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def place_order(
        self, order: OrderRequest, account: Optional[ExchangeAccount] = None
    ) -> VenueOrderResult:
        """Submit one limit order and normalize the venue's reply.

        Venue-side rejections come back as ``ok=False`` with ``error`` set.
        """
        raise NotImplementedError
