"""Exchange market-data contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from signal_arena.models.market import AccountMargin, Candle, ExchangeAccount, InstrumentSpecs

DEFAULT_LOT_SIZE = 0.0001
DEFAULT_TICK_SIZE = 0.0001
DEFAULT_MIN_ORDER_VALUE = 10.0

DEFAULT_SPECS = InstrumentSpecs(
    lot_size=DEFAULT_LOT_SIZE,
    tick_size=DEFAULT_TICK_SIZE,
    min_order_value=DEFAULT_MIN_ORDER_VALUE,
)


class MarketDataAdapter(ABC):
    """Read-side venue access.

    Implementations return sentinels instead of raising when the venue is
    unavailable: a price of 0, an empty candle list, default instrument
    specs and a zero margin summary.
    """

    @abstractmethod
    def get_mid_price(self, symbol: str) -> float:
        raise NotImplementedError

    @abstractmethod
    def get_candles(
        self, symbol: str, interval: str, start_ms: int, end_ms: int
    ) -> List[Candle]:
        raise NotImplementedError

    @abstractmethod
    def get_instrument_specs(self, symbol: str) -> InstrumentSpecs:
        raise NotImplementedError

    @abstractmethod
    def get_account_margin(self, account: Optional[ExchangeAccount]) -> AccountMargin:
        raise NotImplementedError

    def list_symbols(self, limit: Optional[int] = None) -> List[str]:
        return []
