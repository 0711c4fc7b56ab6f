"""Signal engine: scan -> synthesize -> register -> execute."""

from __future__ import annotations

import logging
from typing import Optional

from signal_arena.config import settings
from signal_arena.data.data_service import DataService
from signal_arena.decision.scanner import OpportunityScanner
from signal_arena.decision.synthesizer import SignalSynthesizer
from signal_arena.errors import NoOpportunitiesFound
from signal_arena.execution.trade_executor import TradeExecutor
from signal_arena.models.enums import OrderIntent
from signal_arena.models.market import ExchangeAccount
from signal_arena.models.order import ExecutionResult
from signal_arena.signals.lifecycle import SignalBook, SignalRecord

logger = logging.getLogger(__name__)

AUTO_SELECT_MIN_VOLUME = 1_000_000


class SignalEngine:
    """Orchestrate opportunity selection, signal synthesis and execution."""

    def __init__(
        self,
        data_service: Optional[DataService] = None,
        synthesizer: Optional[SignalSynthesizer] = None,
        scanner: Optional[OpportunityScanner] = None,
        executor: Optional[TradeExecutor] = None,
        book: Optional[SignalBook] = None,
    ) -> None:
        self.data_service = data_service or DataService()
        self.synthesizer = synthesizer or SignalSynthesizer(self.data_service)
        self.scanner = scanner or OpportunityScanner(self.data_service)
        self._executor = executor
        self.book = book or SignalBook()

    @property
    def executor(self) -> TradeExecutor:
        if self._executor is None:
            from signal_arena.execution.hyperliquid_executor import HyperliquidExecutionAdapter

            self._executor = TradeExecutor(self.data_service, HyperliquidExecutionAdapter())
        return self._executor

    def create_signal(
        self,
        creator_id: str,
        symbol: Optional[str] = None,
        account_balance: Optional[float] = None,
    ) -> SignalRecord:
        if symbol is None:
            symbol = self._select_symbol()

        performance = self.book.creator_performance(creator_id)
        history = performance if performance.total_trades > 0 else None
        signal = self.synthesizer.synthesize(symbol, account_balance, history)
        return self.book.register(signal, creator_id)

    def execute_signal(
        self,
        signal_id: str,
        account: Optional[ExchangeAccount],
        risk_pct: Optional[float] = None,
        max_leverage: Optional[float] = None,
        order_type: OrderIntent = OrderIntent.LIMIT,
    ) -> ExecutionResult:
        record = self.book.begin_execution(signal_id)
        try:
            result = self.executor.execute(
                record.signal, account, risk_pct, max_leverage, order_type=order_type
            )
        except Exception:
            self.book.release_execution(signal_id)
            raise
        if result.success:
            self.book.mark_executed(signal_id, result)
        else:
            self.book.release_execution(signal_id)
            logger.warning("Execution of signal %s failed: %s", signal_id, result.message)
        return result

    def _select_symbol(self) -> str:
        result = self.scanner.scan(
            min_volume=AUTO_SELECT_MIN_VOLUME,
            top_count=1,
            max_symbols=settings.scan_max_symbols,
        )
        if not result.opportunities:
            raise NoOpportunitiesFound(
                "No suitable trading opportunities found in current market conditions"
            )
        best = result.opportunities[0]
        logger.info(
            "Auto-selected %s (win rate %.1f%%, score %.1f)", best.symbol, best.win_rate, best.score
        )
        return best.symbol
