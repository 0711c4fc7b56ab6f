"""Execution layer exports."""

from signal_arena.execution.base_executor import ExecutionAdapter
from signal_arena.execution.hyperliquid_executor import HyperliquidExecutionAdapter
from signal_arena.execution.position_sizer import PositionSizer, calculate_position
from signal_arena.execution.simulated_executor import SimulatedExecutionAdapter
from signal_arena.execution.trade_executor import TradeExecutor

__all__ = [
    "ExecutionAdapter",
    "HyperliquidExecutionAdapter",
    "PositionSizer",
    "SimulatedExecutionAdapter",
    "TradeExecutor",
    "calculate_position",
]
