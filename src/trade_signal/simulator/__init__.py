"""Portfolio simulators."""

from trade_signal.simulator.base import Backtester
from trade_signal.simulator.metrics import compute_max_drawdown, compute_total_return, compute_win_rate
from trade_signal.simulator.models import (
    BacktestResult,
    EquityPoint,
    Position,
    PositionBacktestResult,
    PositionSide,
    SpotBacktestResult,
    Trade,
)
from trade_signal.simulator.position import EOF_REASON, PositionBacktester
from trade_signal.simulator.spot import SpotBacktester

__all__ = [
    "BacktestResult",
    "Backtester",
    "EOF_REASON",
    "EquityPoint",
    "Position",
    "PositionBacktestResult",
    "PositionBacktester",
    "PositionSide",
    "SpotBacktestResult",
    "SpotBacktester",
    "Trade",
    "compute_max_drawdown",
    "compute_total_return",
    "compute_win_rate",
]
