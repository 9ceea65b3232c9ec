"""Simulation data structures."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from trade_signal.rule_engine.models import Action
from trade_signal.strategy.models import Candidate


class PositionSide(str, Enum):
    LONG = "long"
    SHORT = "short"

    @staticmethod
    def from_action(action: Action) -> Optional["PositionSide"]:
        if action == Action.BUY:
            return PositionSide.LONG
        if action == Action.SELL:
            return PositionSide.SHORT
        return None


@dataclass(frozen=True)
class EquityPoint:
    time: datetime
    equity: float


@dataclass
class Position:
    side: PositionSide
    entry_time: datetime
    entry_price: float
    size: float
    entry_collateral_gross: float
    entry_reason: str
    exit_time: Optional[datetime] = None
    exit_price: Optional[float] = None
    profit: Optional[float] = None
    return_pct: Optional[float] = None
    exit_reason: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.exit_time is None

    def liquidation_value(self, price: float) -> float:
        if price <= 0 or self.size <= 0:
            return 0.0
        if self.side == PositionSide.LONG:
            return self.size * price
        return self.entry_collateral_gross + (self.entry_price - price) * self.size

    def close(self, exit_price: float, exit_time: datetime, reason: str) -> float:
        """Realize the position and return the cash credited back."""
        if not self.is_open:
            raise ValueError("Position already closed")
        if self.side == PositionSide.LONG:
            profit = (exit_price - self.entry_price) * self.size
        else:
            profit = (self.entry_price - exit_price) * self.size
        self.exit_price = exit_price
        self.exit_time = exit_time
        self.exit_reason = reason
        self.profit = profit
        self.return_pct = profit / self.entry_collateral_gross if self.entry_collateral_gross > 0 else 0.0
        return self.entry_collateral_gross + profit


@dataclass(frozen=True)
class Trade:
    entry_time: datetime
    exit_time: datetime
    entry_price: float
    exit_price: float
    entry_value: float
    exit_value: float
    profit: float
    return_pct: float


@dataclass(frozen=True)
class BacktestResult:
    candidate: Candidate
    initial_equity: float
    final_equity: float
    equity_curve: list[EquityPoint]
    total_return_pct: float
    max_drawdown_pct: float
    win_rate_pct: float

    @property
    def trade_count(self) -> int:
        return 0


@dataclass(frozen=True)
class PositionBacktestResult(BacktestResult):
    positions: list[Position]

    @property
    def trade_count(self) -> int:
        return len(self.positions)


@dataclass(frozen=True)
class SpotBacktestResult(BacktestResult):
    trades: list[Trade]
    final_coin: float = 0.0

    @property
    def trade_count(self) -> int:
        return len(self.trades)
