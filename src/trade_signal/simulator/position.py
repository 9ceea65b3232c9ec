"""Single-position long/short flip simulator."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from trade_signal.data.models import Sample
from trade_signal.monitoring.observers import SimulationObserver
from trade_signal.rule_engine.engine import DecisionFn, decide
from trade_signal.simulator.base import Backtester
from trade_signal.simulator.metrics import compute_max_drawdown, compute_total_return, compute_win_rate
from trade_signal.simulator.models import EquityPoint, Position, PositionBacktestResult, PositionSide
from trade_signal.strategy.indicators import moving_average_set
from trade_signal.strategy.models import Candidate

EOF_REASON = "EOF"


class PositionBacktester(Backtester):
    """Holds at most one long or short position.

    An opposite signal closes the open position and immediately opens the
    other side with ``sizing_fraction`` of the cash available at that moment.
    Whatever is still open after the last sample is closed at its price.
    """

    def __init__(
        self,
        initial_cash: float,
        decision_fn: DecisionFn = decide,
        observer: Optional[SimulationObserver] = None,
    ) -> None:
        super().__init__(decision_fn=decision_fn, observer=observer)
        self.initial_cash = initial_cash

    def run(self, samples: Sequence[Sample], candidate: Candidate) -> PositionBacktestResult:
        self._require_history(samples, candidate)
        strategy = candidate.strategy
        fraction = candidate.clamped_fraction()

        cash = self.initial_cash
        open_position: Optional[Position] = None
        closed: list[Position] = []
        prices: list[float] = []
        equity_curve: list[EquityPoint] = []

        for sample in samples:
            price = sample.price
            prices.append(price)

            equity = cash
            if open_position is not None:
                equity += open_position.liquidation_value(price)
            equity_curve.append(EquityPoint(time=sample.time, equity=equity))

            moving_averages = moving_average_set(prices, strategy.moving_averages)
            if moving_averages is None:
                continue

            decision = self.decision_fn(prices, moving_averages, strategy)
            side = PositionSide.from_action(decision.action)
            if side is None:
                continue
            if open_position is not None and open_position.side == side:
                continue

            if open_position is not None:
                cash += self._close(open_position, price, sample.time, decision.reason)
                closed.append(open_position)
                open_position = None

            opened = self._open(side, price, sample.time, cash, fraction, decision.reason)
            if opened is not None:
                cash -= opened.entry_collateral_gross
                open_position = opened

        if open_position is not None:
            last = samples[-1]
            cash += self._close(open_position, last.price, last.time, EOF_REASON)
            closed.append(open_position)

        final_equity = cash
        return PositionBacktestResult(
            candidate=candidate,
            initial_equity=self.initial_cash,
            final_equity=final_equity,
            equity_curve=equity_curve,
            total_return_pct=compute_total_return(self.initial_cash, final_equity),
            max_drawdown_pct=compute_max_drawdown(equity_curve),
            win_rate_pct=compute_win_rate(position.profit or 0.0 for position in closed),
            positions=closed,
        )

    def _close(self, position: Position, price: float, time: datetime, reason: str) -> float:
        credited = position.close(price, time, reason)
        self.observer.on_position_closed(position)
        return credited

    @staticmethod
    def _open(
        side: PositionSide,
        price: float,
        time: datetime,
        cash: float,
        fraction: float,
        reason: str,
    ) -> Optional[Position]:
        if price <= 0 or cash <= 0 or fraction <= 0:
            return None
        collateral = cash * fraction
        if collateral <= 0:
            return None
        size = collateral / price
        if size <= 0:
            return None
        return Position(
            side=side,
            entry_time=time,
            entry_price=price,
            size=size,
            entry_collateral_gross=collateral,
            entry_reason=reason,
        )
