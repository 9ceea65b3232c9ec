"""Performance metrics over equity curves and realized profits."""

from __future__ import annotations

from typing import Iterable, Sequence

from trade_signal.simulator.models import EquityPoint


def compute_max_drawdown(equity_curve: Sequence[EquityPoint]) -> float:
    """Largest relative decline from a running peak, as a fraction."""
    if not equity_curve:
        return 0.0
    peak = equity_curve[0].equity
    max_drawdown = 0.0
    for point in equity_curve:
        if point.equity > peak:
            peak = point.equity
        if peak > 0:
            drawdown = (peak - point.equity) / peak
            if drawdown > max_drawdown:
                max_drawdown = drawdown
    return max_drawdown


def compute_win_rate(profits: Iterable[float]) -> float:
    profits = list(profits)
    if not profits:
        return 0.0
    wins = sum(1 for profit in profits if profit > 0)
    return wins / len(profits)


def compute_total_return(initial_equity: float, final_equity: float) -> float:
    # Nonsense starting equity (zero everything) is treated as 1.0.
    effective = initial_equity if initial_equity > 0 else 1.0
    return final_equity / effective - 1.0
