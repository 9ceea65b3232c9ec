"""Best-result selection for sweeps."""

from __future__ import annotations

from typing import Iterable, Optional

from trade_signal.simulator.models import BacktestResult
from trade_signal.strategy.models import Candidate

RETURN_EPSILON = 1e-9

ScoredCandidate = tuple[Candidate, BacktestResult]


def is_better(result: BacktestResult, best: Optional[BacktestResult]) -> bool:
    """Higher total return wins; returns within epsilon fall back to lower drawdown.

    Exact ties keep the incumbent, so the winner among identical scores
    depends on reduction order.
    """
    if best is None:
        return True
    if result.total_return_pct > best.total_return_pct + RETURN_EPSILON:
        return True
    if abs(result.total_return_pct - best.total_return_pct) <= RETURN_EPSILON:
        return result.max_drawdown_pct < best.max_drawdown_pct
    return False


def pick_better(left: Optional[ScoredCandidate], right: Optional[ScoredCandidate]) -> Optional[ScoredCandidate]:
    if right is None:
        return left
    if left is None:
        return right
    return right if is_better(right[1], left[1]) else left


def reduce_best(pairs: Iterable[Optional[ScoredCandidate]]) -> Optional[ScoredCandidate]:
    best: Optional[ScoredCandidate] = None
    for pair in pairs:
        best = pick_better(best, pair)
    return best
