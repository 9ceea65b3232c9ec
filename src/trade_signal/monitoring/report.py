"""Text summaries and JSON-ready payloads for backtest results."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional

from trade_signal.simulator.models import BacktestResult, PositionBacktestResult, SpotBacktestResult


def format_summary(result: BacktestResult, buy_and_hold: Optional[float] = None) -> str:
    label = "Positions" if isinstance(result, PositionBacktestResult) else "Trades"
    lines = [
        "=== Backtest Summary ===",
        f"Initial equity:  {result.initial_equity:.2f}",
        f"Final equity:    {result.final_equity:.2f}",
        f"Total return:    {result.total_return_pct * 100.0:.2f}%",
        f"Max drawdown:    {result.max_drawdown_pct * 100.0:.2f}%",
        f"{label + ':':<16} {result.trade_count}",
        f"Win rate:        {result.win_rate_pct * 100.0:.2f}%",
    ]
    if buy_and_hold is not None:
        lines.append(f"Buy & hold:      {buy_and_hold:.2f}")
    return "\n".join(lines)


def _serialize_equity_curve(result: BacktestResult) -> list[dict[str, Any]]:
    return [{"time": point.time.isoformat(), "equity": point.equity} for point in result.equity_curve]


def serialize_result(result: BacktestResult, include_curve: bool = True) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "strategy": result.candidate.strategy.describe(),
        "sizing_fraction": result.candidate.sizing_fraction,
        "initial_equity": result.initial_equity,
        "final_equity": result.final_equity,
        "total_return_pct": result.total_return_pct,
        "max_drawdown_pct": result.max_drawdown_pct,
        "win_rate_pct": result.win_rate_pct,
    }
    if include_curve:
        payload["equity_curve"] = _serialize_equity_curve(result)
    if isinstance(result, PositionBacktestResult):
        positions = []
        for position in result.positions:
            item = asdict(position)
            item["side"] = position.side.value
            positions.append(item)
        payload["positions"] = positions
    elif isinstance(result, SpotBacktestResult):
        payload["trades"] = [asdict(trade) for trade in result.trades]
        payload["final_coin"] = result.final_coin
    return payload
