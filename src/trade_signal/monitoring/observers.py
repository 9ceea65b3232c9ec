"""Observer hooks that keep simulation and sweep code free of direct I/O."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from trade_signal.monitoring.audit import AuditLog
from trade_signal.monitoring.notifier import Notifier

if TYPE_CHECKING:
    from trade_signal.simulator.models import BacktestResult, Position, Trade
    from trade_signal.strategy.models import Candidate


class SimulationObserver:
    def on_position_closed(self, position: "Position") -> None:
        return None

    def on_trade(self, trade: "Trade") -> None:
        return None


class SweepObserver:
    def on_progress(self, completed: int, failed: int, total: int) -> None:
        return None

    def on_improvement(self, candidate: "Candidate", result: "BacktestResult") -> None:
        return None


class NullObserver(SimulationObserver, SweepObserver):
    pass


class NotifierObserver(SimulationObserver, SweepObserver):
    def __init__(self, notifier: Notifier) -> None:
        self.notifier = notifier

    def on_position_closed(self, position: "Position") -> None:
        self.notifier.notify(
            "position_closed",
            f"{position.side.value} {position.entry_price:.4f} -> {position.exit_price:.4f} "
            f"profit={position.profit:.2f} ({position.exit_reason})",
        )

    def on_trade(self, trade: "Trade") -> None:
        self.notifier.notify(
            "trade",
            f"{trade.entry_price:.4f} -> {trade.exit_price:.4f} profit={trade.profit:.2f}",
        )

    def on_progress(self, completed: int, failed: int, total: int) -> None:
        percent = 100.0 * completed / total if total else 100.0
        self.notifier.notify("progress", f"{completed}/{total} jobs ({percent:.0f}%), {failed} failed")

    def on_improvement(self, candidate: "Candidate", result: "BacktestResult") -> None:
        self.notifier.notify(
            "new_best",
            f"return={result.total_return_pct:.2%} drawdown={result.max_drawdown_pct:.2%} "
            f"fraction={candidate.sizing_fraction:.2f} {candidate.strategy.describe()}",
        )


class AuditObserver(SimulationObserver):
    def __init__(self, audit_log: AuditLog) -> None:
        self.audit_log = audit_log

    def on_position_closed(self, position: "Position") -> None:
        payload = asdict(position)
        payload["side"] = position.side.value
        self.audit_log.log("position_closed", payload)

    def on_trade(self, trade: "Trade") -> None:
        self.audit_log.log("trade", asdict(trade))
