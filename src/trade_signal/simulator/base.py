"""Backtester interface shared by the simulators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from trade_signal.data.models import InsufficientDataError, Sample
from trade_signal.monitoring.observers import NullObserver, SimulationObserver
from trade_signal.rule_engine.engine import DecisionFn, decide
from trade_signal.simulator.models import BacktestResult
from trade_signal.strategy.models import Candidate


class Backtester(ABC):
    def __init__(
        self,
        decision_fn: DecisionFn = decide,
        observer: Optional[SimulationObserver] = None,
    ) -> None:
        self.decision_fn = decision_fn
        self.observer = observer or NullObserver()

    @abstractmethod
    def run(self, samples: Sequence[Sample], candidate: Candidate) -> BacktestResult:
        raise NotImplementedError

    @staticmethod
    def _require_history(samples: Sequence[Sample], candidate: Candidate) -> None:
        required = candidate.strategy.moving_averages.long_window + 1
        if len(samples) < required:
            raise InsufficientDataError(required, len(samples))
