"""Parallel grid-search driver."""

from __future__ import annotations

import os
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from dataclasses import dataclass
from itertools import islice
from typing import Callable, Iterable, Iterator, Optional, Sequence

from trade_signal.data.models import Sample
from trade_signal.monitoring.observers import NullObserver, SweepObserver
from trade_signal.simulator.base import Backtester
from trade_signal.simulator.models import BacktestResult
from trade_signal.strategy.models import Candidate
from trade_signal.sweep.selection import ScoredCandidate, pick_better

BacktesterFactory = Callable[[], Backtester]

# Exceptions that mark a single job as failed without stopping the sweep.
JOB_ERRORS = (ValueError, ArithmeticError)


@dataclass(frozen=True)
class SweepResult:
    candidate: Candidate
    result: BacktestResult
    completed: int
    failed: int


@dataclass(frozen=True)
class BatchOutcome:
    best: Optional[ScoredCandidate]
    completed: int
    failed: int


def default_workers(workers: int | None = None) -> int:
    if workers is None or workers <= 0:
        return max(1, (os.cpu_count() or 2) - 1)
    return int(workers)


def evaluate_batch(backtester: Backtester, samples: Sequence[Sample], batch: Sequence[Candidate]) -> BatchOutcome:
    best: Optional[ScoredCandidate] = None
    failed = 0
    for candidate in batch:
        try:
            result = backtester.run(samples, candidate)
        except JOB_ERRORS:
            failed += 1
            continue
        best = pick_better(best, (candidate, result))
    return BatchOutcome(best=best, completed=len(batch), failed=failed)


# Per-process state, populated once by the pool initializer.
_worker_samples: Sequence[Sample] = ()
_worker_backtester: Optional[Backtester] = None


def _init_worker(samples: Sequence[Sample], factory: BacktesterFactory) -> None:
    global _worker_samples, _worker_backtester
    _worker_samples = samples
    _worker_backtester = factory()


def _run_batch(batch: Sequence[Candidate]) -> BatchOutcome:
    if _worker_backtester is None:
        raise RuntimeError("Worker was not initialized")
    return evaluate_batch(_worker_backtester, _worker_samples, batch)


def _batched(jobs: Iterable[Candidate], size: int) -> Iterator[list[Candidate]]:
    iterator = iter(jobs)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch


class SweepRunner:
    """Fans candidates out to a process pool and keeps only the running best.

    Each worker process builds its own backtester from ``backtester_factory``
    and receives the sample series once. Jobs are shipped in batches that are
    reduced inside the worker, so only one result per batch crosses the
    process boundary. At most ``max_pending`` batches are in flight, so the
    job iterator is consumed as workers free up rather than up front.
    """

    def __init__(
        self,
        backtester_factory: BacktesterFactory,
        workers: int | None = None,
        observer: Optional[SweepObserver] = None,
        batch_size: int | None = None,
    ) -> None:
        self.backtester_factory = backtester_factory
        self.workers = default_workers(workers)
        self.observer = observer or NullObserver()
        self.batch_size = batch_size
        self.max_pending = 2 * self.workers

    def _batch_size_for(self, total: int) -> int:
        if self.batch_size is not None and self.batch_size > 0:
            return self.batch_size
        # Roughly 1% of the sweep per batch, so progress ticks at ~1% steps.
        return max(1, min(256, total // 100))

    def _outcomes(
        self,
        samples: Sequence[Sample],
        batches: Iterable[list[Candidate]],
    ) -> Iterator[BatchOutcome]:
        if self.workers == 1:
            backtester = self.backtester_factory()
            for batch in batches:
                yield evaluate_batch(backtester, samples, batch)
            return

        with ProcessPoolExecutor(
            max_workers=self.workers,
            initializer=_init_worker,
            initargs=(list(samples), self.backtester_factory),
        ) as executor:
            pending: set[Future] = set()
            for batch in batches:
                pending.add(executor.submit(_run_batch, batch))
                if len(pending) < self.max_pending:
                    continue
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    yield future.result()
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    yield future.result()

    def run(
        self,
        samples: Sequence[Sample],
        jobs: Iterable[Candidate],
        total: int | None = None,
    ) -> Optional[SweepResult]:
        if total is None:
            jobs = list(jobs)
            total = len(jobs)
        if total == 0:
            return None

        batches = _batched(jobs, self._batch_size_for(total))
        best: Optional[ScoredCandidate] = None
        completed = 0
        failed = 0
        last_percent = -1

        for outcome in self._outcomes(samples, batches):
            completed += outcome.completed
            failed += outcome.failed
            merged = pick_better(best, outcome.best)
            if merged is not None and merged is not best:
                self.observer.on_improvement(merged[0], merged[1])
            best = merged

            percent = completed * 100 // total
            if percent > last_percent:
                last_percent = percent
                self.observer.on_progress(completed, failed, total)

        if best is None:
            return None
        candidate, result = best
        return SweepResult(candidate=candidate, result=result, completed=completed, failed=failed)
