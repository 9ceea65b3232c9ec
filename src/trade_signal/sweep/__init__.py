"""Parameter sweeps and best-result selection."""

from trade_signal.sweep.grid import (
    SweepGrid,
    generate_jobs,
    generate_pullback_pairs,
    generate_strategies,
    job_count,
    moving_average_pairs,
    stepped_range,
)
from trade_signal.sweep.runner import (
    BatchOutcome,
    SweepResult,
    SweepRunner,
    default_workers,
    evaluate_batch,
)
from trade_signal.sweep.selection import RETURN_EPSILON, is_better, pick_better, reduce_best

__all__ = [
    "BatchOutcome",
    "RETURN_EPSILON",
    "SweepGrid",
    "SweepResult",
    "SweepRunner",
    "default_workers",
    "evaluate_batch",
    "generate_jobs",
    "generate_pullback_pairs",
    "generate_strategies",
    "is_better",
    "job_count",
    "moving_average_pairs",
    "pick_better",
    "reduce_best",
    "stepped_range",
]
