"""Parameter space and job generation for strategy sweeps."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import product
from typing import Iterable, Iterator, Optional

from trade_signal.strategy.indicators import MovingAverageConfig
from trade_signal.strategy.models import (
    BreakoutConfig,
    Candidate,
    FilterConfig,
    PullbackConfig,
    StrategyConfig,
)


@dataclass(frozen=True)
class SweepGrid:
    short_windows: tuple[int, ...] = (5, 10, 20, 30)
    long_windows: tuple[int, ...] = (20, 50, 100, 200)
    min_lookback: int = 3
    max_lookback: int = 10
    min_pullback: float = 0.001
    max_pullback: float = 0.01
    pullback_step: float = 0.001
    max_fraction: float = 0.5
    fraction_steps: int = 10
    filters: FilterConfig = field(default_factory=FilterConfig)


def stepped_range(start: float, stop: float, step: float) -> list[float]:
    """Inclusive float range built from integer step counts to avoid drift."""
    if step <= 0:
        raise ValueError("step must be positive")
    if stop < start:
        return []
    count = int(round((stop - start) / step))
    values = [round(start + index * step, 10) for index in range(count + 1)]
    return [value for value in values if value <= stop + 1e-12]


def generate_pullback_pairs(min_pct: float, max_pct: float, step: float = 0.001) -> list[tuple[float, float]]:
    values = stepped_range(min_pct, max_pct, step)
    return [(bounce, reject) for bounce in values for reject in values if reject > bounce]


def moving_average_pairs(short_windows: Iterable[int], long_windows: Iterable[int]) -> list[MovingAverageConfig]:
    longs = list(long_windows)
    return [
        MovingAverageConfig(short_window=short, long_window=long)
        for short in short_windows
        for long in longs
        if short > 0 and long >= 2 * short
    ]


def generate_strategies(
    grid: SweepGrid,
    pullback_pairs: Optional[list[tuple[float, float]]] = None,
) -> list[StrategyConfig]:
    """Cartesian product of windows, rule toggles, lookbacks and tolerances.

    Bias-only is always on. The configuration with breakout, pullback and
    crossover all disabled is skipped.
    """
    if pullback_pairs is None:
        pullback_pairs = generate_pullback_pairs(grid.min_pullback, grid.max_pullback, grid.pullback_step)
    lookbacks = [BreakoutConfig(lookback=value) for value in range(grid.min_lookback, grid.max_lookback + 1)]
    pullbacks = [PullbackConfig(bounce_tolerance=bounce, reject_tolerance=reject) for bounce, reject in pullback_pairs]

    strategies: list[StrategyConfig] = []
    for moving_averages in moving_average_pairs(grid.short_windows, grid.long_windows):
        for breakout_on, pullback_on, crossover_on in product((False, True), repeat=3):
            if not (breakout_on or pullback_on or crossover_on):
                continue
            breakout_options: list[Optional[BreakoutConfig]] = list(lookbacks) if breakout_on else [None]
            pullback_options: list[Optional[PullbackConfig]] = list(pullbacks) if pullback_on else [None]
            for breakout, pullback in product(breakout_options, pullback_options):
                strategies.append(
                    StrategyConfig(
                        breakout=breakout,
                        pullback=pullback,
                        enable_crossovers=crossover_on,
                        enable_bias_only=True,
                        moving_averages=moving_averages,
                        filters=grid.filters,
                    )
                )
    return strategies


def generate_jobs(
    strategies: Iterable[StrategyConfig],
    steps: int,
    max_fraction: float,
) -> Iterator[Candidate]:
    for strategy in strategies:
        for step in range(1, steps + 1):
            yield Candidate(sizing_fraction=(step / steps) * max_fraction, strategy=strategy)


def job_count(strategies: list[StrategyConfig], steps: int) -> int:
    return len(strategies) * max(0, steps)
