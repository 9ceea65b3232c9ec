"""Configuration models for reproducible backtests and sweeps."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Callable, Optional, Sequence

from trade_signal.data import loader as data_loader
from trade_signal.data.models import InsufficientDataError, Sample
from trade_signal.monitoring.observers import SimulationObserver
from trade_signal.simulator.base import Backtester
from trade_signal.simulator.position import PositionBacktester
from trade_signal.simulator.spot import SpotBacktester
from trade_signal.strategy.indicators import MovingAverageConfig, RegimeFilter, VolatilityFilter
from trade_signal.strategy.models import (
    BreakoutConfig,
    FilterConfig,
    PullbackConfig,
    StrategyConfig,
)
from trade_signal.sweep.grid import SweepGrid


class SimulatorMode(str, Enum):
    POSITION = "position"
    SPOT = "spot"


@dataclass(frozen=True)
class VolatilitySettings:
    period: int = 5
    floor: float = 0.003
    percentile: Optional[float] = None

    def build(self, prices: Sequence[float]) -> VolatilityFilter:
        if self.percentile is None:
            return VolatilityFilter(period=self.period, floor=self.floor)
        calibrated = VolatilityFilter.from_history(prices, self.period, self.percentile)
        if calibrated is None:
            raise InsufficientDataError(self.period + 2, len(prices))
        return calibrated


@dataclass(frozen=True)
class FilterSettings:
    require_trend_filter: bool = True
    require_price_confirmation: bool = True
    volatility: Optional[VolatilitySettings] = None
    regime: Optional[RegimeFilter] = None

    def build(self, prices: Sequence[float]) -> FilterConfig:
        return FilterConfig(
            require_trend_filter=self.require_trend_filter,
            require_price_confirmation=self.require_price_confirmation,
            volatility=self.volatility.build(prices) if self.volatility is not None else None,
            regime=self.regime,
        )


@dataclass(frozen=True)
class StrategySettings:
    breakout: Optional[BreakoutConfig] = None
    pullback: Optional[PullbackConfig] = None
    enable_crossovers: bool = True
    enable_bias_only: bool = False
    moving_averages: MovingAverageConfig = field(default_factory=MovingAverageConfig)
    filters: FilterSettings = field(default_factory=FilterSettings)

    def build(self, prices: Sequence[float]) -> StrategyConfig:
        return StrategyConfig(
            breakout=self.breakout,
            pullback=self.pullback,
            enable_crossovers=self.enable_crossovers,
            enable_bias_only=self.enable_bias_only,
            moving_averages=self.moving_averages,
            filters=self.filters.build(prices),
        )


@dataclass(frozen=True)
class SweepSettings:
    short_windows: tuple[int, ...] = (5, 10, 20, 30)
    long_windows: tuple[int, ...] = (20, 50, 100, 200)
    min_lookback: int = 3
    max_lookback: int = 10
    min_pullback: float = 0.001
    max_pullback: float = 0.01
    pullback_step: float = 0.001
    max_fraction: float = 0.5
    fraction_steps: int = 10
    workers: int = 0
    filters: FilterSettings = field(default_factory=FilterSettings)

    def build_grid(self, prices: Sequence[float]) -> SweepGrid:
        return SweepGrid(
            short_windows=self.short_windows,
            long_windows=self.long_windows,
            min_lookback=self.min_lookback,
            max_lookback=self.max_lookback,
            min_pullback=self.min_pullback,
            max_pullback=self.max_pullback,
            pullback_step=self.pullback_step,
            max_fraction=self.max_fraction,
            fraction_steps=self.fraction_steps,
            filters=self.filters.build(prices),
        )


@dataclass(frozen=True)
class MonitoringConfig:
    audit_log_path: Optional[str] = None
    notify_prefix: str = "[signal]"


@dataclass(frozen=True)
class BacktestConfig:
    name: str
    input: str
    mode: SimulatorMode = SimulatorMode.POSITION
    sample_hours: int = 1
    initial_cash: float = 1000.0
    initial_coin: float = 0.0
    fee_bps: float = 0.0
    sizing_fraction: float = 0.5
    strategy: StrategySettings = field(default_factory=StrategySettings)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
    sweep: Optional[SweepSettings] = None

    def backtester_factory(self, observer: Optional[SimulationObserver] = None) -> Callable[[], Backtester]:
        if self.mode == SimulatorMode.SPOT:
            return partial(
                SpotBacktester,
                initial_cash=self.initial_cash,
                initial_coin=self.initial_coin,
                fee_bps=self.fee_bps,
                observer=observer,
            )
        return partial(PositionBacktester, initial_cash=self.initial_cash, observer=observer)

    def load_samples(self) -> list[Sample]:
        """Read ``input`` and resample it to ``sample_hours`` candles."""
        return data_loader.resample_to_n_hours(data_loader.load_samples(self.input), self.sample_hours)
