"""Strategy configuration models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from trade_signal.strategy.indicators import MovingAverageConfig, RegimeFilter, VolatilityFilter


@dataclass(frozen=True)
class BreakoutConfig:
    lookback: int = 5


@dataclass(frozen=True)
class PullbackConfig:
    bounce_tolerance: float = 0.003
    reject_tolerance: float = 0.003


@dataclass(frozen=True)
class FilterConfig:
    require_trend_filter: bool = True
    require_price_confirmation: bool = True
    volatility: Optional[VolatilityFilter] = None
    regime: Optional[RegimeFilter] = None


@dataclass(frozen=True)
class StrategyConfig:
    breakout: Optional[BreakoutConfig] = None
    pullback: Optional[PullbackConfig] = None
    enable_crossovers: bool = True
    enable_bias_only: bool = False
    moving_averages: MovingAverageConfig = field(default_factory=MovingAverageConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)

    def describe(self) -> str:
        parts: list[str] = []
        if self.breakout is not None:
            parts.append(f"breakout(lookback={self.breakout.lookback})")
        if self.pullback is not None:
            parts.append(
                "pullback("
                f"bounce={self.pullback.bounce_tolerance:.4f}, "
                f"reject={self.pullback.reject_tolerance:.4f})"
            )
        if self.enable_crossovers:
            parts.append("crossovers")
        if self.enable_bias_only:
            parts.append("bias_only")
        parts.append(f"sma({self.moving_averages.short_window}/{self.moving_averages.long_window})")

        filters = self.filters
        flags: list[str] = []
        if filters.require_trend_filter:
            flags.append("trend")
        if filters.require_price_confirmation:
            flags.append("price_confirmation")
        if filters.volatility is not None:
            flags.append(f"volatility(period={filters.volatility.period}, floor={filters.volatility.floor:.4%})")
        if filters.regime is not None:
            regime = filters.regime
            flags.append(
                f"regime(long={regime.long_window}, slope={regime.slope_window}, "
                f"trend>={regime.min_trend_strength:.2%}, range>={regime.min_range:.2%})"
            )
        parts.append("filters[" + ", ".join(flags) + "]" if flags else "filters[none]")
        return " ".join(parts)


@dataclass(frozen=True)
class Candidate:
    sizing_fraction: float
    strategy: StrategyConfig

    def clamped_fraction(self) -> float:
        return max(0.0, min(1.0, self.sizing_fraction))
