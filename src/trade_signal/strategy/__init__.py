"""Indicators, patterns and strategy configuration."""

from trade_signal.strategy.indicators import (
    MovingAverageConfig,
    MovingAverageSet,
    Regime,
    RegimeFilter,
    VolatilityFilter,
    average_true_range,
    buy_and_hold_equity,
    moving_average_set,
    simple_moving_average,
    volatility_fraction,
)
from trade_signal.strategy.models import (
    BreakoutConfig,
    Candidate,
    FilterConfig,
    PullbackConfig,
    StrategyConfig,
)
from trade_signal.strategy.patterns import (
    is_breakdown_below_recent_low,
    is_breakout_above_recent_high,
    is_pullback_and_bounce,
    is_pullback_and_reject,
)

__all__ = [
    "BreakoutConfig",
    "Candidate",
    "FilterConfig",
    "MovingAverageConfig",
    "MovingAverageSet",
    "PullbackConfig",
    "Regime",
    "RegimeFilter",
    "StrategyConfig",
    "VolatilityFilter",
    "average_true_range",
    "buy_and_hold_equity",
    "is_breakdown_below_recent_low",
    "is_breakout_above_recent_high",
    "is_pullback_and_bounce",
    "is_pullback_and_reject",
    "moving_average_set",
    "simple_moving_average",
    "volatility_fraction",
]
