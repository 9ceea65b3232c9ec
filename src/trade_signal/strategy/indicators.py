"""Indicator helpers over close-price slices."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from trade_signal.data.models import Sample


@dataclass(frozen=True)
class MovingAverageConfig:
    short_window: int = 20
    long_window: int = 50


@dataclass(frozen=True)
class MovingAverageSet:
    short: float
    long: float
    prev_short: float
    prev_long: float


def _trailing_mean(prices: Sequence[float], window: int, end: int) -> Optional[float]:
    # Mean of prices[end - window:end] without copying the series.
    if window <= 0 or end < window:
        return None
    total = 0.0
    for index in range(end - window, end):
        total += prices[index]
    return total / window


def simple_moving_average(prices: Sequence[float], window: int) -> Optional[float]:
    return _trailing_mean(prices, window, len(prices))


def moving_average_set(prices: Sequence[float], config: MovingAverageConfig) -> Optional[MovingAverageSet]:
    """Current and previous-step short/long averages.

    Needs ``long_window + 1`` prices so the previous pair is defined.
    """
    n = len(prices)
    if n < config.long_window + 1:
        return None

    short = _trailing_mean(prices, config.short_window, n)
    long = _trailing_mean(prices, config.long_window, n)
    prev_short = _trailing_mean(prices, config.short_window, n - 1)
    prev_long = _trailing_mean(prices, config.long_window, n - 1)
    if short is None or long is None or prev_short is None or prev_long is None:
        return None
    return MovingAverageSet(short=short, long=long, prev_short=prev_short, prev_long=prev_long)


def _atr_ending_at(prices: Sequence[float], period: int, end: int) -> Optional[float]:
    # Close-only approximation: TR_i = |close_i - close_{i-1}|.
    if period <= 0 or end < period + 1:
        return None
    total = 0.0
    for index in range(end - period, end):
        total += abs(prices[index] - prices[index - 1])
    return total / period


def _volatility_ending_at(prices: Sequence[float], period: int, end: int) -> Optional[float]:
    atr = _atr_ending_at(prices, period, end)
    if atr is None:
        return None
    last_price = prices[end - 1]
    if last_price <= 0:
        return None
    return atr / last_price


def average_true_range(prices: Sequence[float], period: int) -> Optional[float]:
    return _atr_ending_at(prices, period, len(prices))


def volatility_fraction(prices: Sequence[float], period: int) -> Optional[float]:
    """ATR as a fraction of the last price (0.02 = 2%)."""
    return _volatility_ending_at(prices, period, len(prices))


@dataclass(frozen=True)
class VolatilityFilter:
    period: int = 5
    floor: float = 0.003

    @staticmethod
    def default() -> "VolatilityFilter":
        return VolatilityFilter(period=5, floor=0.003)

    @staticmethod
    def from_history(prices: Sequence[float], period: int, percentile: float) -> Optional["VolatilityFilter"]:
        """Calibrate the floor to a percentile of historical volatility fractions.

        ``percentile`` is a fraction (0.4 = 40th percentile) and is clamped to
        [0, 1].
        """
        if len(prices) < period + 2:
            return None

        samples: list[float] = []
        for end in range(period + 1, len(prices) + 1):
            value = _volatility_ending_at(prices, period, end)
            if value is not None:
                samples.append(value)
        if not samples:
            return None

        samples.sort()
        rank = max(0.0, min(1.0, percentile))
        # Halves round up, not to even.
        index = int(math.floor((len(samples) - 1) * rank + 0.5))
        return VolatilityFilter(period=period, floor=samples[index])

    def fraction(self, prices: Sequence[float]) -> Optional[float]:
        return volatility_fraction(prices, self.period)


class Regime(str, Enum):
    TRENDING_UP = "TrendingUp"
    TRENDING_DOWN = "TrendingDown"
    SIDEWAYS = "Sideways"


@dataclass(frozen=True)
class RegimeFilter:
    # Defaults assume hourly candles: 200 ~ 8 days, 48 ~ 2 days.
    long_window: int = 200
    slope_window: int = 48
    min_trend_strength: float = 0.02
    min_range: float = 0.03

    def detect(self, prices: Sequence[float]) -> Regime:
        n = len(prices)
        if n < max(self.long_window, self.slope_window) + 1:
            return Regime.SIDEWAYS

        long_average = simple_moving_average(prices, self.long_window)
        if long_average is None or long_average <= 0:
            return Regime.SIDEWAYS

        start_price = prices[n - 1 - self.slope_window]
        end_price = prices[n - 1]
        if start_price <= 0:
            return Regime.SIDEWAYS

        trend = end_price / start_price - 1.0
        window = prices[n - 1 - self.slope_window :]
        price_range = (max(window) - min(window)) / long_average

        if abs(trend) < self.min_trend_strength or price_range < self.min_range:
            return Regime.SIDEWAYS
        if end_price > long_average and trend > 0:
            return Regime.TRENDING_UP
        if end_price < long_average and trend < 0:
            return Regime.TRENDING_DOWN
        return Regime.SIDEWAYS


def buy_and_hold_equity(samples: Sequence[Sample], initial_cash: float, initial_coin: float = 0.0) -> Optional[float]:
    if not samples:
        return None
    first = samples[0].price
    last = samples[-1].price
    if first <= 0:
        return None
    quantity = initial_cash / first + initial_coin
    return quantity * last
