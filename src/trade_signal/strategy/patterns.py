"""Price-pattern predicates.

Breakout detectors compare the last close against a reference window that
ends one candle before it, so the current candle never defines its own
high or low.
"""

from __future__ import annotations

from typing import Sequence

BREAKOUT_EPSILON = 1e-6


def _reference_window(prices: Sequence[float], lookback: int) -> Sequence[float] | None:
    if lookback <= 0 or len(prices) < lookback + 1:
        return None
    last_index = len(prices) - 1
    return prices[last_index - lookback : last_index]


def is_breakout_above_recent_high(prices: Sequence[float], lookback: int) -> bool:
    window = _reference_window(prices, lookback)
    if window is None:
        return False
    return prices[-1] > max(window) * (1.0 + BREAKOUT_EPSILON)


def is_breakdown_below_recent_low(prices: Sequence[float], lookback: int) -> bool:
    window = _reference_window(prices, lookback)
    if window is None:
        return False
    return prices[-1] < min(window) * (1.0 - BREAKOUT_EPSILON)


def is_pullback_and_bounce(prices: Sequence[float], moving_average: float, tolerance: float) -> bool:
    """Was above the average, dipped to within ``tolerance`` of it, then bounced."""
    if len(prices) < 3:
        return False
    p2, p1, p0 = prices[-3], prices[-2], prices[-1]
    was_above = p2 > moving_average
    pulled_back = p1 < p2 and p1 <= moving_average * (1.0 + tolerance)
    bounced = p0 > moving_average and p0 > p1
    return was_above and pulled_back and bounced


def is_pullback_and_reject(prices: Sequence[float], moving_average: float, tolerance: float) -> bool:
    """Was below the average, rallied to within ``tolerance`` of it, then rejected."""
    if len(prices) < 3:
        return False
    p2, p1, p0 = prices[-3], prices[-2], prices[-1]
    was_below = p2 < moving_average
    pulled_back = p1 > p2 and p1 >= moving_average * (1.0 - tolerance)
    rejected = p0 < moving_average and p0 < p1
    return was_below and pulled_back and rejected
