from trade_signal.strategy import (
    is_breakdown_below_recent_low,
    is_breakout_above_recent_high,
    is_pullback_and_bounce,
    is_pullback_and_reject,
)


def test_breakout_excludes_current_sample_from_reference_window():
    assert is_breakout_above_recent_high([1.0, 1.0, 1.0, 1.0, 1.0, 5.0], 5) is True
    assert is_breakout_above_recent_high([1.0, 1.0, 1.0, 1.0, 1.0, 1.0], 5) is False


def test_breakout_extreme_inside_window_blocks_but_outside_triggers():
    inside = [1.0, 5.0, 1.0, 1.0, 1.0, 1.0, 4.0]
    outside = [5.0, 1.0, 1.0, 1.0, 1.0, 1.0, 4.0]
    assert is_breakout_above_recent_high(inside, 5) is False
    assert is_breakout_above_recent_high(outside, 5) is True


def test_breakdown_extreme_inside_window_blocks_but_outside_triggers():
    inside = [10.0, 2.0, 10.0, 10.0, 10.0, 10.0, 3.0]
    outside = [2.0, 10.0, 10.0, 10.0, 10.0, 10.0, 3.0]
    assert is_breakdown_below_recent_low(inside, 5) is False
    assert is_breakdown_below_recent_low(outside, 5) is True


def test_breakout_needs_lookback_plus_one_prices():
    assert is_breakout_above_recent_high([1.0, 1.0, 2.0], 3) is False
    assert is_breakdown_below_recent_low([1.0, 1.0, 0.5], 3) is False
    assert is_breakout_above_recent_high([1.0, 2.0], 0) is False


def test_pullback_and_bounce():
    assert is_pullback_and_bounce([102.0, 100.2, 101.0], 100.0, 0.003) is True
    # Dip never came close enough to the average.
    assert is_pullback_and_bounce([102.0, 101.0, 101.5], 100.0, 0.003) is False
    assert is_pullback_and_bounce([100.2, 101.0], 100.0, 0.003) is False


def test_pullback_and_reject():
    assert is_pullback_and_reject([98.0, 99.8, 99.0], 100.0, 0.003) is True
    assert is_pullback_and_reject([98.0, 99.0, 98.5], 100.0, 0.003) is False
    assert is_pullback_and_reject([99.8, 99.0], 100.0, 0.003) is False
