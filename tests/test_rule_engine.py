from datetime import datetime, timedelta, timezone

import pytest

from trade_signal.data import InsufficientDataError, Sample
from trade_signal.rule_engine import (
    NO_SIGNAL_REASON,
    Action,
    RuleOutcome,
    SignalContext,
    SignalEngine,
    analyze,
    decide,
)
from trade_signal.strategy import (
    BreakoutConfig,
    FilterConfig,
    MovingAverageConfig,
    MovingAverageSet,
    RegimeFilter,
    StrategyConfig,
    VolatilityFilter,
)

DOWNTREND = MovingAverageSet(short=95.0, long=100.0, prev_short=96.0, prev_long=101.0)
GOLDEN_CROSS = MovingAverageSet(short=101.0, long=100.0, prev_short=99.0, prev_long=100.0)
NO_FILTERS = FilterConfig(require_trend_filter=False, require_price_confirmation=False)


def test_breakdown_below_recent_low_sells():
    strategy = StrategyConfig(breakout=BreakoutConfig(lookback=5))
    decision = decide([100.0, 99.0, 98.0, 97.0, 96.0, 90.0], DOWNTREND, strategy)
    assert decision.action == Action.SELL
    assert "Breakdown below recent low" in decision.reason


def test_flat_series_held_by_volatility_floor():
    strategy = StrategyConfig(
        breakout=BreakoutConfig(lookback=5),
        enable_crossovers=True,
        enable_bias_only=True,
        filters=FilterConfig(
            require_trend_filter=False,
            require_price_confirmation=False,
            volatility=VolatilityFilter(period=5, floor=0.01),
        ),
    )
    mas = MovingAverageSet(short=101.0, long=100.0, prev_short=99.0, prev_long=100.0)
    decision = decide([100.0] * 40, mas, strategy)
    assert decision.action == Action.HOLD
    assert "Volatility too low" in decision.reason


def test_volatility_filter_without_enough_data_holds():
    strategy = StrategyConfig(filters=FilterConfig(volatility=VolatilityFilter(period=5, floor=0.0)))
    decision = decide([100.0, 101.0], GOLDEN_CROSS, strategy)
    assert decision.action == Action.HOLD
    assert decision.reason == "Not enough data for volatility filter"


def test_blocked_breakout_reports_veto_reason():
    strategy = StrategyConfig(breakout=BreakoutConfig(lookback=5))
    decision = decide([100.0, 100.0, 100.0, 100.0, 100.0, 105.0], DOWNTREND, strategy)
    assert decision.action == Action.HOLD
    assert decision.reason.startswith("Breakout above recent high (lookback 5) blocked:")
    assert "not in uptrend" in decision.reason


def test_blocked_reasons_are_joined():
    strategy = StrategyConfig(breakout=BreakoutConfig(lookback=3), enable_bias_only=True)
    decision = decide([100.0, 100.0, 100.0, 105.0], DOWNTREND, strategy)
    assert decision.action == Action.HOLD
    reasons = decision.reason.split("; ")
    assert len(reasons) == 2
    assert reasons[0].startswith("Breakout above recent high")
    assert reasons[1].startswith("Short bias")
    assert "price not below both moving averages" in reasons[1]


def test_golden_cross_fires_without_filters():
    strategy = StrategyConfig(filters=NO_FILTERS)
    decision = decide([100.0] * 10, GOLDEN_CROSS, strategy)
    assert decision.action == Action.BUY
    assert decision.reason.startswith("Golden cross")


def test_death_cross_fires_without_filters():
    mas = MovingAverageSet(short=99.0, long=100.0, prev_short=101.0, prev_long=100.0)
    decision = decide([100.0] * 10, mas, StrategyConfig(filters=NO_FILTERS))
    assert decision.action == Action.SELL
    assert decision.reason.startswith("Death cross")


def test_breakout_has_priority_over_crossover():
    strategy = StrategyConfig(breakout=BreakoutConfig(lookback=3), filters=NO_FILTERS)
    decision = decide([100.0, 100.0, 100.0, 110.0], GOLDEN_CROSS, strategy)
    assert decision.action == Action.BUY
    assert decision.reason == "Breakout above recent high (lookback 3)"


def test_bias_only_follows_average_ordering():
    strategy = StrategyConfig(enable_crossovers=False, enable_bias_only=True, filters=NO_FILTERS)
    mas = MovingAverageSet(short=101.0, long=100.0, prev_short=101.0, prev_long=100.0)
    decision = decide([100.0] * 10, mas, strategy)
    assert decision.action == Action.BUY
    assert decision.reason.startswith("Long bias")


def test_no_signal_reason_when_nothing_matches():
    flat = MovingAverageSet(short=100.0, long=100.0, prev_short=100.0, prev_long=100.0)
    decision = decide([100.0] * 10, flat, StrategyConfig())
    assert decision.action == Action.HOLD
    assert decision.reason == NO_SIGNAL_REASON


def test_regime_filter_vetoes_sideways_market():
    filters = FilterConfig(
        require_trend_filter=False,
        require_price_confirmation=False,
        regime=RegimeFilter(long_window=5, slope_window=3),
    )
    decision = decide([100.0] * 10, GOLDEN_CROSS, StrategyConfig(filters=filters))
    assert decision.action == Action.HOLD
    assert "regime is Sideways, not TrendingUp" in decision.reason


def test_signal_context_gates():
    context = SignalContext.build([90.0], DOWNTREND, FilterConfig())
    assert context.downtrend is True
    assert context.uptrend is False
    assert context.price_below_both is True
    assert context.veto(Action.SELL) is None
    assert context.veto(Action.BUY) == "not in uptrend (short MA above rising long MA required)"
    assert context.regime is None


def test_custom_rules_run_in_order():
    calls = []

    def first(prices, context, strategy):
        calls.append("first")
        return RuleOutcome.blocked("first blocked: nope")

    def second(prices, context, strategy):
        calls.append("second")
        return RuleOutcome.fired(Action.SELL, "second")

    def third(prices, context, strategy):
        calls.append("third")
        return RuleOutcome.fired(Action.BUY, "third")

    engine = SignalEngine(rules=[first, second, third])
    decision = engine.decide([100.0], GOLDEN_CROSS, StrategyConfig())
    assert decision.action == Action.SELL
    assert decision.reason == "second"
    assert calls == ["first", "second"]


def test_empty_prices_raise():
    with pytest.raises(InsufficientDataError):
        decide([], GOLDEN_CROSS, StrategyConfig())


def _samples(prices):
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [Sample(time=start + timedelta(hours=i), price=price) for i, price in enumerate(prices)]


def test_analyze_latest_sample():
    strategy = StrategyConfig(
        moving_averages=MovingAverageConfig(short_window=2, long_window=4),
        filters=NO_FILTERS,
    )
    samples = _samples([100.0, 100.0, 100.0, 100.0, 100.0, 110.0])
    analysis = analyze(samples, strategy)
    assert analysis.last == samples[-1]
    assert analysis.moving_averages.short == pytest.approx(105.0)
    assert analysis.decision.action == Action.BUY


def test_analyze_requires_long_window_history():
    strategy = StrategyConfig(moving_averages=MovingAverageConfig(short_window=2, long_window=4))
    with pytest.raises(InsufficientDataError) as excinfo:
        analyze(_samples([100.0] * 4), strategy)
    assert excinfo.value.required == 5
    assert excinfo.value.available == 4
