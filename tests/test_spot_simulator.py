from datetime import datetime, timedelta, timezone

import pytest

from trade_signal.data import Sample
from trade_signal.monitoring import MemoryNotifier, NotifierObserver
from trade_signal.rule_engine import Action, StrategyDecision
from trade_signal.simulator import SpotBacktester
from trade_signal.strategy import Candidate, MovingAverageConfig, StrategyConfig

START = datetime(2024, 1, 1, tzinfo=timezone.utc)
SHORT_WINDOWS = StrategyConfig(moving_averages=MovingAverageConfig(short_window=2, long_window=3))


def _samples(prices):
    return [Sample(time=START + timedelta(hours=i), price=price) for i, price in enumerate(prices)]


def _scripted(actions):
    def decide(prices, moving_averages, strategy):
        return StrategyDecision(actions.get(len(prices), Action.HOLD), "scripted")

    return decide


def test_full_round_trip_without_fees():
    backtester = SpotBacktester(initial_cash=1000.0, decision_fn=_scripted({4: Action.BUY, 5: Action.SELL}))
    result = backtester.run(_samples([100.0, 100.0, 100.0, 100.0, 120.0]), Candidate(1.0, SHORT_WINDOWS))

    assert result.initial_equity == pytest.approx(1000.0)
    assert result.final_equity == pytest.approx(1000.0 + 10.0 * (120.0 - 100.0))
    assert len(result.trades) == 1
    trade = result.trades[0]
    assert trade.entry_value == pytest.approx(1000.0)
    assert trade.exit_value == pytest.approx(1200.0)
    assert trade.entry_price == pytest.approx(100.0)
    assert trade.profit == pytest.approx(200.0)
    assert trade.return_pct == pytest.approx(0.2)
    assert trade.entry_time == START + timedelta(hours=3)
    assert result.final_coin == 0.0
    assert result.win_rate_pct == pytest.approx(1.0)


def test_fees_reduce_both_legs():
    backtester = SpotBacktester(
        initial_cash=1000.0,
        fee_bps=100.0,
        decision_fn=_scripted({4: Action.BUY, 5: Action.SELL}),
    )
    result = backtester.run(_samples([100.0, 100.0, 100.0, 100.0, 100.0]), Candidate(1.0, SHORT_WINDOWS))
    trade = result.trades[0]
    assert trade.entry_value == pytest.approx(990.0)
    assert trade.exit_value == pytest.approx(990.0 * 0.99)
    assert result.final_equity == pytest.approx(990.0 * 0.99)
    assert trade.profit < 0


def test_partial_sells_allocate_cost_basis_proportionally():
    actions = {4: Action.BUY, 5: Action.BUY, 6: Action.SELL}
    backtester = SpotBacktester(initial_cash=1000.0, decision_fn=_scripted(actions))
    prices = [100.0, 100.0, 100.0, 100.0, 200.0, 150.0]
    result = backtester.run(_samples(prices), Candidate(0.5, SHORT_WINDOWS))

    # 500 buys 5 coin at 100, then 250 buys 1.25 coin at 200.
    coin_held = 5.0 + 1.25
    sold = coin_held * 0.5
    trade = result.trades[0]
    assert trade.entry_value == pytest.approx(750.0 * 0.5)
    assert trade.entry_price == pytest.approx(750.0 / coin_held)
    assert trade.exit_value == pytest.approx(sold * 150.0)
    assert result.final_coin == pytest.approx(coin_held - sold)


def test_open_coin_is_marked_to_market_not_closed():
    backtester = SpotBacktester(initial_cash=1000.0, decision_fn=_scripted({4: Action.BUY}))
    result = backtester.run(_samples([100.0, 100.0, 100.0, 100.0, 150.0]), Candidate(0.5, SHORT_WINDOWS))
    assert result.trades == []
    assert result.final_coin == pytest.approx(5.0)
    assert result.final_equity == pytest.approx(500.0 + 5.0 * 150.0)
    assert result.win_rate_pct == 0.0


def test_initial_coin_seeds_cost_basis_at_first_price():
    backtester = SpotBacktester(initial_cash=0.0, initial_coin=2.0, decision_fn=_scripted({4: Action.SELL}))
    result = backtester.run(_samples([50.0, 50.0, 50.0, 60.0]), Candidate(0.5, SHORT_WINDOWS))
    assert result.initial_equity == pytest.approx(100.0)
    trade = result.trades[0]
    assert trade.entry_price == pytest.approx(50.0)
    assert trade.entry_value == pytest.approx(50.0)
    assert trade.profit == pytest.approx(10.0)
    assert result.final_coin == pytest.approx(1.0)


def test_sell_without_coin_is_ignored():
    backtester = SpotBacktester(initial_cash=1000.0, decision_fn=_scripted({4: Action.SELL}))
    result = backtester.run(_samples([100.0, 100.0, 100.0, 100.0]), Candidate(0.5, SHORT_WINDOWS))
    assert result.trades == []
    assert result.final_equity == pytest.approx(1000.0)


def test_observer_receives_trades():
    notifier = MemoryNotifier()
    backtester = SpotBacktester(
        initial_cash=1000.0,
        decision_fn=_scripted({4: Action.BUY, 5: Action.SELL}),
        observer=NotifierObserver(notifier),
    )
    backtester.run(_samples([100.0, 100.0, 100.0, 100.0, 110.0]), Candidate(1.0, SHORT_WINDOWS))
    assert [event for event, _ in notifier.events] == ["trade"]
