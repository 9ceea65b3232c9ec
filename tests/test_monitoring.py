from datetime import datetime, timedelta, timezone

import pytest

from trade_signal.data import Sample
from trade_signal.monitoring import (
    AuditLog,
    AuditObserver,
    LogNotifier,
    MemoryNotifier,
    NotifierObserver,
    format_summary,
    serialize_result,
)
from trade_signal.rule_engine import Action, StrategyDecision
from trade_signal.simulator import PositionBacktester, SpotBacktester
from trade_signal.strategy import Candidate, MovingAverageConfig, StrategyConfig

START = datetime(2024, 1, 1, tzinfo=timezone.utc)
SHORT_WINDOWS = StrategyConfig(moving_averages=MovingAverageConfig(short_window=2, long_window=3))


def _samples(prices):
    return [Sample(time=START + timedelta(hours=i), price=price) for i, price in enumerate(prices)]


def _buy_on_fourth(prices, moving_averages, strategy):
    action = Action.BUY if len(prices) == 4 else Action.HOLD
    return StrategyDecision(action, "test entry")


def _position_result(observer=None):
    backtester = PositionBacktester(initial_cash=10000.0, decision_fn=_buy_on_fourth, observer=observer)
    return backtester.run(_samples([100.0, 100.0, 100.0, 100.0, 110.0]), Candidate(0.5, SHORT_WINDOWS))


def test_audit_log_appends_records(tmp_path):
    log = AuditLog(tmp_path / "nested" / "audit.jsonl", run_id="run-1", config_hash="abc")
    log.log("start", {"n": 1})
    log.log("stop", {"n": 2})
    records = log.read()
    assert [record["event"] for record in records] == ["start", "stop"]
    assert records[0]["run_id"] == "run-1"
    assert records[0]["config_hash"] == "abc"
    assert records[1]["payload"] == {"n": 2}
    assert [record["payload"]["n"] for record in log.read("stop")] == [2]


def test_audit_log_read_missing_file(tmp_path):
    assert AuditLog(tmp_path / "audit.jsonl").read() == []


def test_audit_observer_logs_closed_positions(tmp_path):
    log = AuditLog(tmp_path / "audit.jsonl")
    _position_result(observer=AuditObserver(log))
    records = log.read()
    assert len(records) == 1
    payload = records[0]["payload"]
    assert records[0]["event"] == "position_closed"
    assert payload["side"] == "long"
    assert payload["exit_reason"] == "EOF"
    assert payload["profit"] == pytest.approx(500.0)


def test_audit_observer_logs_spot_trades(tmp_path):
    def decide(prices, moving_averages, strategy):
        action = {4: Action.BUY, 5: Action.SELL}.get(len(prices), Action.HOLD)
        return StrategyDecision(action, "test")

    log = AuditLog(tmp_path / "audit.jsonl")
    backtester = SpotBacktester(initial_cash=1000.0, decision_fn=decide, observer=AuditObserver(log))
    backtester.run(_samples([100.0, 100.0, 100.0, 100.0, 110.0]), Candidate(1.0, SHORT_WINDOWS))
    records = log.read()
    assert [record["event"] for record in records] == ["trade"]
    assert records[0]["payload"]["profit"] == pytest.approx(100.0)


def test_log_notifier_prints_prefixed_line(capsys):
    LogNotifier(prefix="[test]").notify("progress", "1/2")
    assert capsys.readouterr().out == "[test] progress: 1/2\n"


def test_notifier_observer_reports_sweep_events():
    notifier = MemoryNotifier()
    observer = NotifierObserver(notifier)
    result = _position_result()
    observer.on_progress(5, 1, 10)
    observer.on_improvement(result.candidate, result)
    assert notifier.events[0] == ("progress", "5/10 jobs (50%), 1 failed")
    assert notifier.events[1][0] == "new_best"
    assert "return=5.00%" in notifier.events[1][1]


def test_format_summary():
    summary = format_summary(_position_result(), buy_and_hold=11000.0)
    assert summary.startswith("=== Backtest Summary ===")
    assert "Final equity:    10500.00" in summary
    assert "Total return:    5.00%" in summary
    assert "Positions:       1" in summary
    assert "Buy & hold:      11000.00" in summary


def test_serialize_result():
    payload = serialize_result(_position_result())
    assert payload["final_equity"] == pytest.approx(10500.0)
    assert payload["positions"][0]["side"] == "long"
    assert len(payload["equity_curve"]) == 5
    assert "equity_curve" not in serialize_result(_position_result(), include_curve=False)
