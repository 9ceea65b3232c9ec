"""Fractional spot-accumulation simulator with average cost basis."""

from __future__ import annotations

from typing import Optional, Sequence

from trade_signal.data.models import Sample
from trade_signal.monitoring.observers import SimulationObserver
from trade_signal.rule_engine.engine import DecisionFn, decide
from trade_signal.rule_engine.models import Action
from trade_signal.simulator.base import Backtester
from trade_signal.simulator.metrics import compute_max_drawdown, compute_total_return, compute_win_rate
from trade_signal.simulator.models import EquityPoint, SpotBacktestResult, Trade
from trade_signal.strategy.indicators import moving_average_set
from trade_signal.strategy.models import Candidate


class SpotBacktester(Backtester):
    """Buys with a fraction of cash and sells a fraction of held coin.

    Each sell realizes a ``Trade`` against a proportional share of the cost
    basis. Coin still held after the last sample is marked to market only.
    """

    def __init__(
        self,
        initial_cash: float,
        initial_coin: float = 0.0,
        fee_bps: float = 0.0,
        decision_fn: DecisionFn = decide,
        observer: Optional[SimulationObserver] = None,
    ) -> None:
        super().__init__(decision_fn=decision_fn, observer=observer)
        self.initial_cash = initial_cash
        self.initial_coin = initial_coin
        self.fee_bps = fee_bps

    def run(self, samples: Sequence[Sample], candidate: Candidate) -> SpotBacktestResult:
        self._require_history(samples, candidate)
        strategy = candidate.strategy
        fraction = candidate.clamped_fraction()
        fee_mult = 1.0 - self.fee_bps / 10_000.0

        first_price = max(samples[0].price, 0.0)
        initial_equity = self.initial_cash + self.initial_coin * first_price

        cash = self.initial_cash
        coin = self.initial_coin
        # Pre-held coin is booked at the first price with no fee.
        cost_basis_total = self.initial_coin * first_price
        in_position = coin > 0
        entry_time = samples[0].time
        avg_entry_price = first_price if coin > 0 else 0.0

        prices: list[float] = []
        equity_curve: list[EquityPoint] = []
        trades: list[Trade] = []

        for sample in samples:
            price = sample.price
            prices.append(price)
            equity_curve.append(EquityPoint(time=sample.time, equity=cash + coin * price))

            moving_averages = moving_average_set(prices, strategy.moving_averages)
            if moving_averages is None:
                continue

            decision = self.decision_fn(prices, moving_averages, strategy)

            if decision.action == Action.BUY:
                if fraction <= 0 or cash <= 0 or price <= 0:
                    continue
                invest_gross = cash * fraction
                invest_net = invest_gross * fee_mult
                quantity = invest_net / price
                if invest_gross <= 0 or quantity <= 0:
                    continue
                if not in_position and coin == 0:
                    in_position = True
                    entry_time = sample.time
                cash -= invest_gross
                coin += quantity
                cost_basis_total += invest_net
                avg_entry_price = cost_basis_total / coin if coin > 0 else 0.0

            elif decision.action == Action.SELL:
                if fraction <= 0 or coin <= 0 or price <= 0:
                    continue
                coin_before = coin
                sell_quantity = coin_before * fraction
                if sell_quantity <= 0:
                    continue
                exit_value = sell_quantity * price * fee_mult

                if cost_basis_total > 0:
                    chunk_basis = cost_basis_total * (sell_quantity / coin_before)
                    cost_basis_total -= chunk_basis
                    chunk_entry_price = chunk_basis / sell_quantity
                else:
                    chunk_basis = 0.0
                    chunk_entry_price = avg_entry_price

                cash += exit_value
                coin = coin_before - sell_quantity

                trade = Trade(
                    entry_time=entry_time,
                    exit_time=sample.time,
                    entry_price=chunk_entry_price,
                    exit_price=price,
                    entry_value=chunk_basis,
                    exit_value=exit_value,
                    profit=exit_value - chunk_basis,
                    return_pct=exit_value / chunk_basis - 1.0 if chunk_basis > 0 else 0.0,
                )
                trades.append(trade)
                self.observer.on_trade(trade)

                if coin <= 0:
                    in_position = False
                    coin = 0.0
                    cost_basis_total = 0.0
                    avg_entry_price = 0.0

        final_equity = cash + coin * samples[-1].price
        return SpotBacktestResult(
            candidate=candidate,
            initial_equity=initial_equity,
            final_equity=final_equity,
            equity_curve=equity_curve,
            total_return_pct=compute_total_return(initial_equity, final_equity),
            max_drawdown_pct=compute_max_drawdown(equity_curve),
            win_rate_pct=compute_win_rate(trade.profit for trade in trades),
            trades=trades,
            final_coin=coin,
        )
