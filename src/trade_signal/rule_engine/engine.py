"""Prioritized signal rules with trend, price and regime gating."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from trade_signal.data.models import InsufficientDataError, Sample
from trade_signal.rule_engine.models import (
    Action,
    AnalysisResult,
    OutcomeKind,
    RuleOutcome,
    SignalContext,
    StrategyDecision,
)
from trade_signal.strategy.indicators import MovingAverageSet, moving_average_set
from trade_signal.strategy.models import FilterConfig, StrategyConfig
from trade_signal.strategy.patterns import (
    is_breakdown_below_recent_low,
    is_breakout_above_recent_high,
    is_pullback_and_bounce,
    is_pullback_and_reject,
)

Rule = Callable[[Sequence[float], SignalContext, StrategyConfig], RuleOutcome]
DecisionFn = Callable[[Sequence[float], MovingAverageSet, StrategyConfig], StrategyDecision]

NO_SIGNAL_REASON = "No clear breakout, pullback bounce/rejection, or crossover signal"
BLOCKED_SEPARATOR = "; "


def _gated(context: SignalContext, action: Action, label: str) -> RuleOutcome:
    veto = context.veto(action)
    if veto is not None:
        return RuleOutcome.blocked(f"{label} blocked: {veto}")
    return RuleOutcome.fired(action, label)


def breakout_rule(prices: Sequence[float], context: SignalContext, strategy: StrategyConfig) -> RuleOutcome:
    if strategy.breakout is None:
        return RuleOutcome.no_match()
    lookback = strategy.breakout.lookback
    if is_breakout_above_recent_high(prices, lookback):
        return _gated(context, Action.BUY, f"Breakout above recent high (lookback {lookback})")
    if is_breakdown_below_recent_low(prices, lookback):
        return _gated(context, Action.SELL, f"Breakdown below recent low (lookback {lookback})")
    return RuleOutcome.no_match()


def pullback_rule(prices: Sequence[float], context: SignalContext, strategy: StrategyConfig) -> RuleOutcome:
    if strategy.pullback is None:
        return RuleOutcome.no_match()
    short_average = context.moving_averages.short
    if is_pullback_and_bounce(prices, short_average, strategy.pullback.bounce_tolerance):
        return _gated(context, Action.BUY, "Pullback to short MA and bounce")
    if is_pullback_and_reject(prices, short_average, strategy.pullback.reject_tolerance):
        return _gated(context, Action.SELL, "Pullback up to short MA and rejection")
    return RuleOutcome.no_match()


def crossover_rule(prices: Sequence[float], context: SignalContext, strategy: StrategyConfig) -> RuleOutcome:
    if not strategy.enable_crossovers:
        return RuleOutcome.no_match()
    mas = context.moving_averages
    if mas.prev_short <= mas.prev_long and mas.short > mas.long:
        return _gated(context, Action.BUY, "Golden cross (short MA crossed above long MA)")
    if mas.prev_short >= mas.prev_long and mas.short < mas.long:
        return _gated(context, Action.SELL, "Death cross (short MA crossed below long MA)")
    return RuleOutcome.no_match()


def bias_rule(prices: Sequence[float], context: SignalContext, strategy: StrategyConfig) -> RuleOutcome:
    if not strategy.enable_bias_only:
        return RuleOutcome.no_match()
    mas = context.moving_averages
    if mas.short > mas.long:
        return _gated(context, Action.BUY, "Long bias (short MA above long MA)")
    if mas.short < mas.long:
        return _gated(context, Action.SELL, "Short bias (short MA below long MA)")
    return RuleOutcome.no_match()


DEFAULT_RULES: tuple[Rule, ...] = (breakout_rule, pullback_rule, crossover_rule, bias_rule)


def volatility_gate(prices: Sequence[float], filters: FilterConfig) -> Optional[StrategyDecision]:
    if filters.volatility is None:
        return None
    fraction = filters.volatility.fraction(prices)
    if fraction is None:
        return StrategyDecision(Action.HOLD, "Not enough data for volatility filter")
    if fraction < filters.volatility.floor:
        return StrategyDecision(
            Action.HOLD,
            f"Volatility too low ({fraction:.2%} < {filters.volatility.floor:.2%})",
        )
    return None


class SignalEngine:
    def __init__(self, rules: Sequence[Rule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def decide(
        self,
        prices: Sequence[float],
        moving_averages: MovingAverageSet,
        strategy: StrategyConfig,
    ) -> StrategyDecision:
        if not prices:
            raise InsufficientDataError(1, 0)

        gated = volatility_gate(prices, strategy.filters)
        if gated is not None:
            return gated

        context = SignalContext.build(prices, moving_averages, strategy.filters)
        blocked: list[str] = []
        for rule in self.rules:
            outcome = rule(prices, context, strategy)
            if outcome.kind == OutcomeKind.FIRED and outcome.action is not None:
                return StrategyDecision(outcome.action, outcome.reason)
            if outcome.kind == OutcomeKind.BLOCKED:
                blocked.append(outcome.reason)

        if blocked:
            return StrategyDecision(Action.HOLD, BLOCKED_SEPARATOR.join(blocked))
        return StrategyDecision(Action.HOLD, NO_SIGNAL_REASON)


_DEFAULT_ENGINE = SignalEngine()


def decide(
    prices: Sequence[float],
    moving_averages: MovingAverageSet,
    strategy: StrategyConfig,
) -> StrategyDecision:
    return _DEFAULT_ENGINE.decide(prices, moving_averages, strategy)


def analyze(samples: Sequence[Sample], strategy: StrategyConfig) -> AnalysisResult:
    """Decision for the most recent sample of ``samples``."""
    required = strategy.moving_averages.long_window + 1
    prices = [sample.price for sample in samples]
    moving_averages = moving_average_set(prices, strategy.moving_averages)
    if moving_averages is None:
        raise InsufficientDataError(required, len(prices))
    decision = decide(prices, moving_averages, strategy)
    return AnalysisResult(last=samples[-1], moving_averages=moving_averages, decision=decision)
