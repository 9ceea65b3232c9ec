"""Data models for signal evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from trade_signal.data.models import Sample
from trade_signal.strategy.indicators import MovingAverageSet, Regime
from trade_signal.strategy.models import FilterConfig


class Action(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


@dataclass(frozen=True)
class StrategyDecision:
    action: Action
    reason: str


class OutcomeKind(str, Enum):
    NO_MATCH = "no_match"
    BLOCKED = "blocked"
    FIRED = "fired"


@dataclass(frozen=True)
class RuleOutcome:
    kind: OutcomeKind
    action: Optional[Action] = None
    reason: str = ""

    @staticmethod
    def no_match() -> "RuleOutcome":
        return RuleOutcome(OutcomeKind.NO_MATCH)

    @staticmethod
    def blocked(reason: str) -> "RuleOutcome":
        return RuleOutcome(OutcomeKind.BLOCKED, reason=reason)

    @staticmethod
    def fired(action: Action, reason: str) -> "RuleOutcome":
        return RuleOutcome(OutcomeKind.FIRED, action=action, reason=reason)


@dataclass(frozen=True)
class SignalContext:
    """Per-step gate state shared by every rule."""

    last_price: float
    moving_averages: MovingAverageSet
    uptrend: bool
    downtrend: bool
    price_above_both: bool
    price_below_both: bool
    regime: Optional[Regime]
    filters: FilterConfig

    @staticmethod
    def build(prices: Sequence[float], moving_averages: MovingAverageSet, filters: FilterConfig) -> "SignalContext":
        last_price = prices[-1]
        mas = moving_averages
        regime = filters.regime.detect(prices) if filters.regime is not None else None
        return SignalContext(
            last_price=last_price,
            moving_averages=mas,
            uptrend=mas.short > mas.long and mas.long >= mas.prev_long,
            downtrend=mas.short < mas.long and mas.long <= mas.prev_long,
            price_above_both=last_price > mas.short and last_price > mas.long,
            price_below_both=last_price < mas.short and last_price < mas.long,
            regime=regime,
            filters=filters,
        )

    def veto(self, action: Action) -> Optional[str]:
        if action == Action.BUY:
            if self.filters.require_trend_filter and not self.uptrend:
                return "not in uptrend (short MA above rising long MA required)"
            if self.filters.require_price_confirmation and not self.price_above_both:
                return "price not above both moving averages"
            if self.filters.regime is not None and self.regime != Regime.TRENDING_UP:
                return f"regime is {self._regime_name()}, not TrendingUp"
            return None
        if action == Action.SELL:
            if self.filters.require_trend_filter and not self.downtrend:
                return "not in downtrend (short MA below falling long MA required)"
            if self.filters.require_price_confirmation and not self.price_below_both:
                return "price not below both moving averages"
            if self.filters.regime is not None and self.regime != Regime.TRENDING_DOWN:
                return f"regime is {self._regime_name()}, not TrendingDown"
            return None
        return None

    def _regime_name(self) -> str:
        return self.regime.value if self.regime is not None else Regime.SIDEWAYS.value


@dataclass(frozen=True)
class AnalysisResult:
    last: Sample
    moving_averages: MovingAverageSet
    decision: StrategyDecision
